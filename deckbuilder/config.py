from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "DeckBuilder"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/deckbuilder"

    scryfall_api_url: str = "https://api.scryfall.com"
    card_search_timeout: float = 10.0
    user_agent: str = "DeckBuilder/1.0"

    # How many times a deck-line insert that lost a uniqueness race is
    # retried as an increment before ConflictError is raised
    conflict_retries: int = 1


settings = Settings()
