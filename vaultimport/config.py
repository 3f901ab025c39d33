from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "vaultimport"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///vault.db"

    # Scryfall API terms require a descriptive User-Agent and 50-100ms between requests
    scryfall_api_url: str = "https://api.scryfall.com"
    scryfall_user_agent: str = "vaultimport/1.0"
    scryfall_timeout: float = 30.0
    scryfall_rate_limit_delay: float = 0.1

    # Uploads above this are rejected before parsing
    max_upload_bytes: int = 10 * 1024 * 1024

    # Cards listed per set in a preview before the set is marked truncated
    preview_sample_size: int = 50

    # Preview rows above this mark the whole preview as truncated
    preview_row_limit: int = 500


settings = Settings()
