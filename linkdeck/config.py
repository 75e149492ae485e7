from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="LINKDECK_")

    app_name: str = "LinkDeck"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///./linkdeck.db"

    # Local key-value store (JsonFileStore) location
    local_store_path: str = "./linkdeck-store.json"

    github_api_url: str = "https://api.github.com"
    github_token: str = ""
    metadata_timeout: float = 10.0

    anthropic_api_key: str = ""
    polish_model: str = "claude-sonnet-4-20250514"
    polish_max_tokens: int = 1024


settings = Settings()
