from pydantic_settings import BaseSettings

from vocab2anki_core.exporters.formats import ExportFormat


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Export defaults
    default_deck_name: str = "vocab"
    default_format: ExportFormat = ExportFormat.APKG
    media_fetch_timeout: float = 30.0
    media_fetch_attempts: int = 3

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = True

    # CORS - accepts comma-separated origins or "*" for allow-all
    cors_origins: list[str] = ["http://localhost:3000"]
    cors_allow_all: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
