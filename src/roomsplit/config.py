"""Configuration management for RoomSplit."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ROOMSPLIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Room API (optional remote ledger)
    api_base_url: str | None = None
    api_token: str | None = None

    # Analytics settings
    trend_months: int = 6  # Months of history shown by `trends`

    # Database path
    database_path: Path = Path.home() / ".roomsplit" / "roomsplit.db"

    def __init__(self, **kwargs):
        """Initialize settings and create database directory if needed."""
        super().__init__(**kwargs)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)


def load_settings() -> Settings:
    """Load application settings from environment variables."""
    try:
        return Settings()
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Check your ROOMSPLIT_* environment "
            f"variables or .env file.\n"
            f"Error: {e}"
        ) from e
