"""Application settings and configuration."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True
    )

    # Application
    app_name: str = "Profiling Bot"
    debug: bool = False
    environment: str = "production"
    host: str = "0.0.0.0"
    port: int = 8000

    # Telegram Bot
    telegram_bot_token: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("TELEGRAM_BOT_TOKEN", "BOT_TOKEN")
    )
    telegram_webhook_url: Optional[str] = None
    telegram_webhook_path: str = "/webhook"
    telegram_webhook_secret: Optional[str] = None

    # Quiz configuration
    quiz_config_dir: str = Field(
        default="./config",
        validation_alias=AliasChoices("QUIZ_CONFIG_DIR", "CONFIG_PATH")
    )
    quiz_config_cache_ttl: Optional[float] = None

    # Storage
    storage_backend: Literal["sql", "memory"] = "sql"
    database_url: str = "sqlite+aiosqlite:///./data/profiling_bot.db"
    active_session_ttl_hours: Optional[float] = 24

    # Presentation
    display_timezone: str = "Europe/Moscow"

    # Monitoring
    log_level: str = "INFO"
    log_json: bool = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
