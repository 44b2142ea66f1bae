"""Application configuration from environment."""
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from env / .env."""

    app_name: str = "First Aid Trainer"
    debug: bool = False
    log_level: str = "INFO"

    # Database (async driver; Alembic converts to a sync url)
    database_url: str = "sqlite+aiosqlite:///./first_aid_trainer.db"
    create_tables_on_startup: bool = True
    seed_on_startup: bool = True

    # JWT bearer tokens
    secret_key: str = "change-me-in-production-use-env"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def get_settings() -> Settings:
    return Settings()


# Project root (parent of app/)
BASE_DIR = Path(__file__).resolve().parent.parent.parent
