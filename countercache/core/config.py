from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict


# Load .env early for local development
load_dotenv()


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True)

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./countercache.db")
    sql_echo: bool = os.getenv("SQL_ECHO", "false").lower() in {"1", "true", "yes"}

    # Operator API; empty token disables the /counters routes
    admin_token: str = os.getenv("ADMIN_TOKEN", "")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_dir: str = os.getenv("LOG_DIR", "./logs")


settings = Settings()
