import os
from pathlib import Path

from decouple import Config, RepositoryEnv
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = next(p for p in Path(__file__).resolve().parents if (p / "main.py").exists())

# Determine which env file to load
env_file = os.getenv("ENV_FILE", ".env")
env_path = PROJECT_ROOT / env_file

# Only use RepositoryEnv if the env file exists
if env_path.exists():
    config = Config(RepositoryEnv(env_path))
else:
    # fallback: read directly from os.environ using decouple's AutoConfig
    from decouple import AutoConfig

    config = AutoConfig(search_path=None)


class Settings(BaseSettings):
    # App general
    DEBUG: bool = config("DEBUG", default=False, cast=bool)
    APP_NAME: str = config("APP_NAME", default="WAITLIST")
    APP_VERSION: str = config("APP_VERSION", default="1.0.0")
    ENVIRONMENT: str = config("ENVIRONMENT", default="dev")
    APP_PORT: int = config("APP_PORT", default=8000, cast=int)
    APP_URL: str = config("APP_URL", default="https://example.org")
    DEV_URL: str = config("DEV_URL", default="http://localhost:3000")

    # Database
    DB_TYPE: str = config("DB_TYPE", default="sqlite")
    DB_HOST: str = config("DB_HOST", default="localhost")
    DB_PORT: int = config("DB_PORT", default=5432, cast=int)
    DB_USER: str = config("DB_USER", default="user")
    DB_PASS: str = config("DB_PASS", default="password")
    DB_NAME: str = config("DB_NAME", default="waitlist")
    DB_ECHO: bool = config("DB_ECHO", default=False, cast=bool)

    # JWT sessions issued by the host auth service
    JWT_SECRET: str = config("JWT_SECRET", default="your-super-secret-jwt-key-change-in-production")
    JWT_ALGORITHM: str = config("JWT_ALGORITHM", default="HS256")
    JWT_EXPIRY_HOURS: int = config("JWT_EXPIRY_HOURS", default=24, cast=int)

    # Waitlist
    WAITLIST_REQUIRE_ADMIN: bool = config("WAITLIST_REQUIRE_ADMIN", default=True, cast=bool)
    WAITLIST_MAX_ENTRIES: int = config("WAITLIST_MAX_ENTRIES", default=0, cast=int)
    WAITLIST_ENABLED: bool = config("WAITLIST_ENABLED", default=True, cast=bool)
    WAITLIST_ALLOW_STATUS_CHECK: bool = config(
        "WAITLIST_ALLOW_STATUS_CHECK", default=True, cast=bool
    )
    WAITLIST_SHOW_POSITION: bool = config("WAITLIST_SHOW_POSITION", default=False, cast=bool)
    WAITLIST_MARK_INVITED_ON_APPROVE: bool = config(
        "WAITLIST_MARK_INVITED_ON_APPROVE", default=False, cast=bool
    )
    WAITLIST_RECALCULATE_POSITIONS: bool = config(
        "WAITLIST_RECALCULATE_POSITIONS", default=False, cast=bool
    )
    WAITLIST_POSITION_COUNT_SCOPE: str = config("WAITLIST_POSITION_COUNT_SCOPE", default="all")

    model_config = SettingsConfigDict(extra="allow")


settings = Settings()
