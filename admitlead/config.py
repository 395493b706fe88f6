"""
Application configuration using pydantic-settings.
Every field has a default so the app imports cleanly; production values come from the environment.
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    app_env: str = "development"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_base_url: str = "http://localhost:8000"
    log_level: str = "INFO"
    allowed_origins: str = ""  # Comma-separated CORS origins

    # Database
    database_url: str = "postgresql+asyncpg://localhost:5432/admitlead"
    database_pool_size: int = 10
    database_max_overflow: int = 5

    # Tally webhook shared secrets (empty = endpoint accepts unauthenticated calls)
    tally_webhook_secret: str = ""
    tally_c_webhook_secret: str = ""

    # Solapi (SMS/LMS)
    solapi_api_key: str = ""
    solapi_api_secret: str = ""
    solapi_sender_phone: str = ""
    solapi_api_url: str = "https://api.solapi.com"
    solapi_timeout_seconds: float = 10.0

    # Sentry
    sentry_dsn: str = ""

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
