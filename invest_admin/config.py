"""
Application settings loaded from environment variables.

Uses pydantic-settings for type-safe configuration with .env file support.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Global application settings."""

    # App
    APP_NAME: str = "Invest Admin Console"
    APP_ENV: str = "development"
    DEBUG: bool = True

    # Platform API (the investment platform backend this console fronts)
    PLATFORM_API_URL: str = "http://localhost:8080/api"
    PLATFORM_API_TIMEOUT_SECONDS: float = 15.0
    ADMIN_DEVICE_ID: str = "admin-device-123456789"

    # Sessions
    AUTH_COOKIE_NAME: str = "auth_token"
    SESSION_TTL_SECONDS: int = 7 * 24 * 3600  # matches the 7-day auth cookie

    # Redis
    REDIS_URL: str = "redis://localhost:6379"
    REDIS_SSL: bool = False

    # List views
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100
    RECENT_ITEMS_LIMIT: int = 5
    ACTIVITY_FEED_LIMIT: int = 10

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
