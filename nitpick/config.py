"""
Application configuration settings.
Loads environment variables and provides typed access to all config values.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Groups:
    - Application and logging
    - Database
    - JWT authentication
    - Rate limiting
    - Submission lifecycle and engagement windows
    """

    # Application
    app_name: str = "Nitpick"
    debug: bool = False
    demo_mode: bool = True  # Set to True to disable authentication for demo
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./nitpick.db"

    # JWT Authentication
    jwt_secret_key: str = "your-super-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7  # 7 days

    # Rate Limiting
    rate_limit_enabled: bool = True
    rate_limit_submissions_per_hour: int = 30
    rate_limit_likes_per_minute: int = 60
    redis_url: str = ""  # Optional Redis URL for distributed rate limiting

    # Submission queries
    aging_threshold_days: int = 21  # 3 weeks
    recent_window_days: int = 7
    hello_world_slug: str = "hello-world"

    # Trending
    trending_limit: int = 10
    trending_timeframe_hours: int = 24 * 7

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
