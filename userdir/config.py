"""
Application configuration using pydantic-settings.
Loads from environment variables with .env file support.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Security (defaults are for local demos only)
    jwt_secret: str = "demo-secret-key"
    jwt_expires_in: str = "24h"
    bcrypt_rounds: int = 12

    # Application
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR

    # API Settings
    api_prefix: str = "/api"
    project_name: str = "User Directory"
    version: str = "1.0.0"
    frontend_url: str = "http://localhost:3000"

    # Demo account created at startup
    seed_demo_user: bool = True
    demo_user_email: str = "admin@example.com"
    demo_user_password: str = "admin123"
    demo_user_name: str = "Administrator"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
