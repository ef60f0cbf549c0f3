"""
Application configuration loaded from environment variables.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Capture Plan server configuration."""

    model_config = SettingsConfigDict(env_prefix="CP_", env_file=".env", extra="ignore")

    # Database (unset means the store is not configured)
    database_url: Optional[str] = None
    database_echo: bool = False
    create_schema: bool = False

    # Redis (session revocation list)
    redis_url: str = "redis://localhost:6379/0"

    # Security
    secret_key: str = "CHANGE_ME_IN_PRODUCTION"
    jwt_algorithm: str = "HS256"
    session_expire_minutes: int = 60 * 24 * 7
    invitation_expire_hours: int = 48
    session_cookie: str = "cp_session"
    csrf_cookie: str = "cp_csrf"
    cookie_secure: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Logging
    log_level: str = "info"
    log_format: Literal["json", "text"] = "json"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]


@lru_cache
def get_settings() -> Settings:
    return Settings()
