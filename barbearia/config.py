# barbearia/config.py

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./barbearia.db"

    # Security
    SECRET_KEY: str = "change-me-later"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Booking rules
    SLOT_DURATION_MINUTES: int = Field(default=45, gt=0)
    TIMEZONE: str = "America/Sao_Paulo"  # civil time of the shop
    CLIENT_CANCEL_MIN_HOURS: int = Field(default=12, ge=0)

    # First barber, created at startup when both are set. Sign-up only makes clients.
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None
    ADMIN_NAME: str = "Barbeiro"

    # Server
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # Development
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parent.parent / ".env",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
