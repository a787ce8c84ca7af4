"""
Application settings and configuration
"""
from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings from environment variables"""

    # Basic app settings
    DEBUG: bool = Field(default=False)
    APP_NAME: str = Field(default="Barbershop Availability Service")

    # Server settings
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)
    ALLOWED_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    # Database settings
    DATABASE_URL: str = Field(default="sqlite:///./barbershop.db")
    DB_POOL_SIZE: int = Field(default=10)
    DB_MAX_OVERFLOW: int = Field(default=20)
    AUTO_CREATE_TABLES: bool = Field(default=False)

    # Scheduling defaults
    DEFAULT_TIMEZONE: str = Field(default="America/Sao_Paulo")
    DEFAULT_OPEN_TIME: str = Field(default="09:00")
    DEFAULT_CLOSE_TIME: str = Field(default="19:00")
    DEFAULT_SLOT_GRANULARITY_MINUTES: int = Field(default=30, gt=0)
    BOOKING_CHANGE_CUTOFF_MINUTES: int = Field(default=60, ge=0)  # edit/cancel lock

    # Monitoring settings
    LOG_LEVEL: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # allows extra env vars without breaking
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Convenience accessor for settings
settings = get_settings()
