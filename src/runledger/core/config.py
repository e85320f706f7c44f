"""Configuration management using Pydantic settings."""

from functools import lru_cache
from typing import Optional

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


MEMORY_BACKEND = "memory"
DATABASE_BACKEND = "database"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "runledger"
    VERSION: str = "1.0.0"

    # Persistence
    DATABASE_URL: Optional[str] = Field(default=None)
    PERSISTENCE_BACKEND: Optional[str] = Field(default=None)
    DATABASE_ISOLATION_LEVEL: str = Field(default="SERIALIZABLE")
    SQL_ECHO: bool = Field(default=False)
    MAX_CONNECTIONS_COUNT: int = Field(default=10)

    # Reject status changes outside the run transition table
    STRICT_RUN_TRANSITIONS: bool = Field(default=False)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    @field_validator("PERSISTENCE_BACKEND")
    @classmethod
    def normalize_backend(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip().lower() or None

    @computed_field
    @property
    def BACKEND(self) -> str:
        """Resolve the persistence backend, defaulting on DATABASE_URL."""
        if self.PERSISTENCE_BACKEND:
            return self.PERSISTENCE_BACKEND
        return DATABASE_BACKEND if self.DATABASE_URL else MEMORY_BACKEND


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
