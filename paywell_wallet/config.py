"""Configuration for the paywell wallet store."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Wallet store configuration.

    All settings can be overridden via environment variables.
    """

    # Service configuration
    SERVICE_NAME: str = Field(default="paywell-wallet")
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )

    # Key namespace
    PREFIX: str = Field(default="paywell", min_length=1)

    # Redis
    REDIS_URL: str = Field(default="redis://localhost:6379/0")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, ge=1)
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, ge=1)
    REDIS_CONNECT_TIMEOUT: int = Field(default=5, ge=1)
    REDIS_MAX_RETRIES: int = Field(default=3, ge=0)

    # Collections
    COLLECTION: str = Field(default="wallets", min_length=1)
    QUEUE: str = Field(default="wallets", min_length=1)

    # Phone numbers
    COUNTRY: str = Field(default="TZ", min_length=2, max_length=2)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("COUNTRY")
    @classmethod
    def normalize_country(cls, v: str) -> str:
        """Country codes are ISO alpha-2, upper case."""
        return v.strip().upper()


settings = Settings()
