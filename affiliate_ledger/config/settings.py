"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
Settings are constructed explicitly through get_settings() and passed to the
components that need them (engine factory, notifier, task workers).
"""

from decimal import Decimal
from functools import lru_cache

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from affiliate_ledger.config.business_constants import DEFAULT_COMMISSION_RATE


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Redis (dramatiq broker for fire-and-forget notifications)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Telegram admin alerts
    telegram_bot_token: str | None = None
    admin_telegram_ids: str = ""  # Comma-separated list

    # SMTP
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = Field(default=587, ge=1, le=65535)
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from_email: str = ""
    smtp_from_name: str = "Affiliate Program"
    smtp_use_tls: bool = True

    # Affiliate program
    default_commission_rate: Decimal = Field(
        default=DEFAULT_COMMISSION_RATE,
        ge=0,
        le=1,
        description="Commission rate assigned to newly registered affiliates",
    )

    # Application
    environment: str = "production"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(("postgresql", "sqlite")):
            raise ValueError(
                "DATABASE_URL must be a postgresql:// or sqlite:// URL"
            )
        return v

    @property
    def email_enabled(self) -> bool:
        """SMTP delivery is configured."""
        return bool(self.smtp_user and self.smtp_password)

    @property
    def sender_address(self) -> str:
        """From address for outgoing email."""
        return self.smtp_from_email or self.smtp_user

    def get_admin_ids(self) -> list[int]:
        """Parse admin IDs from comma-separated string with error handling."""
        if not self.admin_telegram_ids:
            return []

        result = []
        for id_ in self.admin_telegram_ids.split(","):
            id_stripped = id_.strip()
            if not id_stripped:
                continue
            try:
                result.append(int(id_stripped))
            except ValueError:
                logger.warning(f"Invalid admin ID: {id_stripped}")
                continue
        return result


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
