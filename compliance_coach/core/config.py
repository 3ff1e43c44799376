from functools import lru_cache
from typing import List, Optional
import logging

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import AppSettings, Environment
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment + defaults"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    ENVIRONMENT: Environment = Field(
        default=AppSettings.ENVIRONMENT,
        validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV"),
    )

    AZURE_OPENAI_KEY: Optional[SecretStr] = None
    AZURE_OPENAI_ENDPOINT: str = AppSettings.AZURE_OPENAI_ENDPOINT
    UPSTREAM_TIMEOUT: float = Field(default=AppSettings.UPSTREAM_TIMEOUT, gt=0)
    UPSTREAM_MAX_ATTEMPTS: int = Field(
        default=AppSettings.UPSTREAM_MAX_ATTEMPTS, ge=1)

    HOST: str = AppSettings.HOST
    PORT: int = AppSettings.PORT
    ALLOWED_ORIGINS: str = AppSettings.ALLOWED_ORIGINS
    RATE_LIMIT: int = Field(default=AppSettings.RATE_LIMIT, ge=1)
    RATE_LIMIT_WINDOW_SECONDS: int = Field(
        default=AppSettings.RATE_LIMIT_WINDOW_SECONDS, ge=1)
    LOG_LEVEL: str = AppSettings.LOG_LEVEL
    FAIL_FAST: bool = True

    @field_validator("ENVIRONMENT", mode="before")
    @classmethod
    def normalize_environment(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("AZURE_OPENAI_KEY", mode="before")
    @classmethod
    def blank_key_is_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT is Environment.PRODUCTION

    @property
    def api_key_configured(self) -> bool:
        return self.AZURE_OPENAI_KEY is not None

    @property
    def cors_origins(self) -> List[str]:
        """ALLOWED_ORIGINS as a list; '*' stays permissive"""
        raw = (self.ALLOWED_ORIGINS or "").strip()
        if not raw or raw == "*":
            return ["*"]
        return [o.strip() for o in raw.split(",") if o.strip()]

    def check_startup(self) -> None:
        """
        Refuse to serve traffic in production without a credential.

        Raises:
            ConfigurationError: production mode and no AZURE_OPENAI_KEY
        """
        if self.api_key_configured:
            return
        logger.error("AZURE_OPENAI_KEY is not configured")
        if self.is_production:
            raise ConfigurationError(
                "Cannot start in production without AZURE_OPENAI_KEY")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
