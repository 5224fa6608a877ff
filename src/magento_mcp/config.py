"""Configuration management."""

import logging
import os
from functools import cache

from pydantic import ConfigDict, Field, SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings

from .consts import (
    SCHEMA_CACHE_FILENAME,
    SCHEMA_CACHE_TTL_SECONDS,
    SCHEMA_URL_PATH,
    TOKEN_REFRESH_BUFFER_SECONDS,
    TOKEN_URL_PATH,
)


class Config(BaseSettings):
    """Configuration with computed API endpoints."""

    model_config = ConfigDict(
        env_prefix="MAGENTO_MCP_", case_sensitive=False, extra="ignore"
    )
    base_url: str = Field(
        default="",
        description="Base URL of the Magento store, e.g. https://shop.example.com",
    )
    token: str | None = Field(
        default=None, description="Static integration bearer token"
    )
    admin_username: str | None = Field(
        default=None, description="Admin username for token exchange"
    )
    admin_password: SecretStr | None = Field(
        default=None, description="Admin password for token exchange"
    )
    cache_dir: str = Field(
        default="~/.cache/magento-mcp",
        description="Directory holding the schema cache file",
    )
    schema_cache_ttl_seconds: int = Field(
        default=SCHEMA_CACHE_TTL_SECONDS,
        gt=0,
        description="How long a cached schema stays fresh",
    )
    token_refresh_buffer_seconds: int = Field(
        default=TOKEN_REFRESH_BUFFER_SECONDS,
        ge=0,
        description="Refresh the admin token this long before it expires",
    )
    log_level: str = Field(
        default="INFO",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
        description="Logging level",
    )
    timeout_seconds: int = Field(
        default=30, gt=0, le=300, description="HTTP request timeout in seconds"
    )
    verify_ssl: bool = Field(
        default=True,
        description="Verify TLS certificates (disable for self-signed dev stores)",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @computed_field
    @property
    def token_url(self) -> str:
        """URL for exchanging admin credentials for a token."""
        return f"{self.base_url}{TOKEN_URL_PATH}"

    @computed_field
    @property
    def schema_url(self) -> str:
        """URL for the full REST schema."""
        return f"{self.base_url}{SCHEMA_URL_PATH}"

    @computed_field
    @property
    def schema_cache_file(self) -> str:
        """Path of the single schema cache slot."""
        return os.path.join(os.path.expanduser(self.cache_dir), SCHEMA_CACHE_FILENAME)

    @property
    def has_admin_credentials(self) -> bool:
        return bool(self.admin_username and self.admin_password)


@cache
def get_config() -> Config:
    """Get a cached Config instance."""
    return Config()


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """Configure logging for the entire application.

    Logs go to stderr; stdout belongs to the stdio transport.
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,  # Override any existing configuration
    )
    return logging.getLogger("magento-mcp")
