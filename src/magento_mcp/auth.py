"""Authentication management with token refresh."""

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Literal

import httpx

from .config import Config
from .exceptions import ConfigError, InvalidTokenFormat, TokenRefreshFailed
from .tokens import decode_token_expiry

logger = logging.getLogger("magento-mcp.auth")


class AuthManager:
    """Bearer token lifecycle manager.

    Responsibilities:
    - Pick static or dynamic mode from the configured credentials
    - Exchange admin credentials for a token, refreshing ahead of expiry
    - Coalesce concurrent refreshes into a single request

    Dynamic mode moves between three states: no token, a valid token, and a
    refresh in flight (the lock is held).
    """

    def __init__(
        self,
        config: Config,
        http_client: httpx.AsyncClient,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize AuthManager.

        Args:
            config: Config instance with auth settings.
            http_client: HTTP client (for token requests only)
            clock: Returns the current time in epoch seconds.

        Raises:
            ConfigError: If neither admin credentials nor a token are configured.
        """
        self.config = config
        self.http_client = http_client
        self._clock = clock
        self._refresh_buffer_ms = config.token_refresh_buffer_seconds * 1000
        self._lock = asyncio.Lock()
        self._access_token: str | None = None
        self._token_expires_at: int | None = None

        if config.has_admin_credentials:
            self._mode = "dynamic"
        elif config.token:
            self._mode = "static"
        else:
            raise ConfigError(
                "No admin credentials or token provided",
                suggestions=[
                    "Set MAGENTO_MCP_ADMIN_USERNAME and MAGENTO_MCP_ADMIN_PASSWORD",
                    "Or set MAGENTO_MCP_TOKEN to an integration access token",
                ],
            )
        logger.debug(f"Using {self._mode} token mode")

    @property
    def mode(self) -> Literal["static", "dynamic"]:
        return self._mode

    @property
    def expires_at(self) -> int | None:
        """Expiry of the held token in epoch milliseconds, if known."""
        return self._token_expires_at

    async def get_token(self) -> str:
        """Get a valid bearer token.

        Returns:
            Valid bearer token string.

        Raises:
            TokenRefreshFailed: If a new token cannot be obtained.
        """
        if self._mode == "static":
            return self.config.token

        if self._needs_refresh():
            async with self._lock:
                # Another caller may have refreshed while we waited
                if self._needs_refresh():
                    await self._refresh_token()
        else:
            logger.debug("Using existing token")

        return self._access_token

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _needs_refresh(self) -> bool:
        """Check if token needs refresh."""
        if self._access_token is None or self._token_expires_at is None:
            return True
        return self._now_ms() >= self._token_expires_at - self._refresh_buffer_ms

    async def _refresh_token(self) -> None:
        """Exchange admin credentials for a new token."""
        logger.debug(f"Refreshing authentication token from {self.config.token_url}")

        # Drop the old token first so a failure never leaves it in place
        self._access_token = None
        self._token_expires_at = None

        try:
            response = await self.http_client.post(
                self.config.token_url,
                json={
                    "username": self.config.admin_username,
                    "password": self.config.admin_password.get_secret_value(),
                },
                headers={"Content-Type": "application/json"},
            )
        except httpx.RequestError as e:
            logger.error(f"Token request failed: {e}")
            raise TokenRefreshFailed(
                "Unable to obtain valid token",
                errors=[f"Network error: {e}"],
                suggestions=["Check the Magento base URL and network access"],
                context={"token_url": self.config.token_url},
            ) from e

        if response.is_error:
            logger.error(f"Token fetch failed body: {response.text}")
            raise TokenRefreshFailed(
                "Unable to obtain valid token",
                errors=[
                    f"Failed to fetch token: {response.status_code} "
                    f"{response.reason_phrase} - {response.text}"
                ],
                suggestions=["Verify the admin username and password"],
                context={
                    "token_url": self.config.token_url,
                    "status_code": response.status_code,
                },
            )

        # Magento answers with a JSON string literal, i.e. the token in quotes
        token = response.text.strip().strip('"')

        try:
            expires_at = decode_token_expiry(token)
        except InvalidTokenFormat as e:
            logger.error("Token server returned a malformed token")
            raise TokenRefreshFailed(
                "Unable to obtain valid token",
                errors=[e.message, *e.errors],
                suggestions=["Check that the Magento instance issues JWT admin tokens"],
                context={"token_url": self.config.token_url},
            ) from e

        self._access_token = token
        self._token_expires_at = expires_at
        logger.info("Token refreshed successfully")
        logger.debug(f"Token length: {len(token)}, expires at {expires_at} ms")
