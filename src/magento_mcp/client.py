"""Magento client — handles low-level API calls."""

import json
import logging
from functools import cache
from typing import Any

import httpx

from .auth import AuthManager
from .config import Config, get_config
from .consts import JSON_MIME_TYPE, USER_AGENT
from .exceptions import ConfigError
from .protocols import TokenProvider

logger = logging.getLogger("magento-mcp.client")


class MagentoClient:
    """Magento REST API client with authentication.

    Responsibilities:
    - Attach a bearer token to every request
    - Provide JSON fetch and raw REST proxy methods
    """

    def __init__(
        self,
        config: Config | None = None,
        token_provider: TokenProvider | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize MagentoClient.

        Args:
            config: Config instance. If None, uses get_config().
            token_provider: Authentication token provider. If None, creates AuthManager.
            http_client: HTTP client. If None, creates a new one.

        Raises:
            ConfigError: If no base URL or no credentials are configured.
        """
        self.config = config or get_config()
        if not self.config.base_url:
            raise ConfigError(
                "Magento URL is required",
                suggestions=["Set MAGENTO_MCP_BASE_URL or pass the URL as an argument"],
            )

        self.http_client = http_client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=self.config.timeout_seconds,
            verify=self.config.verify_ssl,
            follow_redirects=True,
        )

        self.token_provider = token_provider or AuthManager(
            self.config, self.http_client
        )

        logger.info(f"Magento client created for {self.config.base_url}")

    async def _auth_headers(self) -> dict[str, str]:
        token = await self.token_provider.get_token()
        return {"Authorization": f"Bearer {token}".replace('"', "")}

    async def get_json(self, url: str, **kwargs) -> Any:
        """Get JSON from URL with authentication.

        Args:
            url: Complete URL to fetch.
            **kwargs: Additional arguments for httpx.get.

        Returns:
            Parsed JSON data.

        Raises:
            TokenRefreshFailed: From auth if no token can be obtained.
            httpx.HTTPStatusError: For HTTP 4xx/5xx responses.
            httpx.RequestError: For network errors, timeouts, DNS failures.
        """
        headers = kwargs.pop("headers", {})
        headers.update(await self._auth_headers())

        logger.debug(f"GET {url}")
        response = await self.http_client.get(url, headers=headers, **kwargs)
        response.raise_for_status()
        logger.debug(f"GET {url} successful")
        return response.json()

    async def request(
        self,
        method: str,
        path: str,
        body: str | None = None,
        query: str = "",
    ) -> dict[str, Any]:
        """Proxy an arbitrary REST call to the store.

        HTTP error statuses are not raised: Magento puts useful messages in
        its error bodies, so the caller gets them back as data.

        Args:
            method: HTTP method.
            path: REST path starting with /rest.
            body: JSON document as a string, or None/empty for no body.
            query: Query string starting with ?, or empty.

        Returns:
            Dict with the response status code and parsed body.

        Raises:
            TokenRefreshFailed: From auth if no token can be obtained.
            json.JSONDecodeError: If body is not valid JSON.
            httpx.RequestError: For network errors, timeouts, DNS failures.
        """
        method = method.upper()
        url = f"{self.config.base_url}{path}{query or ''}"

        headers = {"Accept": JSON_MIME_TYPE}
        if method != "GET":
            headers["Content-Type"] = JSON_MIME_TYPE
        headers.update(await self._auth_headers())

        payload = json.loads(body) if body else None

        logger.debug(f"{method} {url}")
        response = await self.http_client.request(
            method, url, headers=headers, json=payload
        )
        logger.debug(f"{method} {url} returned {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Failed to parse API response: {e}")
            data = {"error": "Failed to parse response", "raw": response.text}

        return {"status_code": response.status_code, "body": data}

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.http_client.aclose()


@cache
def get_client() -> MagentoClient:
    """Get a cached MagentoClient instance with default configuration.

    Raises:
        ConfigError: If the default configuration lacks a URL or credentials.
    """
    return MagentoClient()
