"""Protocol definitions for dependency injection and interface contracts."""

from typing import Any, Awaitable, Callable, Protocol

SchemaFetcher = Callable[[], Awaitable[Any]]


class TokenProvider(Protocol):
    """Protocol for authentication token providers."""

    async def get_token(self) -> str:
        """Get a valid bearer token.

        Returns:
            Valid bearer token string.

        Raises:
            TokenRefreshFailed: If a token cannot be obtained.
        """
        ...
