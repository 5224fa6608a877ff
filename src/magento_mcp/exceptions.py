"""Magento MCP custom exceptions.

Exception Design Principles:
1. Credential failures propagate to the caller that needed a token, there is
   no safe fallback (ConfigError, TokenRefreshFailed)
2. Cache and search failures are absorbed where they happen and degrade to a
   refetch or an empty result (CacheCorrupted, InvalidSearchPattern)
3. Lookup and argument failures on the MCP surface are reported to the client
   (NotFoundError, InvalidToolArguments)
"""


class MagentoMCPError(Exception):
    """Base exception for all Magento MCP errors.

    Provides rich context and actionable suggestions beyond standard exceptions.
    All Magento MCP custom exceptions inherit from this base class.
    """

    def __init__(
        self,
        message: str,  # the error message
        *,
        errors: list[str] = None,  # detailed list of errors (if available)
        suggestions: list[str] = None,  # remedial actions
        context: dict = None,  # additional detailed context
    ):
        """Initialize MagentoMCPError.

        Args:
            message: Primary error message for users
            errors: List of specific error details
            suggestions: List of actionable suggestions for resolution
            context: Additional context information as key-value pairs
        """
        super().__init__(message)
        self.message = message
        self.errors = errors or []
        self.suggestions = suggestions or []
        self.context = context or {}


class ConfigError(MagentoMCPError):
    """Application configuration errors - fatal at startup.

    Raised when neither admin credentials nor a static token are configured,
    or when the Magento base URL is missing. Recoverable only by the user
    changing the environment or command line outside the session.
    """

    pass


class InvalidTokenFormat(MagentoMCPError):
    """The bearer token is not a decodable JWT with a numeric ``exp`` claim."""

    pass


class TokenRefreshFailed(MagentoMCPError):
    """Credential exchange failed - network, HTTP status, or token format.

    Surfaces to the operation that needed a token. The manager holds no token
    afterwards, so the next call retries the exchange.
    """

    pass


class CacheCorrupted(MagentoMCPError):
    """Stored schema cache record is unreadable or malformed.

    Never raised to callers of the schema store; a corrupted record is
    treated exactly like a cache miss.
    """

    pass


class InvalidSearchPattern(MagentoMCPError):
    """A ``/pattern/flags`` search query does not compile.

    Absorbed by the search engine, which returns an empty result instead.
    """

    pass


class NotFoundError(MagentoMCPError):
    """Unknown resource URI or tool name requested over MCP."""

    pass


class InvalidToolArguments(MagentoMCPError):
    """A tool call is missing a required argument or has one of the wrong type."""

    pass
