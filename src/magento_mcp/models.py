import re
from typing import Any, Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field

from .exceptions import MagentoMCPError

# Magento error bodies: {"message": "No such entity with %fieldName = %fieldValue",
# "parameters": {"fieldName": "id", "fieldValue": 5}}; list parameters fill %1, %2...
_PLACEHOLDER = re.compile(r"%(\w+)")


def magento_error_message(response: Any) -> str | None:
    """Render the ``message`` of a Magento error body, or None if there is none."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict) or not isinstance(body.get("message"), str):
        return None

    parameters = body.get("parameters")
    if isinstance(parameters, list):
        values = {str(i): value for i, value in enumerate(parameters, start=1)}
    elif isinstance(parameters, dict):
        values = {str(key): value for key, value in parameters.items()}
    else:
        return body["message"]

    def substitute(match: re.Match) -> str:
        name = match.group(1)
        return str(values[name]) if name in values else match.group(0)

    return _PLACEHOLDER.sub(substitute, body["message"])


# =============================================================================
# UNIFIED RESPONSE MODEL
# =============================================================================
# Single response type for all MCP tools


class Response(BaseModel):
    """Unified response type for all MCP tools."""

    status: Literal["success", "error"] = Field(
        ..., description="Response status indicating outcome"
    )
    message: str = Field(..., description="Human-readable summary of the response")
    data: Any | None = Field(
        None,
        description="Response payload - can be dict, list, or any serializable type",
    )
    errors: list[str] = Field(
        default_factory=list, description="List of error messages"
    )
    suggestions: list[str] = Field(
        default_factory=list, description="Actionable suggestions for the user"
    )
    metadata: dict[str, Any] | None = Field(
        None, description="Additional context and domain-specific information"
    )

    @classmethod
    def from_error(cls, error: Exception) -> "Response":
        """Create Response from any Exception, with potentially helpful info for recovery.

        Args:
            error: Any Exception instance

        Returns:
            Response object with error details
        """
        if isinstance(error, MagentoMCPError):
            return cls(
                status="error",
                message=error.message,
                errors=error.errors,
                suggestions=error.suggestions,
                metadata={**error.context, "exception_type": type(error).__name__},
            )
        elif isinstance(error, httpx.HTTPStatusError):
            status_code = error.response.status_code
            detail = magento_error_message(error.response)
            reason = detail or str(error)
            if status_code >= 500:
                message = f"Magento server error ({status_code}): {reason}"
                suggestions = []
            elif status_code == 401:
                message = f"Authentication failed ({status_code}): {reason}"
                suggestions = ["Verify the configured token or admin credentials"]
            elif status_code == 404:
                message = f"Resource not found ({status_code}): {reason}"
                suggestions = ["Check the REST path against the schema resource"]
            else:
                message = f"HTTP error ({status_code}): {reason}"
                suggestions = ["Check the request and try again"]

            return cls(
                status="error",
                message=message,
                errors=[detail, str(error)] if detail else [str(error)],
                suggestions=suggestions,
                metadata={
                    "exception_type": type(error).__name__,
                    "status_code": status_code,
                    "url": str(error.response.url),
                },
            )
        elif isinstance(error, httpx.RequestError):
            metadata = {"exception_type": type(error).__name__}
            try:
                metadata["url"] = str(error.request.url)
            except RuntimeError:
                pass  # request not attached

            return cls(
                status="error",
                message=f"Network error: {str(error)}",
                errors=[str(error)],
                suggestions=[
                    "Check your internet connection",
                    "Verify the Magento base URL is correct",
                    "Try again - this may be a temporary network issue",
                ],
                metadata=metadata,
            )
        else:
            return cls(
                status="error",
                message=f"Unexpected error: {str(error)}",
                errors=[str(error)],
                suggestions=[
                    "Check server logs for detailed information",
                    "Try again - this may be a temporary issue",
                ],
                metadata={"exception_type": type(error).__name__},
            )


# =============================================================================
# SCHEMA CACHE & RESOURCE MODELS
# =============================================================================


class CachedSchema(BaseModel):
    """On-disk schema cache record: ``{"schema": ..., "timestamp": <epoch ms>}``."""

    model_config = ConfigDict(populate_by_name=True)

    document: Any = Field(..., alias="schema", description="Schema document")
    timestamp: int = Field(..., description="Fetch time in epoch milliseconds")


class ResourceContent(BaseModel):
    """Result of reading an MCP resource."""

    uri: str
    mime_type: str
    text: str
    description: str
