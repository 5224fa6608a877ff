"""Resource and tool facade over the Magento client and schema manager."""

import json
import logging
from typing import Any
from urllib.parse import parse_qs, urlsplit, urlunsplit

from mcp import types as mcp_types

from .client import MagentoClient
from .consts import (
    JSON_MIME_TYPE,
    REST_API_TOOL_NAME,
    SCHEMA_RESOURCE_NAME,
    SCHEMA_RESOURCE_URI,
    SEARCH_SCHEMA_TOOL_NAME,
)
from .exceptions import InvalidToolArguments, NotFoundError
from .models import ResourceContent
from .schema import SchemaManager

logger = logging.getLogger("magento-mcp.service")

SCHEMA_RESOURCE_DESCRIPTION = (
    "Magento REST API schema (OpenAPI). Append ?search=<query> to filter it: "
    "space-separated keywords match any of the words (case-insensitive), or "
    "use a /regex/flags literal such as /customers?/i. Matching keys keep "
    "their whole subtree."
)


class MagentoService:
    """Wires schema and REST calls into list/read/call operations."""

    def __init__(self, client: MagentoClient, schema_manager: SchemaManager):
        self.client = client
        self.schema_manager = schema_manager

    def list_resources(self) -> list[mcp_types.Resource]:
        return [
            mcp_types.Resource(
                uri=SCHEMA_RESOURCE_URI,
                name=SCHEMA_RESOURCE_NAME,
                description=SCHEMA_RESOURCE_DESCRIPTION,
                mimeType=JSON_MIME_TYPE,
            )
        ]

    async def read_resource(self, uri: str) -> ResourceContent:
        """Read the schema resource, filtered when the URI carries ``search``.

        Args:
            uri: ``magento://rest/schema`` with an optional ``?search=`` query.

        Returns:
            Schema as indented JSON text.

        Raises:
            NotFoundError: For any other URI.
            TokenRefreshFailed: From auth if no token can be obtained.
            httpx.HTTPError: For HTTP/network errors during schema fetch.
        """
        parts = urlsplit(str(uri))
        base_uri = urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
        if base_uri != SCHEMA_RESOURCE_URI:
            raise NotFoundError(
                f"Resource not found: {uri}",
                suggestions=[f"Use {SCHEMA_RESOURCE_URI}"],
                context={"uri": str(uri)},
            )

        search = parse_qs(parts.query).get("search", [""])[0].strip()
        schema = await self.schema_manager.search(search)

        if search:
            description = f"Magento REST API schema filtered by search: {search}"
        else:
            description = "Full Magento REST API schema (no search filter applied)"

        return ResourceContent(
            uri=str(uri),
            mime_type=JSON_MIME_TYPE,
            text=json.dumps(schema, indent=2, ensure_ascii=False),
            description=description,
        )

    async def call_api(
        self, path: str, method: str, body: str | None = None, query: str = ""
    ) -> dict[str, Any]:
        """Run a REST request against the store."""
        logger.debug(f"Making API call: {method} {path}{query or ''}")
        return await self.client.request(method, path, body=body, query=query)

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> Any:
        """Dispatch a tool call by name.

        Returns:
            ``{"status_code", "body"}`` for the REST tool, the (filtered)
            schema document for the search tool.

        Raises:
            NotFoundError: For an unknown tool name.
            InvalidToolArguments: If a required argument is missing or blank,
                or an argument is not a string.
        """
        arguments = arguments or {}

        if name == REST_API_TOOL_NAME:
            path = _str_argument(name, arguments, "path", required=True)
            method = _str_argument(name, arguments, "method", required=True)
            return await self.call_api(
                path,
                method,
                body=_str_argument(name, arguments, "body"),
                query=_str_argument(name, arguments, "query", default=""),
            )

        if name == SEARCH_SCHEMA_TOOL_NAME:
            search = _str_argument(name, arguments, "search", default="")
            return await self.schema_manager.search(search)

        raise NotFoundError(
            f"Tool not found: {name}",
            suggestions=[f"Use {REST_API_TOOL_NAME} or {SEARCH_SCHEMA_TOOL_NAME}"],
            context={"tool_name": name},
        )


def _str_argument(
    tool_name: str,
    arguments: dict[str, Any],
    key: str,
    *,
    required: bool = False,
    default: str | None = None,
) -> str | None:
    value = arguments.get(key)
    context = {"tool_name": tool_name, "argument": key}

    if value is None:
        if required:
            raise InvalidToolArguments(
                f"Missing required argument '{key}' for {tool_name}",
                suggestions=[f"Provide '{key}' as a string"],
                context=context,
            )
        return default

    if not isinstance(value, str):
        raise InvalidToolArguments(
            f"Argument '{key}' for {tool_name} must be a string",
            errors=[f"Got {type(value).__name__}"],
            context=context,
        )
    if required and not value.strip():
        raise InvalidToolArguments(
            f"Argument '{key}' for {tool_name} must not be empty",
            context=context,
        )
    return value
