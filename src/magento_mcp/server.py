"""Magento MCP server implementation."""

import argparse
import logging
import sys
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager

from mcp import types as mcp_types
from mcp.server.fastmcp import FastMCP
from mcp.server.lowlevel.helper_types import ReadResourceContents
from pydantic import ValidationError

from .client import MagentoClient
from .config import Config, setup_logging
from .consts import REST_API_TOOL_NAME, SEARCH_SCHEMA_TOOL_NAME, SERVER_NAME
from .exceptions import MagentoMCPError
from .models import Response
from .schema import SchemaManager
from .service import MagentoService

logger = logging.getLogger("magento-mcp.server")

INSTRUCTIONS = """
Magento MCP server.

This MCP server allows you to:
1. Explore the Magento REST API schema (search it to keep responses small).
2. Call any Magento REST endpoint with admin authentication.
"""


class MagentoMCP(FastMCP):
    """FastMCP server whose resources come from MagentoService.

    FastMCP resource templates cannot carry a free-form query string, so
    listing and reading resources go straight to the service.
    """

    def __init__(self, service: MagentoService, **kwargs):
        super().__init__(**kwargs)
        self.service = service

    async def list_resources(self) -> list[mcp_types.Resource]:
        return self.service.list_resources()

    async def read_resource(self, uri) -> Iterable[ReadResourceContents]:
        content = await self.service.read_resource(str(uri))
        logger.info(content.description)
        return [
            ReadResourceContents(
                content=content.text,
                mime_type=content.mime_type,
                meta={"description": content.description},
            )
        ]


def create_server(config: Config) -> MagentoMCP:
    """Create and configure the MCP server.

    Raises:
        ConfigError: If the base URL or credentials are missing.
    """
    logger.debug("Creating MCP server")
    client = MagentoClient(config)
    service = MagentoService(client, SchemaManager(client))

    @asynccontextmanager
    async def lifespan(_server: FastMCP) -> AsyncIterator[None]:
        try:
            await client.token_provider.get_token()
            logger.info("Startup token fetched successfully")
        except MagentoMCPError as e:
            logger.error(f"Failed to fetch token on startup: {e.message} {e.errors}")
        try:
            yield
        finally:
            await client.aclose()
            logger.debug("HTTP client closed")

    mcp = MagentoMCP(
        service,
        name=SERVER_NAME,
        instructions=INSTRUCTIONS,
        lifespan=lifespan,
        log_level=config.log_level,
    )

    # Claude desktop treats resources like attachments the user has to pick,
    # so the schema is reachable as a tool too.

    @mcp.tool(name=REST_API_TOOL_NAME)
    async def magento_rest_api(
        path: str, method: str, body: str = "", query: str = ""
    ) -> Response:
        """Run a Magento REST API request.

        Args:
            path: REST API path to call starting with /rest
            method: HTTP method to use
            body: JSON body to send with the request
            query: Query parameters to send with the request starting with ?

        Returns:
            The HTTP status code and parsed JSON response body.

        Workflow: search_schema → **You are here**
        """
        logger.info(f"Calling Magento REST API: {method} {path}{query}")

        try:
            result = await service.call_tool(
                REST_API_TOOL_NAME,
                {"path": path, "method": method, "body": body, "query": query},
            )
            return Response(
                status="success",
                message=f"{method.upper()} {path} returned {result['status_code']}",
                data=result["body"],
                metadata={"status_code": result["status_code"]},
            )
        except Exception as e:
            return Response.from_error(e)

    @mcp.tool(name=SEARCH_SCHEMA_TOOL_NAME)
    async def search_schema(search: str = "") -> Response:
        """Search the Magento REST API schema.

        Space-separated keywords match anything containing any of the words
        (case-insensitive). A /regex/flags literal such as /customers?/i is
        matched as a regular expression. Matching keys keep their whole
        subtree, so searching an endpoint path returns its full definition.

        Args:
            search: Keywords or /regex/flags. Empty returns the full schema (large).

        Workflow: **Start here** → magento_rest_api
        """
        logger.info(f"Searching schema for: {search!r}")

        try:
            data = await service.call_tool(SEARCH_SCHEMA_TOOL_NAME, {"search": search})
            return Response(
                status="success",
                message=(
                    f"Schema filtered by search: {search}"
                    if search.strip()
                    else "Full schema returned (no search filter applied)"
                ),
                data=data,
                suggestions=(
                    []
                    if data
                    else ["No matches - try fewer or broader keywords, or a regex"]
                ),
            )
        except Exception as e:
            return Response.from_error(e)

    logger.info("MCP server created")
    return mcp


def main(argv: list[str] | None = None) -> None:
    """Run the MCP server over stdio."""
    parser = argparse.ArgumentParser(prog=SERVER_NAME, description=__doc__)
    parser.add_argument("base_url", nargs="?", help="Magento store base URL")
    parser.add_argument("token", nargs="?", help="Static integration token")
    args = parser.parse_args(argv)

    overrides = {k: v for k, v in vars(args).items() if v}

    try:
        config = Config(**overrides)
        setup_logging(config.log_level)
        mcp = create_server(config)
    except (MagentoMCPError, ValidationError) as e:
        setup_logging()
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    logger.info("Magento MCP Server running on stdio")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
