"""Manager providing Magento REST schema retrieval, caching and search."""

import logging
from functools import cache
from typing import Any

from .cache import SchemaStore
from .client import MagentoClient, get_client
from .search import search_schema

logger = logging.getLogger("magento-mcp.schema")


class SchemaManager:
    """Manager for cached schema operations.

    Requires a client instance. Each request runs: check cache, fetch if
    needed, then search.
    """

    def __init__(self, client: MagentoClient, store: SchemaStore | None = None):
        """Initialize SchemaManager.

        Args:
            client: MagentoClient instance for API calls.
            store: Schema cache. If None, one is built from the client's config.
        """
        self.client = client
        # Access config through client
        self.config = client.config
        self.store = store or SchemaStore(
            self.config.schema_cache_file, self.config.schema_cache_ttl_seconds
        )

    async def _fetch_schema(self) -> Any:
        logger.info(f"Fetching full schema from {self.config.schema_url}")
        schema = await self.client.get_json(self.config.schema_url)
        logger.info("Fetched full schema")
        return schema

    async def get_schema(self) -> Any:
        """Get the full REST schema, from cache when fresh.

        Raises:
            TokenRefreshFailed: From auth if no token can be obtained.
            httpx.HTTPError: For HTTP/network errors during schema fetch.
        """
        return await self.store.get_schema(self._fetch_schema)

    async def search(self, query: str | None) -> Any:
        """Get the schema filtered by query; a blank query returns it whole.

        Raises:
            TokenRefreshFailed: From auth if no token can be obtained.
            httpx.HTTPError: For HTTP/network errors during schema fetch.
        """
        schema = await self.get_schema()
        if not query or not query.strip():
            return schema
        result = search_schema(schema, query)
        logger.debug(f"Search {query!r} matched {len(result.get('paths', {}))} paths")
        return result

    async def refresh(self) -> Any:
        """Drop the cached schema and fetch it again."""
        self.store.clear()
        return await self.get_schema()


@cache
def get_schema_manager() -> SchemaManager:
    """Get a cached SchemaManager instance.

    Raises:
        May propagate exceptions from get_client() initialization chain.
    """
    return SchemaManager(get_client())
