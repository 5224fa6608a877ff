"""Tests for the SchemaManager module"""

from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from magento_mcp.cache import CacheState, SchemaStore
from magento_mcp.schema import SchemaManager


@pytest.fixture
def mock_client(config, sample_schema):
    client = Mock()
    client.config = config
    client.get_json = AsyncMock(return_value=sample_schema)
    return client


@pytest.fixture
def schema_manager(mock_client):
    return SchemaManager(mock_client)


class TestSchemaManager:
    def test_default_store_uses_config(self, schema_manager, config):
        assert isinstance(schema_manager.store, SchemaStore)
        assert schema_manager.store.path == config.schema_cache_file
        assert schema_manager.store.ttl_ms == config.schema_cache_ttl_seconds * 1000

    @pytest.mark.asyncio
    async def test_get_schema_fetches_once(self, schema_manager, mock_client, config):
        first = await schema_manager.get_schema()
        second = await schema_manager.get_schema()

        assert first == second
        mock_client.get_json.assert_awaited_once_with(config.schema_url)
        assert schema_manager.store.lookup().state is CacheState.FRESH

    @pytest.mark.asyncio
    async def test_cache_survives_new_manager(self, mock_client, sample_schema):
        await SchemaManager(mock_client).get_schema()

        # A new process would build a new manager over the same file
        assert await SchemaManager(mock_client).get_schema() == sample_schema
        assert mock_client.get_json.await_count == 1

    @pytest.mark.asyncio
    async def test_fetch_error_propagates(self, schema_manager, mock_client):
        mock_client.get_json.side_effect = httpx.ConnectError("Connection failed")

        with pytest.raises(httpx.ConnectError):
            await schema_manager.get_schema()
        assert schema_manager.store.lookup().state is CacheState.ABSENT

    @pytest.mark.parametrize("query", [None, "", "   "])
    @pytest.mark.asyncio
    async def test_blank_search_returns_full_schema(
        self, schema_manager, sample_schema, query
    ):
        assert await schema_manager.search(query) == sample_schema

    @pytest.mark.asyncio
    async def test_search_filters(self, schema_manager):
        result = await schema_manager.search("/orders/")
        assert list(result["paths"]) == ["/V1/orders"]

    @pytest.mark.asyncio
    async def test_refresh_refetches(self, schema_manager, mock_client):
        await schema_manager.get_schema()
        mock_client.get_json.return_value = {"paths": {"/V1/new": {}}}

        assert await schema_manager.refresh() == {"paths": {"/V1/new": {}}}
        assert mock_client.get_json.await_count == 2
