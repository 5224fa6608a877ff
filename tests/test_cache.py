"""Tests for the file-backed schema store"""

import json
from unittest.mock import AsyncMock

import pytest

from magento_mcp.cache import CacheState, SchemaStore

NOW = 1_700_000_000  # epoch seconds
TTL = 3600


class FakeClock:
    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock(NOW)


@pytest.fixture
def cache_path(tmp_path):
    return str(tmp_path / "cache" / "schema.json")


@pytest.fixture
def store(cache_path, clock):
    return SchemaStore(cache_path, TTL, clock=clock)


def write_record(path, record):
    with open(path, "w") as f:
        f.write(record if isinstance(record, str) else json.dumps(record))


class TestLookup:
    def test_absent_when_no_file(self, store):
        assert store.lookup().state is CacheState.ABSENT

    def test_fresh_after_save(self, store, sample_schema):
        store.save(sample_schema)

        lookup = store.lookup()
        assert lookup.state is CacheState.FRESH
        assert lookup.schema == sample_schema

    def test_record_format(self, store, cache_path, sample_schema):
        store.save(sample_schema)

        with open(cache_path) as f:
            record = json.load(f)
        assert record == {"schema": sample_schema, "timestamp": NOW * 1000}

    def test_fresh_at_exact_ttl(self, store, clock, sample_schema):
        store.save(sample_schema)
        clock.now = NOW + TTL
        assert store.lookup().state is CacheState.FRESH

    def test_stale_after_ttl(self, store, clock, sample_schema):
        store.save(sample_schema)
        clock.now = NOW + TTL + 1

        lookup = store.lookup()
        assert lookup.state is CacheState.STALE
        assert lookup.schema == sample_schema

    def test_future_timestamp_is_stale(self, store, clock, sample_schema):
        store.save(sample_schema)
        clock.now = NOW - 1

        lookup = store.lookup()
        assert lookup.state is CacheState.STALE
        assert lookup.schema == sample_schema

    @pytest.mark.parametrize(
        "record",
        [
            "{not json",
            "",
            "[1, 2, 3]",
            {"schema": {"paths": {}}},
            {"timestamp": NOW * 1000},
            {"schema": {"paths": {}}, "timestamp": "yesterday"},
        ],
    )
    def test_corrupted_record_is_absent(self, store, cache_path, record):
        store.save({})
        write_record(cache_path, record)
        assert store.lookup().state is CacheState.ABSENT

    def test_undecodable_bytes_is_absent(self, store, cache_path):
        store.save({})
        with open(cache_path, "wb") as f:
            f.write(b"\xff\xfe\x00")
        assert store.lookup().state is CacheState.ABSENT


class TestGetSchema:
    @pytest.mark.asyncio
    async def test_miss_fetches_and_persists(self, store, sample_schema):
        fetcher = AsyncMock(return_value=sample_schema)

        assert await store.get_schema(fetcher) == sample_schema
        fetcher.assert_awaited_once()
        assert store.lookup().state is CacheState.FRESH

    @pytest.mark.asyncio
    async def test_fresh_cache_skips_fetch(self, store, clock, sample_schema):
        store.save(sample_schema)
        clock.now = NOW + TTL - 1
        fetcher = AsyncMock()

        assert await store.get_schema(fetcher) == sample_schema
        fetcher.assert_not_called()

    @pytest.mark.asyncio
    async def test_stale_cache_refetches(self, store, clock, cache_path):
        store.save({"paths": {"/old": {}}})
        clock.now = NOW + TTL + 1
        fetcher = AsyncMock(return_value={"paths": {"/new": {}}})

        assert await store.get_schema(fetcher) == {"paths": {"/new": {}}}
        fetcher.assert_awaited_once()

        with open(cache_path) as f:
            record = json.load(f)
        assert record["schema"] == {"paths": {"/new": {}}}
        assert record["timestamp"] == (NOW + TTL + 1) * 1000

    @pytest.mark.asyncio
    async def test_future_timestamp_refetches(self, store, cache_path, sample_schema):
        store.save({})
        write_record(
            cache_path, {"schema": {"paths": {}}, "timestamp": (NOW + 60) * 1000}
        )
        fetcher = AsyncMock(return_value=sample_schema)

        assert await store.get_schema(fetcher) == sample_schema
        fetcher.assert_awaited_once()
        assert store.lookup().state is CacheState.FRESH

    @pytest.mark.asyncio
    async def test_corrupted_cache_refetches(self, store, cache_path, sample_schema):
        store.save({})
        write_record(cache_path, "garbage")
        fetcher = AsyncMock(return_value=sample_schema)

        assert await store.get_schema(fetcher) == sample_schema
        fetcher.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_fetch_errors_propagate(self, store):
        fetcher = AsyncMock(side_effect=RuntimeError("upstream down"))

        with pytest.raises(RuntimeError, match="upstream down"):
            await store.get_schema(fetcher)

    @pytest.mark.asyncio
    async def test_write_failure_still_returns_schema(self, tmp_path, sample_schema):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = SchemaStore(str(blocker / "schema.json"), TTL)
        fetcher = AsyncMock(return_value=sample_schema)

        assert await store.get_schema(fetcher) == sample_schema


class TestClear:
    def test_clear_removes_record(self, store, sample_schema):
        store.save(sample_schema)
        store.clear()
        assert store.lookup().state is CacheState.ABSENT

    def test_clear_without_record(self, store):
        store.clear()
