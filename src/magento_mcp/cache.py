"""File-backed TTL cache for the REST schema document."""

import json
import logging
import os
import time
from collections.abc import Callable
from enum import StrEnum
from typing import Any, NamedTuple

from pydantic import ValidationError

from .exceptions import CacheCorrupted
from .models import CachedSchema
from .protocols import SchemaFetcher

logger = logging.getLogger("magento-mcp.cache")


class CacheState(StrEnum):
    """Outcome of looking up the cache slot."""

    FRESH = "fresh"
    STALE = "stale"
    ABSENT = "absent"


class CacheLookup(NamedTuple):
    state: CacheState
    schema: Any = None


class SchemaStore:
    """Single-slot schema cache persisted to one JSON file.

    The record survives process restarts. Concurrent writers are not locked
    against each other; the last write wins.
    """

    def __init__(
        self,
        path: str,
        ttl_seconds: int,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize SchemaStore.

        Args:
            path: Location of the cache file.
            ttl_seconds: Age after which a cached schema is stale.
            clock: Returns the current time in epoch seconds.
        """
        self.path = path
        self.ttl_ms = ttl_seconds * 1000
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def lookup(self) -> CacheLookup:
        """Read the cache slot without fetching anything.

        Returns:
            FRESH with the schema, STALE with the expired schema, or ABSENT
            when there is no usable record.
        """
        try:
            record = self._read()
        except FileNotFoundError:
            logger.debug(f"No schema cache at {self.path}")
            return CacheLookup(CacheState.ABSENT)
        except CacheCorrupted as e:
            logger.warning(f"{e.message}, treating as cache miss: {e.errors}")
            return CacheLookup(CacheState.ABSENT)

        # A timestamp in the future means the clock moved back; refetch
        age_ms = self._now_ms() - record.timestamp
        if 0 <= age_ms <= self.ttl_ms:
            return CacheLookup(CacheState.FRESH, record.document)
        logger.debug(f"Schema cache is stale ({age_ms} ms old)")
        return CacheLookup(CacheState.STALE, record.document)

    def _read(self) -> CachedSchema:
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            raise
        except (OSError, UnicodeDecodeError) as e:
            raise CacheCorrupted(
                "Schema cache unreadable",
                errors=[str(e)],
                context={"cache_path": self.path},
            ) from e

        try:
            return CachedSchema.model_validate_json(raw)
        except ValidationError as e:
            raise CacheCorrupted(
                "Schema cache corrupted",
                errors=[err["msg"] for err in e.errors()],
                context={"cache_path": self.path},
            ) from e

    def save(self, schema: Any) -> None:
        """Persist schema with the current timestamp, replacing any prior record.

        Raises:
            OSError: If the file cannot be written.
        """
        record = CachedSchema(schema=schema, timestamp=self._now_ms())
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(record.model_dump(by_alias=True), f)
        logger.debug(f"Saved schema cache to {self.path}")

    async def get_schema(self, fetcher: SchemaFetcher) -> Any:
        """Return the cached schema if fresh, otherwise fetch and cache it.

        Args:
            fetcher: Coroutine function performing the upstream retrieval.

        Returns:
            The schema document.

        Raises:
            Whatever fetcher raises. Cache read and write failures never propagate.
        """
        cached = self.lookup()
        if cached.state is CacheState.FRESH:
            logger.debug("Using cached schema")
            return cached.schema

        logger.info(f"Schema cache {cached.state}, fetching schema")
        schema = await fetcher()

        try:
            self.save(schema)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Failed to write schema cache {self.path}: {e}")

        return schema

    def clear(self) -> None:
        """Delete the cache file if present."""
        try:
            os.remove(self.path)
            logger.debug(f"Removed schema cache {self.path}")
        except FileNotFoundError:
            pass
