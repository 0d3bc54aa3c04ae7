"""In-memory append-only cache provider backed by ``cachetools.Cache``.

Holds resolved metadata for the lifetime of one loaded list.  There is no
eviction, no size bound and no expiry: the cache is bounded implicitly by
the length of the list, which is a personal export of at most a few
thousand entries.
"""

from __future__ import annotations

import math

import structlog
from cachetools import Cache

from src.interfaces.cache_provider import ICacheProvider
from src.models.catalog import ResolvedMetadata

logger = structlog.get_logger(logger_name=__name__)


class MemoryCacheProvider(ICacheProvider):
    """Write-once-per-key metadata cache.

    A ``cachetools.Cache`` with an infinite ``maxsize`` never calls
    ``popitem``, so populated keys are never evicted.  :meth:`put` refuses
    to overwrite, which makes late or duplicate writes (e.g. a prefetch
    finishing after the cursor moved on) harmless.
    """

    def __init__(self) -> None:
        self._cache: Cache[str, ResolvedMetadata] = Cache(maxsize=math.inf)

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    def get(self, key: str) -> ResolvedMetadata | None:
        value = self._cache.get(key)
        if value is not None:
            logger.debug("cache_hit", key=key)
        else:
            logger.debug("cache_miss", key=key)
        return value

    def put(self, key: str, value: ResolvedMetadata) -> bool:
        if key in self._cache:
            logger.debug("cache_put_ignored", key=key)
            return False
        self._cache[key] = value
        logger.debug("cache_put", key=key, size=len(self._cache))
        return True

    def contains(self, key: str) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)
