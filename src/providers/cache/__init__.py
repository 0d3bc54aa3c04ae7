"""Cache providers.

Append-only in-memory cache for resolved anime metadata.  One instance
lives for exactly one loaded list; loading a new list builds a new one.
"""

from src.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]
