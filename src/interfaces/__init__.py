"""Public interface definitions for all external collaborators.

Every external service in animePicker is accessed exclusively through the
abstract base classes defined in this package.  Concrete adapters live in
``src/providers/`` and are wired together in ``src/main.py``; unit tests
inject instrumented fakes instead.

CONCRETE PROVIDER MAP:
    Interface           →  Concrete implementations (in src/providers/)
    ─────────────────────────────────────────────────────────────────
    IMetadataProvider   →  JikanMetadataProvider
    ICacheProvider      →  MemoryCacheProvider
    IListStore          →  SQLiteListStore
"""

from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.list_store_provider import IListStore
from src.interfaces.metadata_provider import IMetadataProvider

__all__ = [
    "ICacheProvider",
    "IListStore",
    "IMetadataProvider",
]
