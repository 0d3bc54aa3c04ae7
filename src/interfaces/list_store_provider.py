"""Abstract base class for raw list persistence.

Persists the user's uploaded list export across restarts so the next
session starts from their own list instead of the bundled default.  The
store is opaque to the enrichment core: it holds the raw export text and
nothing else.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class IListStore(ABC):
    """Contract for storing a single raw list export."""

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the backing storage (create tables, directories, ...)."""

    @abstractmethod
    async def save(self, raw_list: str) -> None:
        """Replace the stored export with *raw_list*."""

    @abstractmethod
    async def load(self) -> str | None:
        """Return the stored export, or ``None`` if nothing is saved."""

    @abstractmethod
    async def clear(self) -> None:
        """Delete the stored export (no-op if nothing is saved)."""

    async def has_saved_list(self) -> bool:
        """Return ``True`` if an export is currently stored."""
        return await self.load() is not None
