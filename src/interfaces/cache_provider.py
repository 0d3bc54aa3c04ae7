"""Abstract base class for the enrichment cache.

Defines the contract for the identity-keyed metadata cache used by the
enrichment service.  The cache is append-only: once a key holds a value,
that value never changes and never disappears for the lifetime of the
cache object.  A new cache is built whenever a new list is loaded.

Unlike most provider contracts in this project the operations are
synchronous.  The enrichment service performs "is it cached? if not,
start resolving" as one step, and that step must not contain a
suspension point where a second caller could slip in.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.catalog import ResolvedMetadata


class ICacheProvider(ABC):
    """Contract for append-only, identity-keyed metadata caches."""

    @abstractmethod
    def get(self, key: str) -> ResolvedMetadata | None:
        """Return the metadata stored under *key*, or ``None`` if absent.

        Pure lookup with no side effects.
        """

    @abstractmethod
    def put(self, key: str, value: ResolvedMetadata) -> bool:
        """Store *value* under *key* unless the key is already populated.

        Parameters
        ----------
        key:
            The list entry identifier (as a string).
        value:
            The resolved metadata to store.

        Returns
        -------
        bool
            ``True`` if the value was stored, ``False`` if the key already
            held a value (the existing value is kept).
        """

    @abstractmethod
    def contains(self, key: str) -> bool:
        """Return ``True`` if *key* holds a value."""

    @abstractmethod
    def __len__(self) -> int:
        """Return the number of populated keys."""
