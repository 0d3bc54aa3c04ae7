"""Abstract base class for anime metadata service providers.

Defines the contract for the external service that turns a numeric anime
identifier into full display metadata (e.g. the Jikan REST API in front
of MyAnimeList).  The adapter pattern lets tests swap in an instrumented
fake without touching the enrichment service.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.catalog import ResolvedMetadata


class IMetadataProvider(ABC):
    """Contract for metadata lookups keyed by numeric anime id."""

    @abstractmethod
    async def resolve(self, anime_id: int) -> ResolvedMetadata:
        """Fetch display metadata for *anime_id*.

        Parameters
        ----------
        anime_id:
            The numeric identifier (MyAnimeList id).

        Returns
        -------
        ResolvedMetadata
            The resolved record.

        Raises
        ------
        src.utils.errors.ResolveError
            On a non-success response, a transport error, or a response
            body that cannot be mapped to :class:`ResolvedMetadata`.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier for this provider, e.g. ``"jikan"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured and usable."""
