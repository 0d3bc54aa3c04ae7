"""Metadata service providers.

JikanMetadataProvider resolves MyAnimeList ids into display metadata via
the public Jikan v4 API.
"""

from src.providers.metadata.jikan_provider import JikanMetadataProvider

__all__ = ["JikanMetadataProvider"]
