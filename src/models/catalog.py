"""Catalog models: list entries and the metadata they resolve into.

Defines Pydantic v2 models for the two shapes an anime takes during a
session:

    ListEntry         -- the lightweight row parsed from a MyAnimeList
                         export (id, title, watch status).  Produced once
                         at list-load time.
    ResolvedMetadata  -- the full display record returned by the metadata
                         service (images, episode count, score, ...).
                         Created by a successful resolve and cached for
                         the rest of the session.

Both models are frozen: a cached record is never partially updated, and a
list entry never changes after the list is loaded.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Decision(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    """A user's verdict on the current list entry."""

    LIKED = "liked"
    DISLIKED = "disliked"


class ListEntry(BaseModel):
    """One row of a loaded anime list.

    ``id`` is kept as the raw string from the export.  It is expected to
    be numeric, but non-numeric ids are tolerated here and rejected only
    when something tries to resolve them.  Duplicate ids are allowed and
    treated as distinct positions in the list.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    status: str = ""


class ResolvedMetadata(BaseModel):
    """Display metadata for a single anime, as returned by the metadata service."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    alternate_title: str | None = None
    image_url: str = Field(min_length=1)
    large_image_url: str | None = None
    episode_count: int | None = Field(default=None, ge=0)
    kind: str | None = None
    score: float | None = None
    synopsis: str | None = None
    airing_status: str | None = None

    @property
    def display_image_url(self) -> str:
        """Prefer the large image when the service provides one."""
        return self.large_image_url or self.image_url
