"""Pydantic request/response schemas for the animePicker API.

Defines the public contract for the REST endpoints - session view,
decisions, liked list, list upload/reset, and health.

Convention: request schemas end with "Request", response schemas end
with "Response".
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from src.models.catalog import Decision, ListEntry, ResolvedMetadata
from src.models.session import SessionPhase, SessionView


class SessionViewResponse(BaseModel):
    """The presentation-facing view of the swipe session."""

    phase: SessionPhase
    position: int
    total: int
    progress: str = Field(description='Human-readable progress, e.g. "3 / 120"')
    loading: bool
    entry: ListEntry | None = None
    current: ResolvedMetadata | None = None
    liked: list[ResolvedMetadata] = Field(default_factory=list)
    decisions_made: int = 0
    cooldown_active: bool = False
    using_default_list: bool = False

    @classmethod
    def from_view(cls, view: SessionView) -> SessionViewResponse:
        return cls(
            phase=view.phase,
            position=view.position,
            total=view.total,
            progress=view.progress_label,
            loading=view.loading,
            entry=view.entry,
            current=view.current,
            liked=view.liked,
            decisions_made=view.decisions_made,
            cooldown_active=view.cooldown_active,
            using_default_list=view.using_default_list,
        )


class DecisionRequest(BaseModel):
    """A like/dislike for the current entry."""

    decision: Decision


class DecisionResponse(BaseModel):
    """Whether the decision was accepted, plus the resulting view."""

    accepted: bool
    view: SessionViewResponse


class LikedResponse(BaseModel):
    """Every liked anime so far, in the order they were liked."""

    liked: list[ResolvedMetadata]
    total: int


class ListUploadResponse(BaseModel):
    """Response returned after uploading or clearing a list."""

    entries: int
    using_default_list: bool
    view: SessionViewResponse


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]
    enrichment: dict[str, Any] = Field(default_factory=dict)
