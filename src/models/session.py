"""Swipe-session state models.

``SessionState`` is the mutable record owned exclusively by the
:class:`~src.pipeline.session_controller.SessionController`.  Everything
handed to the presentation layer is a frozen :class:`SessionView`
snapshot built from it, so listeners can never mutate controller state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.models.catalog import Decision, ListEntry, ResolvedMetadata


class SessionPhase(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    """Where the controller currently is in its cursor state machine.

        EMPTY → RESOLVING → READY → (decision) → RESOLVING → ... → EXHAUSTED
    """

    EMPTY = "EMPTY"            # No list loaded yet
    RESOLVING = "RESOLVING"    # Current entry is being resolved ("loading")
    READY = "READY"            # Current entry has metadata; decisions accepted
    UNAVAILABLE = "UNAVAILABLE"  # Resolve failed; current entry shows "no data"
    EXHAUSTED = "EXHAUSTED"    # Cursor is past the end of the list


@dataclass
class SessionState:
    """Internal controller state for one loaded list.

    Mutable dataclass (not Pydantic) because it is internal-only and is
    rebuilt from scratch whenever a new list is loaded.
    """

    entries: list[ListEntry] = field(default_factory=list)
    cursor: int = 0
    current_metadata: ResolvedMetadata | None = None
    decisions: dict[str, Decision] = field(default_factory=dict)
    liked: list[ResolvedMetadata] = field(default_factory=list)
    phase: SessionPhase = SessionPhase.EMPTY
    cooldown_until: float = 0.0


class SessionView(BaseModel):
    """Read-only snapshot pushed to the presentation layer on every change."""

    model_config = ConfigDict(frozen=True)

    phase: SessionPhase
    position: int = Field(ge=0)
    total: int = Field(ge=0)
    entry: ListEntry | None = None
    current: ResolvedMetadata | None = None
    liked: list[ResolvedMetadata] = Field(default_factory=list)
    decisions_made: int = 0
    cooldown_active: bool = False
    using_default_list: bool = False

    @property
    def loading(self) -> bool:
        return self.phase == SessionPhase.RESOLVING

    @property
    def progress_label(self) -> str:
        """``"3 / 120"`` style progress, clamped to the list length."""
        shown = min(self.position + 1, self.total) if self.total else 0
        return f"{shown} / {self.total}"
