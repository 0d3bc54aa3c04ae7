"""animePicker domain models - re-exports all public model classes.

The models are organized across two submodules:
    - catalog.py  - list entries, resolved metadata, decisions
    - session.py  - swipe-session state and the read-only view snapshot
"""

from __future__ import annotations

from src.models.catalog import Decision, ListEntry, ResolvedMetadata
from src.models.session import SessionPhase, SessionState, SessionView

__all__ = [
    "Decision",
    "ListEntry",
    "ResolvedMetadata",
    "SessionPhase",
    "SessionState",
    "SessionView",
]
