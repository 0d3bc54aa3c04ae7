"""Session orchestration: the swipe-session controller and its view broadcaster."""

from src.pipeline.session_controller import SessionController
from src.pipeline.view_broadcaster import ViewBroadcaster

__all__ = [
    "SessionController",
    "ViewBroadcaster",
]
