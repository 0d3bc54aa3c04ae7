"""Session view broadcasting with callback-based listener notification.

Keeps the most recent :class:`SessionView` and pushes every new one to
the registered listeners (the WebSocket handler, the CLI renderer, tests).

# ─── DATA FLOW ────────────────────────────────────────────────────────
#
#   SessionController ──publish(view)──→ ViewBroadcaster ──callback(view)──→ WebSocket
#                                                       ──→ CLI renderer
#
#   - Listener errors are caught and logged: a dropped WebSocket must not
#     stall the session.
#   - Both sync and async callbacks are supported.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import structlog

from src.models.session import SessionPhase, SessionView
from src.utils.logging import get_logger


class ViewBroadcaster:
    """Observer hub for session views."""

    def __init__(self) -> None:
        self._latest = SessionView(phase=SessionPhase.EMPTY, position=0, total=0)
        self._listeners: list[Callable] = []
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def latest(self) -> SessionView:
        """The most recently published view."""
        return self._latest

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def publish(self, view: SessionView) -> None:
        """Record *view* as the latest snapshot and notify every listener."""
        self._latest = view
        self._logger.debug(
            "view_published",
            phase=view.phase.value,
            position=view.position,
            total=view.total,
            liked=len(view.liked),
        )
        await self._notify_listeners(view)

    def register_listener(self, callback: Callable) -> None:
        """Register a sync or async callable accepting a :class:`SessionView`."""
        if callback not in self._listeners:
            self._listeners.append(callback)
            self._logger.debug("listener_registered", total_listeners=len(self._listeners))

    def unregister_listener(self, callback: Callable) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)
            self._logger.debug("listener_unregistered", remaining_listeners=len(self._listeners))

    async def _notify_listeners(self, view: SessionView) -> None:
        for callback in list(self._listeners):
            try:
                result = callback(view)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as exc:
                self._logger.warning(
                    "listener_callback_error",
                    error=str(exc),
                    callback=getattr(callback, "__name__", repr(callback)),
                )
