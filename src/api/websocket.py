"""WebSocket endpoint for real-time session view updates.

Connects a client to the swipe session via the ``ViewBroadcaster``
listener mechanism.  Every observable change (metadata arrived, decision
accepted, list replaced) is pushed as a JSON ``SessionViewResponse``.

# ─── HOW THE SESSION SOCKET WORKS ─────────────────────────────────────
#
#   Client                               Backend (this file)
#   ──────                               ──────────────────
#   ws = new WebSocket(url)   ──────→   websocket.accept()
#                                        register_listener(callback)
#                             ←──────   send current view snapshot
#   {"decision": "liked"}     ──────→   controller.decide(...)
#                             ←──────   push view (cursor advanced)
#                             ←──────   push view (metadata arrived)
#   ws.close()                ──────→   WebSocketDisconnect
#                                        unregister_listener(callback)
#
# Inbound messages other than a decision are treated as keep-alives.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import contextlib
import json

import structlog
from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from src.api.schemas import DecisionRequest, SessionViewResponse
from src.models.session import SessionView
from src.pipeline.session_controller import SessionController
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


async def websocket_session(websocket: WebSocket) -> None:
    """Stream session views to the client and accept decisions from it.

    Lifecycle:
        1. Accept the WebSocket connection.
        2. Register a listener callback with the session's broadcaster.
        3. Send the current view immediately.
        4. Push a JSON view on every change; apply inbound decisions.
        5. On disconnect, unregister the listener.
    """
    controller: SessionController = websocket.app.state.controller
    broadcaster = controller.broadcaster

    await websocket.accept()
    _logger.info("websocket_connected")

    async def _on_view(view: SessionView) -> None:
        # The socket may close between publish and send; cleanup is in finally.
        with contextlib.suppress(Exception):
            await websocket.send_json(
                SessionViewResponse.from_view(view).model_dump(mode="json")
            )

    broadcaster.register_listener(_on_view)

    try:
        await websocket.send_json(
            SessionViewResponse.from_view(controller.view()).model_dump(mode="json")
        )

        while True:
            message = await websocket.receive_text()
            request = _parse_decision(message)
            if request is None:
                continue
            accepted = await controller.decide(request.decision)
            if not accepted:
                # Nothing was published, so echo the unchanged view.
                await _on_view(controller.view())

    except WebSocketDisconnect:
        _logger.info("websocket_disconnected")

    finally:
        broadcaster.unregister_listener(_on_view)
        _logger.debug("websocket_listener_cleaned_up")


def _parse_decision(message: str) -> DecisionRequest | None:
    try:
        payload = json.loads(message)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict) or "decision" not in payload:
        return None
    try:
        return DecisionRequest.model_validate(payload)
    except ValidationError:
        _logger.debug("websocket_message_rejected", message=message[:200])
        return None
