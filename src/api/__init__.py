"""animePicker API layer - routes, schemas, WebSocket, and middleware."""

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router
from src.api.schemas import (
    DecisionRequest,
    DecisionResponse,
    ErrorResponse,
    HealthResponse,
    LikedResponse,
    ListUploadResponse,
    SessionViewResponse,
)
from src.api.websocket import websocket_session

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "websocket_session",
    "DecisionRequest",
    "DecisionResponse",
    "ErrorResponse",
    "HealthResponse",
    "LikedResponse",
    "ListUploadResponse",
    "SessionViewResponse",
]
