"""FastAPI API routes for the animePicker swipe session.

Provides REST endpoints for reading the session view, recording like/dislike
decisions, listing liked anime, uploading or clearing the user's list, and a
health check.  Service dependencies are resolved from ``app.state`` via
FastAPI's ``Depends`` using the ``Annotated`` pattern.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                      Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/session               GET     Current session view
# /api/v1/session/decision      POST    Like / dislike the current entry
# /api/v1/session/retry         POST    Re-resolve a failed current entry
# /api/v1/session/liked         GET     Liked anime, in like order
# /api/v1/list                  POST    Upload a list export (.xml)
# /api/v1/list                  DELETE  Forget the upload, use the default list
# /api/v1/health                GET     Health check + provider status
#
# Every list change starts a brand-new session: cursor, decisions, liked
# list, cache and in-flight requests are all discarded.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from pathlib import PurePath
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile

from src.api.schemas import (
    DecisionRequest,
    DecisionResponse,
    ErrorResponse,
    HealthResponse,
    LikedResponse,
    ListUploadResponse,
    SessionViewResponse,
)
from src.pipeline.session_controller import SessionController
from src.services.list_service import ListService
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_DEFAULT_ALLOWED_EXTENSIONS = (".xml",)
_DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024

# Uploads are read in 64 KB chunks so an oversized file is rejected
# without buffering all of it.
_UPLOAD_CHUNK_SIZE = 64 * 1024

_VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Dependency injection helpers - resolve singletons from app.state
# ---------------------------------------------------------------------------


def _get_controller(request: Request) -> SessionController:
    """Return the session controller from application state."""
    return request.app.state.controller


def _get_list_service(request: Request) -> ListService:
    """Return the list service from application state."""
    return request.app.state.list_service


def _get_config(request: Request) -> dict[str, Any]:
    """Return the resolved configuration dictionary (empty if unset)."""
    return getattr(request.app.state, "config", None) or {}


ControllerDep = Annotated[SessionController, Depends(_get_controller)]
ListServiceDep = Annotated[ListService, Depends(_get_list_service)]
ConfigDep = Annotated[dict[str, Any], Depends(_get_config)]


# ---------------------------------------------------------------------------
# Session endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/session",
    response_model=SessionViewResponse,
    summary="Current swipe-session view",
)
async def get_session(controller: ControllerDep) -> SessionViewResponse:
    """Return the current entry, progress, loading flag and liked list."""
    return SessionViewResponse.from_view(controller.view())


@router.post(
    "/session/decision",
    response_model=DecisionResponse,
    summary="Like or dislike the current entry",
)
async def post_decision(
    body: DecisionRequest,
    controller: ControllerDep,
) -> DecisionResponse:
    """Apply a decision.

    A decision that arrives during the cooldown, or before the current
    entry has metadata, is ignored and reported with ``accepted=false``.
    """
    accepted = await controller.decide(body.decision)
    return DecisionResponse(
        accepted=accepted,
        view=SessionViewResponse.from_view(controller.view()),
    )


@router.post(
    "/session/retry",
    response_model=DecisionResponse,
    summary="Retry resolving the current entry",
)
async def post_retry(controller: ControllerDep) -> DecisionResponse:
    accepted = await controller.retry_current()
    return DecisionResponse(
        accepted=accepted,
        view=SessionViewResponse.from_view(controller.view()),
    )


@router.get(
    "/session/liked",
    response_model=LikedResponse,
    summary="Anime liked so far",
)
async def get_liked(controller: ControllerDep) -> LikedResponse:
    liked = controller.liked
    return LikedResponse(liked=liked, total=len(liked))


# ---------------------------------------------------------------------------
# List endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/list",
    response_model=ListUploadResponse,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        415: {"model": ErrorResponse},
    },
    summary="Upload a list export and start a new session",
)
async def upload_list(
    file: UploadFile,
    controller: ControllerDep,
    list_service: ListServiceDep,
    config: ConfigDep,
) -> ListUploadResponse:
    """Validate, persist and load an uploaded list export.

    A malformed export raises ``ListParseError``, which the error
    middleware turns into a 400; the current session is left untouched.
    """
    list_cfg = config.get("list", {})
    allowed = tuple(
        ext.lower() for ext in list_cfg.get("allowed_extensions", _DEFAULT_ALLOWED_EXTENSIONS)
    )
    max_bytes = int(list_cfg.get("max_upload_bytes", _DEFAULT_MAX_UPLOAD_BYTES))

    suffix = PurePath(file.filename or "").suffix.lower()
    if suffix not in allowed:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported file type: '{suffix or file.filename}'. Allowed: {', '.join(allowed)}",
        )

    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await file.read(_UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > max_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Maximum: {max_bytes} bytes.",
            )
        chunks.append(chunk)

    try:
        raw_list = b"".join(chunks).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=400, detail="List export must be UTF-8 text") from exc

    loaded = await list_service.upload(raw_list)
    view = await controller.load_list(loaded.entries, using_default_list=loaded.using_default_list)

    _logger.info("list_upload_accepted", filename=file.filename, entries=len(loaded.entries))
    return ListUploadResponse(
        entries=len(loaded.entries),
        using_default_list=loaded.using_default_list,
        view=SessionViewResponse.from_view(view),
    )


@router.delete(
    "/list",
    response_model=ListUploadResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Forget the uploaded list and fall back to the default list",
)
async def clear_list(
    controller: ControllerDep,
    list_service: ListServiceDep,
) -> ListUploadResponse:
    loaded = await list_service.clear()
    view = await controller.load_list(loaded.entries, using_default_list=loaded.using_default_list)
    return ListUploadResponse(
        entries=len(loaded.entries),
        using_default_list=loaded.using_default_list,
        view=SessionViewResponse.from_view(view),
    )


# ---------------------------------------------------------------------------
# System endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, provider availability and enrichment stats."""
    providers: dict[str, Any] = {}
    if hasattr(request.app.state, "provider_registry"):
        providers = dict(request.app.state.provider_registry)
    metadata_provider = getattr(request.app.state, "metadata_provider", None)
    if metadata_provider is not None:
        providers["metadata"] = metadata_provider.is_available()

    enrichment: dict[str, Any] = {}
    controller: SessionController | None = getattr(request.app.state, "controller", None)
    if controller is not None:
        service = controller.enrichment
        enrichment = {
            "provider": service.provider_name,
            "outbound_calls": service.outbound_calls,
            "failures": service.failures,
            "cached": service.cached_count,
            "in_flight": service.in_flight_count,
            "prefetch_issued": controller.scheduler.issued_total,
        }

    status = "healthy" if providers.get("metadata", False) else "degraded"
    return HealthResponse(
        status=status,
        version=_VERSION,
        providers=providers,
        enrichment=enrichment,
    )
