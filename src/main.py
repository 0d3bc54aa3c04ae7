"""animePicker FastAPI application entry point.

Wires together the metadata provider, enrichment service, session
controller, list persistence and routes via dependency injection.  Loads
configuration from ``.env`` and ``config/config.yaml`` and configures
structured logging.

# ─── COMPONENT WIRING ─────────────────────────────────────────────────
#
#   httpx.AsyncClient ──→ JikanMetadataProvider ─┐
#                         RateLimitGate ─────────┼─→ enrichment_factory()
#                                                │        │
#                                                │        ▼
#   ViewBroadcaster ───────────────────────→ SessionController
#                                                         ▲
#   SQLiteListStore ──→ ListService ──(entries)───────────┘
#
# The gate is created once per process: it protects the external
# service, so a list reset must not let a burst of calls through.  The
# cache and in-flight ledger live inside each EnrichmentService and are
# rebuilt on every list load.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI, WebSocket

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router as api_router
from src.api.websocket import websocket_session
from src.config.loader import load_config
from src.config.settings import Settings
from src.interfaces.metadata_provider import IMetadataProvider
from src.pipeline.session_controller import SessionController
from src.pipeline.view_broadcaster import ViewBroadcaster
from src.providers.list_store.sqlite_list_store import SQLiteListStore
from src.providers.metadata.jikan_provider import JikanMetadataProvider
from src.services.enrichment_service import EnrichmentService
from src.services.list_service import ListService
from src.utils.concurrency import RateLimitGate
from src.utils.errors import ListParseError
from src.utils.logging import configure_logging, get_logger

_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


def build_enrichment_factory(
    provider: IMetadataProvider,
    gate: RateLimitGate,
) -> Callable[[], EnrichmentService]:
    """Return a factory producing a fresh enrichment service per list load."""

    def _factory() -> EnrichmentService:
        return EnrichmentService(provider=provider, gate=gate)

    return _factory


def _build_all(app_settings: Settings) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=app_settings.jikan_timeout)

    # -- Metadata --
    metadata_provider = JikanMetadataProvider(
        http_client=http_client,
        base_url=app_settings.jikan_base_url,
    )
    gate = RateLimitGate(min_interval=app_settings.fetch_min_interval)

    # -- Session --
    broadcaster = ViewBroadcaster()
    controller = SessionController(
        build_enrichment_factory(metadata_provider, gate),
        prefetch_window=app_settings.prefetch_window,
        decision_cooldown=app_settings.decision_cooldown,
        broadcaster=broadcaster,
    )

    # -- List source / persistence --
    list_store = SQLiteListStore(db_path=app_settings.list_store_db_path)
    list_service = ListService(
        store=list_store,
        default_list_path=app_settings.default_list_path,
        shuffle_seed=app_settings.shuffle_seed,
    )

    provider_registry: dict[str, Any] = {
        "metadata": metadata_provider.is_available(),
        "metadata_provider": metadata_provider.get_provider_name(),
        "list_store": True,
        "cache": True,
    }

    return {
        "http_client": http_client,
        "metadata_provider": metadata_provider,
        "rate_limit_gate": gate,
        "controller": controller,
        "list_store": list_store,
        "list_service": list_service,
        "provider_registry": provider_registry,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise providers and load the starting list; clean up on shutdown."""
    components = _build_all(settings)

    for key, value in components.items():
        setattr(application.state, key, value)
    application.state.config = config

    await components["list_store"].initialize()

    controller: SessionController = components["controller"]
    list_service: ListService = components["list_service"]
    try:
        loaded = await list_service.load_initial()
    except ListParseError as exc:
        # No usable list: serve an EMPTY session until the user uploads one.
        _logger.error("initial_list_unavailable", error=str(exc))
    else:
        await controller.load_list(
            loaded.entries,
            using_default_list=loaded.using_default_list,
        )

    _logger.info(
        "app_startup",
        version=_VERSION,
        environment=settings.app_env,
        entries=controller.total,
        metadata_provider=components["provider_registry"]["metadata_provider"],
    )

    yield

    # -- Shutdown: stop outstanding fetches, then close the httpx client --
    await controller.aclose()
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="animePicker API",
        version=_VERSION,
        description=(
            "Swipe through a shuffled anime list one title at a time. "
            "Metadata is fetched from Jikan behind a shared rate limit and "
            "prefetched for the next few entries."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(
        application,
        allowed_origins=config.get("api", {}).get("cors_origins"),
    )

    # -- API routes --
    application.include_router(api_router)

    # -- WebSocket --
    @application.websocket("/ws/session")
    async def ws_session(websocket: WebSocket) -> None:
        await websocket_session(websocket)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
