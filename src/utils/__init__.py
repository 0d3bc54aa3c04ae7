"""Utility modules for animePicker.

Available utility modules (all re-exported here for convenience):

- **errors** -- Domain-specific exception hierarchy rooted at
  AnimePickerError; each subsystem raises its own subclass so callers can
  handle failures granularly.
- **concurrency** -- the shared rate-limit gate and the in-flight
  de-duplication ledger used by the enrichment service.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
"""

# -- Domain exception hierarchy --------------------------------------------
from src.utils.errors import (
    AnimePickerError,
    ConfigurationError,
    IdentifierFormatError,
    ListParseError,
    ProviderUnavailableError,
    RateLimitError,
    ResolveError,
    SessionError,
)

# -- Async concurrency primitives ------------------------------------------
from src.utils.concurrency import InFlightLedger, RateLimitGate

# -- Structured logging setup ----------------------------------------------
from src.utils.logging import configure_logging, get_logger

__all__ = [
    "AnimePickerError",
    "ConfigurationError",
    "IdentifierFormatError",
    "InFlightLedger",
    "ListParseError",
    "ProviderUnavailableError",
    "RateLimitError",
    "RateLimitGate",
    "ResolveError",
    "SessionError",
    "configure_logging",
    "get_logger",
]
