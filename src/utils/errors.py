"""Custom exception hierarchy for animePicker.

All application exceptions inherit from :class:`AnimePickerError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "jikan", "sqlite") caused the failure.

The hierarchy is organized by subsystem:

    AnimePickerError  (base -- catch-all for any animePicker error)
    +-- ListParseError           (list source: malformed or empty export)
    +-- IdentifierFormatError    (list entry id is not numeric)
    +-- ResolveError             (metadata service call failed)
    |   +-- RateLimitError       (service answered HTTP 429)
    +-- ProviderUnavailableError (external service down / unreachable)
    +-- SessionError             (invalid session operation)
    +-- ConfigurationError       (startup / missing config)

None of these are fatal to a swipe session: the worst outcome of a
ResolveError is a current item that stays in the "loading" state.
"""


class AnimePickerError(Exception):
    """Base exception for all animePicker errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[jikan] HTTP 503 for anime 21``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# List source errors
# ---------------------------------------------------------------------------

class ListParseError(AnimePickerError):
    """Raised when a list export is malformed or contains no entries.

    Surfaced to the presentation layer as a recoverable condition that
    prompts the user to upload a different file.
    """

    def __init__(
        self,
        message: str = "Failed to parse the anime list",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class IdentifierFormatError(AnimePickerError):
    """Raised when a list entry identifier cannot be read as a numeric id.

    Entries with such identifiers are skipped and never sent to the
    metadata service.
    """

    def __init__(
        self,
        message: str = "Identifier is not numeric",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Metadata service errors
# ---------------------------------------------------------------------------

class ResolveError(AnimePickerError):
    """Raised when resolving an identifier into metadata fails.

    Covers non-success HTTP status codes, transport errors and malformed
    response bodies.  No automatic retry is performed; the next request
    for the same identifier simply tries again.
    """

    def __init__(
        self,
        message: str = "Metadata resolve failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimitError(ResolveError):
    """Raised when the metadata service rejects a call with HTTP 429."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderUnavailableError(ResolveError):
    """Raised when the metadata service cannot be used at all.

    The Jikan adapter raises it once its shared HTTP client has been
    closed; callers treat it like any other failed resolve.
    """

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Session / configuration errors
# ---------------------------------------------------------------------------

class SessionError(AnimePickerError):
    """Raised when a session operation is invalid (e.g. no list loaded)."""

    def __init__(
        self,
        message: str = "Invalid session operation",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(AnimePickerError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
