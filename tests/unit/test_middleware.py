"""Unit tests for the error-to-status mapping used by ErrorHandlingMiddleware."""

from __future__ import annotations

import pytest

from src.api.middleware import status_for_error
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


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (ListParseError(), 400),
        (IdentifierFormatError(), 400),
        (SessionError(), 409),
        (ResolveError(), 502),
        (RateLimitError(), 502),
        (ProviderUnavailableError(), 503),
        (ConfigurationError(), 500),
    ],
)
def test_status_for_error(error: AnimePickerError, expected: int) -> None:
    assert status_for_error(error) == expected
