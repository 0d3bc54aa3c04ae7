"""Shared pytest fixtures for the animePicker test suite."""

from __future__ import annotations

import asyncio
from collections import Counter
from pathlib import Path
from typing import Any

import pytest

from src.interfaces.metadata_provider import IMetadataProvider
from src.models.catalog import ListEntry, ResolvedMetadata
from src.utils.concurrency import RateLimitGate
from src.utils.errors import ResolveError

SAMPLE_LIST_XML = """\
<?xml version="1.0" encoding="UTF-8" ?>
<myanimelist>
  <myinfo>
    <user_name>tester</user_name>
    <user_total_anime>3</user_total_anime>
  </myinfo>
  <anime>
    <series_animedb_id>1</series_animedb_id>
    <series_title><![CDATA[Cowboy Bebop]]></series_title>
    <my_status>Completed</my_status>
  </anime>
  <anime>
    <series_animedb_id>5114</series_animedb_id>
    <series_title><![CDATA[Fullmetal Alchemist: Brotherhood]]></series_title>
    <my_status>Plan to Watch</my_status>
  </anime>
  <anime>
    <series_animedb_id>9253</series_animedb_id>
    <series_title><![CDATA[Steins;Gate]]></series_title>
    <my_status>Watching</my_status>
  </anime>
</myanimelist>
"""


def make_metadata(anime_id: int, **overrides: Any) -> ResolvedMetadata:
    """Build a ResolvedMetadata with predictable field values."""
    fields: dict[str, Any] = {
        "id": anime_id,
        "title": f"Anime {anime_id}",
        "image_url": f"https://cdn.example.com/images/{anime_id}.jpg",
        "episode_count": 12,
        "kind": "TV",
        "score": 8.0,
    }
    fields.update(overrides)
    return ResolvedMetadata(**fields)


def make_entries(*ids: str) -> list[ListEntry]:
    return [ListEntry(id=i, title=f"Entry {i}", status="Plan to Watch") for i in ids]


class FakeMetadataProvider(IMetadataProvider):
    """Instrumented metadata provider that counts calls per identifier.

    ``fail_ids`` makes resolves for those ids raise ``ResolveError``.
    ``block_ids`` makes resolves for those ids wait until :meth:`release`
    is called, so tests can observe in-flight state.
    """

    def __init__(
        self,
        fail_ids: set[int] | None = None,
        block_ids: set[int] | None = None,
        clock: Any = None,
    ) -> None:
        self.calls: Counter[int] = Counter()
        self.started_at: list[float] = []
        self.fail_ids: set[int] = set(fail_ids or ())
        self._events: dict[int, asyncio.Event] = {i: asyncio.Event() for i in block_ids or ()}
        self._clock = clock

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    def release(self, anime_id: int) -> None:
        self._events[anime_id].set()

    async def resolve(self, anime_id: int) -> ResolvedMetadata:
        self.calls[anime_id] += 1
        if self._clock is not None:
            self.started_at.append(self._clock())
        event = self._events.get(anime_id)
        if event is not None:
            await event.wait()
        else:
            await asyncio.sleep(0)
        if anime_id in self.fail_ids:
            raise ResolveError(message=f"HTTP 503 for anime {anime_id}", provider_name="fake")
        return make_metadata(anime_id)

    def get_provider_name(self) -> str:
        return "fake"

    def is_available(self) -> bool:
        return True


class FakeClock:
    """Manually advanced monotonic clock with a matching async sleep."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def sample_list_xml() -> str:
    return SAMPLE_LIST_XML


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def instant_gate() -> RateLimitGate:
    """A gate with no spacing, for tests that are not about rate limiting."""
    return RateLimitGate(min_interval=0.0)


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Return a minimal mock configuration for testing."""
    return {
        "api": {"cors_origins": ["*"]},
        "list": {
            "allowed_extensions": [".xml"],
            "max_upload_bytes": 1024 * 1024,
        },
        "enrichment": {"fetch_min_interval": 0.0, "prefetch_window": 3},
        "session": {"decision_cooldown": 1.0},
    }
