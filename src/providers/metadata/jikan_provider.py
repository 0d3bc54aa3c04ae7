"""Jikan provider implementing IMetadataProvider.

Uses the public Jikan v4 REST API (api.jikan.moe), an unofficial JSON
front for MyAnimeList.  No API key is required.  Jikan enforces its own
rate limit (roughly 3 requests/second, 60/minute); callers are expected to
funnel every call through the shared
:class:`~src.utils.concurrency.RateLimitGate`, so this adapter does not
throttle on its own.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from src.interfaces.metadata_provider import IMetadataProvider
from src.models.catalog import ResolvedMetadata
from src.utils.errors import ProviderUnavailableError, RateLimitError, ResolveError
from src.utils.logging import get_logger

_DEFAULT_BASE_URL = "https://api.jikan.moe/v4"
_USER_AGENT = "animePicker/0.1.0"


class JikanMetadataProvider(IMetadataProvider):
    """Metadata provider backed by ``GET {base_url}/anime/{id}``.

    The shared ``httpx.AsyncClient`` is owned by the application and
    closed on shutdown; this adapter never closes it.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str = _DEFAULT_BASE_URL,
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._logger = get_logger(__name__)

    # -- IMetadataProvider implementation -------------------------------------

    async def resolve(self, anime_id: int) -> ResolvedMetadata:
        url = f"{self._base_url}/anime/{anime_id}"
        if not self.is_available():
            raise ProviderUnavailableError(
                message=f"HTTP client is closed; cannot fetch anime {anime_id}",
                provider_name=self.get_provider_name(),
            )
        headers = {"User-Agent": _USER_AGENT, "Accept": "application/json"}

        try:
            response = await self._http.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise ResolveError(
                message=f"Transport error for anime {anime_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code == 429:
            raise RateLimitError(
                message=f"Rate limited while fetching anime {anime_id}",
                provider_name=self.get_provider_name(),
            )
        if not response.is_success:
            raise ResolveError(
                message=f"HTTP {response.status_code} for anime {anime_id}",
                provider_name=self.get_provider_name(),
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ResolveError(
                message=f"Response for anime {anime_id} is not valid JSON",
                provider_name=self.get_provider_name(),
            ) from exc

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise ResolveError(
                message=f"Response for anime {anime_id} has no data object",
                provider_name=self.get_provider_name(),
            )

        metadata = self._map_anime(data)
        self._logger.debug(
            "jikan_resolve_complete",
            anime_id=anime_id,
            title=metadata.title,
        )
        return metadata

    def get_provider_name(self) -> str:
        return "jikan"

    def is_available(self) -> bool:
        """Jikan needs no credentials; it is usable while the client is open."""
        return not self._http.is_closed

    # -- Private helpers -------------------------------------------------------

    def _map_anime(self, data: dict[str, Any]) -> ResolvedMetadata:
        """Map a Jikan ``data`` object to :class:`ResolvedMetadata`."""
        images = data.get("images")
        jpg = images.get("jpg") if isinstance(images, dict) else None
        if not isinstance(jpg, dict):
            jpg = {}

        try:
            return ResolvedMetadata(
                id=data["mal_id"],
                title=data["title"],
                alternate_title=data.get("title_english") or None,
                image_url=jpg.get("image_url"),
                large_image_url=jpg.get("large_image_url") or None,
                episode_count=data.get("episodes"),
                kind=data.get("type"),
                score=data.get("score"),
                synopsis=data.get("synopsis"),
                airing_status=data.get("status"),
            )
        except (KeyError, TypeError, ValidationError) as exc:
            raise ResolveError(
                message=f"Malformed anime record: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
