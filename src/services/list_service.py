"""List loading, upload and reset.

Decides which list a session runs on and keeps the saved copy in sync:

    startup  → saved upload (if any) else the bundled default list
    upload   → parse first, persist only if parsing succeeded
    clear    → forget the saved upload, fall back to the default list

Every list handed out is freshly shuffled.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog

from src.interfaces.list_store_provider import IListStore
from src.models.catalog import ListEntry
from src.services.list_parser import load_list_file, parse_anime_list, shuffle_entries
from src.utils.errors import ListParseError
from src.utils.logging import get_logger


@dataclass(frozen=True)
class LoadedList:
    """A shuffled list ready for a session, plus where it came from."""

    entries: list[ListEntry]
    using_default_list: bool


class ListService:
    """Coordinates the list parser, the list store and the default list file."""

    def __init__(
        self,
        store: IListStore,
        default_list_path: str | Path,
        shuffle_seed: int | None = None,
    ) -> None:
        self._store = store
        self._default_list_path = Path(default_list_path)
        self._shuffle_seed = shuffle_seed
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def load_initial(self) -> LoadedList:
        """Return the saved list, or the default list when nothing is saved.

        A saved list that no longer parses is discarded so the next start
        does not fail the same way.
        """
        saved = await self._store.load()
        if saved is not None:
            try:
                entries = parse_anime_list(saved)
            except ListParseError as exc:
                self._logger.warning("saved_list_invalid", error=str(exc))
                await self._store.clear()
            else:
                return LoadedList(entries=self._shuffle(entries), using_default_list=False)

        return self.load_default()

    def load_default(self) -> LoadedList:
        """Parse the bundled default list.

        Raises
        ------
        ListParseError
            If the default list file is missing or invalid.
        """
        entries = parse_anime_list(load_list_file(self._default_list_path))
        return LoadedList(entries=self._shuffle(entries), using_default_list=True)

    async def upload(self, raw_list: str) -> LoadedList:
        """Validate and persist an uploaded export.

        Raises
        ------
        ListParseError
            If the export is malformed or empty.  Nothing is saved.
        """
        entries = parse_anime_list(raw_list)
        await self._store.save(raw_list)
        self._logger.info("list_uploaded", entries=len(entries))
        return LoadedList(entries=self._shuffle(entries), using_default_list=False)

    async def clear(self) -> LoadedList:
        """Forget the saved export and return the default list."""
        await self._store.clear()
        self._logger.info("saved_list_cleared")
        return self.load_default()

    async def has_saved_list(self) -> bool:
        return await self._store.has_saved_list()

    def _shuffle(self, entries: list[ListEntry]) -> list[ListEntry]:
        return shuffle_entries(entries, seed=self._shuffle_seed)
