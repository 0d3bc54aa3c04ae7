"""Unit tests for SQLiteListStore.

Each test uses a temporary SQLite database to ensure isolation.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio

from src.providers.list_store.sqlite_list_store import SQLiteListStore


@pytest_asyncio.fixture
async def store(tmp_path: Path) -> SQLiteListStore:
    """Create and initialize a store with a temp DB."""
    list_store = SQLiteListStore(db_path=tmp_path / "nested" / "list_store.db")
    await list_store.initialize()
    return list_store


class TestSQLiteListStore:
    @pytest.mark.asyncio
    async def test_initialize_creates_parent_directory(self, store: SQLiteListStore) -> None:
        assert store.db_path.exists()

    @pytest.mark.asyncio
    async def test_load_empty_returns_none(self, store: SQLiteListStore) -> None:
        assert await store.load() is None
        assert await store.has_saved_list() is False

    @pytest.mark.asyncio
    async def test_save_and_load(self, store: SQLiteListStore, sample_list_xml: str) -> None:
        await store.save(sample_list_xml)

        assert await store.load() == sample_list_xml
        assert await store.has_saved_list() is True

    @pytest.mark.asyncio
    async def test_save_replaces_previous_list(self, store: SQLiteListStore) -> None:
        await store.save("<myanimelist>first</myanimelist>")
        await store.save("<myanimelist>second</myanimelist>")

        assert await store.load() == "<myanimelist>second</myanimelist>"

    @pytest.mark.asyncio
    async def test_clear_removes_saved_list(self, store: SQLiteListStore) -> None:
        await store.save("<myanimelist/>")
        await store.clear()

        assert await store.load() is None

    @pytest.mark.asyncio
    async def test_clear_when_empty_is_noop(self, store: SQLiteListStore) -> None:
        await store.clear()
        assert await store.load() is None

    @pytest.mark.asyncio
    async def test_saved_list_survives_new_instance(
        self, store: SQLiteListStore, sample_list_xml: str
    ) -> None:
        await store.save(sample_list_xml)

        reopened = SQLiteListStore(db_path=store.db_path)
        await reopened.initialize()

        assert await reopened.load() == sample_list_xml
