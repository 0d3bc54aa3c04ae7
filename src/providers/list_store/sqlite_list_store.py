"""SQLite-backed list store.

Persists the user's uploaded list export to a local SQLite database at
``data/list_store.db`` so the next session starts from their own list.
Uses ``aiosqlite`` for async I/O.  The table holds at most one row.
"""

from __future__ import annotations

from pathlib import Path

import aiosqlite
import structlog

from src.interfaces.list_store_provider import IListStore

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/list_store.db")

# Single-row table: the CHECK pins the primary key to 1.
_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS saved_list (
    slot        INTEGER PRIMARY KEY CHECK (slot = 1),
    raw_list    TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_UPSERT_SQL = """\
INSERT INTO saved_list (slot, raw_list)
VALUES (1, ?)
ON CONFLICT(slot)
DO UPDATE SET raw_list   = excluded.raw_list,
              updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now');
"""

_SELECT_SQL = "SELECT raw_list FROM saved_list WHERE slot = 1;"

_DELETE_SQL = "DELETE FROM saved_list;"


class SQLiteListStore(IListStore):
    """SQLite persistence for the single saved list export."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    @property
    def db_path(self) -> Path:
        return self._db_path

    async def initialize(self) -> None:
        """Create the table if it doesn't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            await db.commit()
        logger.info("list_store_initialized", path=str(self._db_path))

    async def save(self, raw_list: str) -> None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_UPSERT_SQL, (raw_list,))
            await db.commit()
        logger.info("list_saved", size=len(raw_list))

    async def load(self) -> str | None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(_SELECT_SQL)
            row = await cursor.fetchone()
        return row[0] if row else None

    async def clear(self) -> None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_DELETE_SQL)
            await db.commit()
        logger.info("list_cleared", path=str(self._db_path))
