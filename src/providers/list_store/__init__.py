"""List store providers.

SQLiteListStore keeps the user's uploaded list export between restarts.
"""

from src.providers.list_store.sqlite_list_store import SQLiteListStore

__all__ = ["SQLiteListStore"]
