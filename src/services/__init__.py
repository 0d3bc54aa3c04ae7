"""Services: metadata enrichment, look-ahead prefetching and list handling."""

from src.services.enrichment_service import EnrichmentService, parse_anime_id
from src.services.list_parser import load_list_file, parse_anime_list, shuffle_entries
from src.services.list_service import ListService, LoadedList
from src.services.prefetch_scheduler import PrefetchScheduler

__all__ = [
    "EnrichmentService",
    "ListService",
    "LoadedList",
    "PrefetchScheduler",
    "load_list_file",
    "parse_anime_id",
    "parse_anime_list",
    "shuffle_entries",
]
