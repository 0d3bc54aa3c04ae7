"""MyAnimeList export parsing.

Turns the XML produced by MyAnimeList's "Export My List" feature into the
``ListEntry`` sequence the swipe session consumes.  Only three fields per
``<anime>`` element matter:

    <series_animedb_id>  → ListEntry.id
    <series_title>       → ListEntry.title
    <my_status>          → ListEntry.status

Missing child tags become empty strings rather than errors; an entry with
an empty id is kept and later skipped by the enrichment service like any
other non-numeric id.

Every loaded list is shuffled so each session walks the catalog in a new
order.
"""

from __future__ import annotations

import random
import xml.etree.ElementTree as ET
from collections.abc import Sequence
from pathlib import Path

from src.models.catalog import ListEntry
from src.utils.errors import ListParseError
from src.utils.logging import get_logger

_ENTRY_TAG = "anime"
_ID_TAG = "series_animedb_id"
_TITLE_TAG = "series_title"
_STATUS_TAG = "my_status"

_logger = get_logger(__name__)


def _child_text(element: ET.Element, tag: str) -> str:
    child = element.find(tag)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def parse_anime_list(xml_text: str) -> list[ListEntry]:
    """Parse a MyAnimeList XML export into list entries, in document order.

    Raises
    ------
    ListParseError
        If the document is not well-formed XML or contains no ``<anime>``
        entries.
    """
    if not xml_text or not xml_text.strip():
        raise ListParseError(message="The uploaded list is empty")

    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        raise ListParseError(message=f"Malformed XML: {exc}") from exc

    elements = [root] if root.tag == _ENTRY_TAG else list(root.iter(_ENTRY_TAG))
    if not elements:
        raise ListParseError(
            message="No anime entries found. Is this a MyAnimeList export?"
        )

    entries = [
        ListEntry(
            id=_child_text(el, _ID_TAG),
            title=_child_text(el, _TITLE_TAG),
            status=_child_text(el, _STATUS_TAG),
        )
        for el in elements
    ]

    _logger.info(
        "anime_list_parsed",
        entries=len(entries),
        missing_ids=sum(1 for e in entries if not e.id),
    )
    return entries


def shuffle_entries(
    entries: Sequence[ListEntry],
    seed: int | None = None,
) -> list[ListEntry]:
    """Return a uniformly shuffled copy of *entries*.

    ``random.shuffle`` is a Fisher–Yates shuffle; passing *seed* makes the
    order reproducible.
    """
    shuffled = list(entries)
    random.Random(seed).shuffle(shuffled)
    return shuffled


def load_list_file(path: str | Path) -> str:
    """Read a list export from disk.

    Raises
    ------
    ListParseError
        If the file does not exist or cannot be read.
    """
    list_path = Path(path)
    try:
        return list_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ListParseError(message=f"Cannot read list file {list_path}: {exc}") from exc
