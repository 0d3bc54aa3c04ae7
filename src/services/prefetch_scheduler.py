"""Look-ahead prefetching for the swipe session.

Every time the cursor moves, the scheduler walks the next few list
positions and asks the enrichment service to resolve whatever is neither
cached nor already in flight.  The work it starts is detached: warming
never blocks the caller, is never cancelled when the cursor moves on, and
its only side effect is a cache write.  A prefetch that finishes after its
position has been passed is simply wasted work.

Each window slot has its own failure boundary.  A failed slot is logged
and dropped; the remaining slots are unaffected and the key stays absent
so a later request can retry it.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from functools import partial

import structlog

from src.models.catalog import ListEntry, ResolvedMetadata
from src.services.enrichment_service import EnrichmentService
from src.utils.errors import IdentifierFormatError
from src.utils.logging import get_logger

DEFAULT_WINDOW = 3


class PrefetchScheduler:
    """Warms the enrichment cache for the entries just after the cursor.

    Parameters
    ----------
    enrichment:
        The enrichment service whose cache is being warmed.  The scheduler
        holds a reference, never a copy, so it sees the same cache and
        in-flight ledger as the foreground resolver.
    window:
        Number of upcoming positions to warm (``cursor+1 .. cursor+window``).
    """

    def __init__(self, enrichment: EnrichmentService, window: int = DEFAULT_WINDOW) -> None:
        if window < 0:
            msg = f"window must be >= 0, got {window}"
            raise ValueError(msg)
        self._enrichment = enrichment
        self._window = window
        self._issued_total = 0
        self._failed_total = 0
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def window(self) -> int:
        return self._window

    @property
    def issued_total(self) -> int:
        """Number of background resolves started over this scheduler's lifetime."""
        return self._issued_total

    @property
    def failed_total(self) -> int:
        return self._failed_total

    def window_positions(self, total: int, cursor: int) -> range:
        """Return the list positions covered by a warm pass at *cursor*."""
        start = cursor + 1
        return range(start, max(start, min(cursor + self._window, total - 1) + 1))

    def warm(self, entries: Sequence[ListEntry], cursor: int) -> list[str]:
        """Issue background resolves for the uncached entries after *cursor*.

        Must be called from within a running event loop.  Returns the ids
        for which a resolve was actually issued, in window order.
        """
        if cursor < 0:
            msg = f"cursor must be >= 0, got {cursor}"
            raise ValueError(msg)

        if self._enrichment.closed:
            return []

        issued: list[str] = []
        for position in self.window_positions(len(entries), cursor):
            entry = entries[position]
            if self._enrichment.is_cached(entry.id) or self._enrichment.is_in_flight(entry.id):
                continue

            try:
                handle = self._enrichment.request(entry.id)
            except IdentifierFormatError:
                self._logger.debug(
                    "prefetch_slot_skipped",
                    item_id=entry.id,
                    position=position,
                    reason="non_numeric_id",
                )
                continue

            handle.add_done_callback(partial(self._on_slot_done, entry.id, position))
            issued.append(entry.id)

        self._issued_total += len(issued)
        if issued:
            self._logger.debug("prefetch_issued", cursor=cursor, item_ids=issued)
        return issued

    def _on_slot_done(
        self,
        item_id: str,
        position: int,
        future: asyncio.Future[ResolvedMetadata],
    ) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self._failed_total += 1
            self._logger.warning(
                "prefetch_slot_failed",
                item_id=item_id,
                position=position,
                error=str(exc),
            )
