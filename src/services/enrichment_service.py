"""Enrichment service: resolves list entries into cached display metadata.

Owns the three pieces of shared state that both the foreground resolve
path (the session controller) and the background prefetch path (the
prefetch scheduler) go through:

    cache   -- append-only ``ICacheProvider`` keyed by list entry id
    ledger  -- ``InFlightLedger`` collapsing concurrent requests per id
    gate    -- ``RateLimitGate`` shared with every other outbound call

# ─── RESOLVE FLOW ─────────────────────────────────────────────────────
#
#   request(id)
#     ├─ id not numeric        → IdentifierFormatError (nothing issued)
#     ├─ cached                → already-completed future
#     ├─ in flight             → join the owner's future
#     └─ absent                → become owner, spawn _fetch task:
#                                   gate.acquire() → provider.resolve()
#                                   → cache.put() → ledger.complete()
#
# request() never awaits, so "cached? in flight? else begin" is atomic
# with respect to every other coroutine on the loop.  The owner writes
# the cache *before* releasing the ledger key, so a newcomer always sees
# either "in flight" or "cached", never a gap in between.
# ──────────────────────────────────────────────────────────────────────

One instance lives for one loaded list.  Loading a new list builds a new
service (fresh cache and ledger) and closes the old one: its fetch tasks
are cancelled and it refuses any further request.
"""

from __future__ import annotations

import asyncio

import structlog

from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.metadata_provider import IMetadataProvider
from src.models.catalog import ResolvedMetadata
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.utils.concurrency import InFlightLedger, RateLimitGate
from src.utils.errors import IdentifierFormatError, ResolveError, SessionError
from src.utils.logging import get_logger


def parse_anime_id(raw_id: str) -> int:
    """Return *raw_id* as a numeric anime id.

    Raises
    ------
    IdentifierFormatError
        If *raw_id* is empty or not made of ASCII digits.
    """
    text = raw_id.strip()
    if not text or not (text.isascii() and text.isdigit()):
        raise IdentifierFormatError(message=f"Identifier {raw_id!r} is not numeric")
    return int(text)


def _consume_outcome(future: asyncio.Future[ResolvedMetadata]) -> None:
    # Marks a failure as retrieved so an unobserved prefetch failure does
    # not produce "Future exception was never retrieved" at GC time.
    if not future.cancelled():
        future.exception()


class EnrichmentService:
    """Cache-first metadata resolver with per-id de-duplication.

    Parameters
    ----------
    provider:
        The external metadata service.
    gate:
        Rate-limit gate shared by every outbound call to *provider*.
    cache:
        Optional cache instance; a fresh :class:`MemoryCacheProvider`
        is created when omitted.
    """

    def __init__(
        self,
        provider: IMetadataProvider,
        gate: RateLimitGate,
        cache: ICacheProvider | None = None,
    ) -> None:
        self._provider = provider
        self._gate = gate
        self._cache: ICacheProvider = cache if cache is not None else MemoryCacheProvider()
        self._ledger: InFlightLedger[ResolvedMetadata] = InFlightLedger()
        self._tasks: set[asyncio.Task[None]] = set()
        self._outbound_calls = 0
        self._failures = 0
        self._closed = False
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Read-only state queries
    # ------------------------------------------------------------------

    @property
    def provider_name(self) -> str:
        return self._provider.get_provider_name()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def outbound_calls(self) -> int:
        """Number of calls made to the metadata service by this instance."""
        return self._outbound_calls

    @property
    def failures(self) -> int:
        return self._failures

    @property
    def cached_count(self) -> int:
        return len(self._cache)

    @property
    def in_flight_count(self) -> int:
        return len(self._ledger)

    def get_cached(self, item_id: str) -> ResolvedMetadata | None:
        return self._cache.get(item_id)

    def is_cached(self, item_id: str) -> bool:
        return self._cache.contains(item_id)

    def is_in_flight(self, item_id: str) -> bool:
        return self._ledger.is_in_flight(item_id)

    # ------------------------------------------------------------------
    # Resolve API
    # ------------------------------------------------------------------

    def request(self, item_id: str) -> asyncio.Future[ResolvedMetadata]:
        """Start or join resolution of *item_id* without waiting for it.

        Returns a future that completes with the metadata or fails with a
        :class:`~src.utils.errors.ResolveError`.  Every caller for the same
        id shares one future and therefore one outbound call.

        Raises
        ------
        IdentifierFormatError
            If *item_id* is not numeric.  Nothing is sent to the service.
        SessionError
            If the service has been closed.
        """
        if self._closed:
            raise SessionError(f"Cannot resolve {item_id}: enrichment service is closed")
        anime_id = parse_anime_id(item_id)

        cached = self._cache.get(item_id)
        if cached is not None:
            done: asyncio.Future[ResolvedMetadata] = asyncio.get_running_loop().create_future()
            done.set_result(cached)
            return done

        is_owner, handle = self._ledger.begin_or_join(item_id)
        if is_owner:
            handle.add_done_callback(_consume_outcome)
            task = asyncio.create_task(
                self._fetch(item_id, anime_id),
                name=f"resolve:{item_id}",
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        return handle

    async def resolve(self, item_id: str) -> ResolvedMetadata:
        """Resolve *item_id*, waiting for the (possibly shared) outcome.

        The shared future is shielded: cancelling one waiter must not
        cancel the outcome other waiters are attached to.
        """
        return await asyncio.shield(self.request(item_id))

    async def wait_idle(self) -> None:
        """Wait until every fetch task started so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel outstanding fetch tasks and wait for them to unwind."""
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        # A task cancelled before its first step never reaches its own
        # cleanup, so release whatever is still pending.
        for item_id in list(self._ledger):
            self._ledger.fail(item_id, asyncio.CancelledError())
        self._logger.debug("enrichment_closed", cancelled=len(tasks))

    # ------------------------------------------------------------------
    # Owner side
    # ------------------------------------------------------------------

    async def _fetch(self, item_id: str, anime_id: int) -> None:
        """Perform the outbound call for *item_id* and publish the outcome."""
        try:
            async with self._gate.acquire():
                self._outbound_calls += 1
                self._logger.info(
                    "resolve_started",
                    item_id=item_id,
                    provider=self._provider.get_provider_name(),
                )
                metadata = await self._provider.resolve(anime_id)
        except asyncio.CancelledError as exc:
            self._ledger.fail(item_id, exc)
            raise
        except ResolveError as exc:
            self._failures += 1
            self._logger.warning("resolve_failed", item_id=item_id, error=str(exc))
            self._ledger.fail(item_id, exc)
            return
        except Exception as exc:
            # Waiters must always be released, even on a provider bug.
            self._failures += 1
            self._logger.exception("resolve_unexpected_error", item_id=item_id)
            wrapped = ResolveError(
                message=f"Unexpected error resolving {item_id}: {exc}",
                provider_name=self._provider.get_provider_name(),
            )
            wrapped.__cause__ = exc
            self._ledger.fail(item_id, wrapped)
            return

        self._cache.put(item_id, metadata)
        self._ledger.complete(item_id, metadata)
        self._logger.info("resolve_complete", item_id=item_id, title=metadata.title)
