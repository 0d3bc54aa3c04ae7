"""Swipe-session controller: cursor, decisions, liked list, cooldown.

# ─── STATE MACHINE ────────────────────────────────────────────────────
#
#   load_list()
#       │
#       ▼
#   RESOLVING ──(metadata arrives)──→ READY ──decide()──→ cursor += 1 ─┐
#       │                                                               │
#       └──(resolve fails)──→ UNAVAILABLE ──retry_current()──→ RESOLVING│
#                                                                       │
#   ◄───────────────────────────────────────────────────────────────────┘
#   cursor == len(entries) ──→ EXHAUSTED  (terminal; nothing is resolved)
#
# Every cursor change (initial load included) does two things:
#   1. requests foreground resolution of entries[cursor]
#   2. runs a fresh prefetch warm pass over the next window
#
# A decision is accepted only when the cooldown has elapsed AND the
# current entry has metadata.  Accepting it starts the cooldown, so a
# double-tap produces exactly one advancement.
# ──────────────────────────────────────────────────────────────────────

The controller exclusively owns :class:`SessionState`.  The enrichment
service (cache + in-flight ledger) is shared by reference with the
prefetch scheduler and is rebuilt from scratch whenever a new list is
loaded.  Foreground results that arrive after the cursor (or the list)
has moved on are never presented; they only land in the cache.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Sequence

import structlog

from src.models.catalog import Decision, ListEntry, ResolvedMetadata
from src.models.session import SessionPhase, SessionState, SessionView
from src.pipeline.view_broadcaster import ViewBroadcaster
from src.services.enrichment_service import EnrichmentService
from src.services.prefetch_scheduler import DEFAULT_WINDOW, PrefetchScheduler
from src.utils.errors import IdentifierFormatError, ResolveError, SessionError
from src.utils.logging import get_logger

DEFAULT_COOLDOWN_SECONDS = 1.0


class SessionController:
    """Drives one swipe session over a loaded list.

    Parameters
    ----------
    enrichment_factory:
        Builds a fresh :class:`EnrichmentService`.  Called once at
        construction and again on every list load.
    prefetch_window:
        Number of upcoming entries warmed after each cursor change.
    decision_cooldown:
        Seconds after an accepted decision during which further decisions
        are ignored.
    broadcaster:
        Receives a :class:`SessionView` on every observable change.
    clock:
        Monotonic clock used for the cooldown, injectable for tests.
    """

    def __init__(
        self,
        enrichment_factory: Callable[[], EnrichmentService],
        *,
        prefetch_window: int = DEFAULT_WINDOW,
        decision_cooldown: float = DEFAULT_COOLDOWN_SECONDS,
        broadcaster: ViewBroadcaster | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._enrichment_factory = enrichment_factory
        self._prefetch_window = prefetch_window
        self._cooldown = decision_cooldown
        self._broadcaster = broadcaster if broadcaster is not None else ViewBroadcaster()
        self._clock = clock

        self._state = SessionState()
        self._enrichment = enrichment_factory()
        self._scheduler = PrefetchScheduler(self._enrichment, prefetch_window)
        self._generation = 0
        self._foreground: asyncio.Task[None] | None = None
        self._using_default_list = False
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def enrichment(self) -> EnrichmentService:
        return self._enrichment

    @property
    def scheduler(self) -> PrefetchScheduler:
        return self._scheduler

    @property
    def broadcaster(self) -> ViewBroadcaster:
        return self._broadcaster

    @property
    def cursor(self) -> int:
        return self._state.cursor

    @property
    def total(self) -> int:
        return len(self._state.entries)

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    @property
    def current_entry(self) -> ListEntry | None:
        if self._state.cursor < len(self._state.entries):
            return self._state.entries[self._state.cursor]
        return None

    @property
    def current_metadata(self) -> ResolvedMetadata | None:
        return self._state.current_metadata

    @property
    def decisions(self) -> dict[str, Decision]:
        return dict(self._state.decisions)

    @property
    def liked(self) -> list[ResolvedMetadata]:
        return list(self._state.liked)

    @property
    def cooldown_active(self) -> bool:
        return self._clock() < self._state.cooldown_until

    def view(self) -> SessionView:
        """Build a read-only snapshot of the current session."""
        state = self._state
        return SessionView(
            phase=state.phase,
            position=state.cursor,
            total=len(state.entries),
            entry=self.current_entry,
            current=state.current_metadata,
            liked=list(state.liked),
            decisions_made=len(state.decisions),
            cooldown_active=self.cooldown_active,
            using_default_list=self._using_default_list,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def load_list(
        self,
        entries: Sequence[ListEntry],
        *,
        using_default_list: bool = False,
    ) -> SessionView:
        """Discard all session and enrichment state and start over on *entries*."""
        self._cancel_foreground()
        self._generation += 1
        generation = self._generation
        # Swap before the first await: nothing may reach the previous list
        # once the generation has moved on.
        previous = self._enrichment
        self._state = SessionState(entries=list(entries))
        self._enrichment = self._enrichment_factory()
        self._scheduler = PrefetchScheduler(self._enrichment, self._prefetch_window)
        self._using_default_list = using_default_list
        await previous.aclose()
        if generation != self._generation:
            # A newer load took over while the previous service was closing.
            return self.view()

        self._logger.info(
            "session_list_loaded",
            entries=len(self._state.entries),
            using_default_list=using_default_list,
            generation=self._generation,
        )
        await self._enter_position()
        return self.view()

    async def decide(self, decision: Decision | str) -> bool:
        """Apply a like/dislike to the current entry.

        Returns ``True`` if the decision was accepted (and the cursor
        advanced), ``False`` if it was ignored because of the cooldown or
        because the current entry has no metadata yet. An unknown decision
        value raises ``SessionError``.
        """
        try:
            choice = Decision(decision)
        except ValueError:
            raise SessionError(f"Unknown decision: {decision!r}") from None
        state = self._state

        if self.cooldown_active:
            self._logger.debug("decision_ignored", reason="cooldown", cursor=state.cursor)
            return False

        entry = self.current_entry
        metadata = state.current_metadata
        if entry is None or metadata is None:
            self._logger.debug("decision_ignored", reason="not_ready", cursor=state.cursor)
            return False

        # A duplicate id later in the list keeps its first verdict.
        state.decisions.setdefault(entry.id, choice)
        if choice is Decision.LIKED:
            state.liked.append(metadata)
        state.cooldown_until = self._clock() + self._cooldown
        state.cursor += 1

        self._logger.info(
            "decision_recorded",
            item_id=entry.id,
            decision=choice.value,
            cursor=state.cursor,
            liked=len(state.liked),
        )
        await self._enter_position()
        return True

    async def retry_current(self) -> bool:
        """Re-request metadata for the current entry after a failed resolve."""
        if self._state.phase is not SessionPhase.UNAVAILABLE:
            return False
        await self._enter_position()
        return True

    async def wait_for_current(self) -> SessionView:
        """Wait for the pending foreground resolve (if any) and return the view."""
        task = self._foreground
        if task is not None and not task.done():
            await asyncio.shield(task)
        return self.view()

    async def aclose(self) -> None:
        """Stop the foreground task and cancel outstanding fetches."""
        self._cancel_foreground()
        await self._enrichment.aclose()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _enter_position(self) -> None:
        state = self._state
        state.current_metadata = None
        entry = self.current_entry

        if entry is None:
            if state.entries:
                state.phase = SessionPhase.EXHAUSTED
                self._logger.info("session_exhausted", total=len(state.entries))
            else:
                state.phase = SessionPhase.EMPTY
            await self._broadcaster.publish(self.view())
            return

        cached = self._enrichment.get_cached(entry.id)
        if cached is not None:
            state.current_metadata = cached
            state.phase = SessionPhase.READY
        else:
            try:
                handle = self._enrichment.request(entry.id)
            except IdentifierFormatError as exc:
                state.phase = SessionPhase.UNAVAILABLE
                self._logger.warning(
                    "current_entry_unresolvable",
                    item_id=entry.id,
                    error=str(exc),
                )
            else:
                state.phase = SessionPhase.RESOLVING
                self._foreground = asyncio.create_task(
                    self._await_foreground(self._generation, state.cursor, entry, handle),
                    name=f"foreground:{entry.id}",
                )

        self._scheduler.warm(state.entries, state.cursor)
        await self._broadcaster.publish(self.view())

    async def _await_foreground(
        self,
        generation: int,
        cursor: int,
        entry: ListEntry,
        handle: asyncio.Future[ResolvedMetadata],
    ) -> None:
        try:
            metadata = await asyncio.shield(handle)
        except ResolveError as exc:
            if self._is_current(generation, cursor):
                self._state.phase = SessionPhase.UNAVAILABLE
                self._logger.warning("current_entry_failed", item_id=entry.id, error=str(exc))
                await self._broadcaster.publish(self.view())
            return

        if not self._is_current(generation, cursor):
            self._logger.debug("foreground_result_stale", item_id=entry.id, cursor=cursor)
            return

        self._state.current_metadata = metadata
        self._state.phase = SessionPhase.READY
        await self._broadcaster.publish(self.view())

    def _is_current(self, generation: int, cursor: int) -> bool:
        return generation == self._generation and cursor == self._state.cursor

    def _cancel_foreground(self) -> None:
        if self._foreground is not None and not self._foreground.done():
            self._foreground.cancel()
        self._foreground = None
