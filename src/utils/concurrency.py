"""Shared concurrency primitives for metadata enrichment.

Two building blocks coordinate every outbound metadata call:

1. **RateLimitGate** -- serializes call *starts* so that two consecutive
   permitted calls are never less than ``min_interval`` seconds apart.
   One gate is shared by the foreground resolve path and the background
   prefetch path, so the combined call rate never exceeds one call per
   interval.  Waiters are admitted in FIFO order of their ``acquire()``
   request; there is no priority lane.

2. **InFlightLedger** -- tracks identifiers whose resolve is currently
   running.  The first requester for a key becomes the owner and receives
   a fresh future; every later requester joins that same future.  The
   owner publishes the outcome (result or exception) and the key is
   removed, so a later miss can try again.

Both are plain asyncio objects meant to be used from a single event loop.
``begin_or_join`` never suspends, which is what makes the check-then-act
sequence in the enrichment service atomic.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from contextlib import asynccontextmanager
from typing import Generic, TypeVar

import structlog

from src.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


class RateLimitGate:
    """Minimum-interval gate for outbound calls.

    Parameters
    ----------
    min_interval:
        Minimum number of seconds between the start of two permitted calls.
    clock:
        Monotonic clock, injectable for tests.
    sleep:
        Coroutine function used to wait, injectable for tests.
    """

    def __init__(
        self,
        min_interval: float = 0.9,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if min_interval < 0:
            msg = f"min_interval must be >= 0, got {min_interval}"
            raise ValueError(msg)
        self._min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        # asyncio.Lock wakes waiters in FIFO order.
        self._lock = asyncio.Lock()
        self._last_start: float | None = None
        self._waiting = 0

    @property
    def min_interval(self) -> float:
        return self._min_interval

    @property
    def waiting(self) -> int:
        """Number of callers currently queued for a permit."""
        return self._waiting

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[float]:
        """Wait for a permit and yield the monotonic start time of the call.

        The lock is held only while waiting out the interval, not for the
        duration of the call itself, so a slow response does not delay
        the next permitted start beyond ``min_interval``.
        """
        self._waiting += 1
        try:
            async with self._lock:
                if self._last_start is not None:
                    remaining = self._min_interval - (self._clock() - self._last_start)
                    if remaining > 0:
                        _logger.debug("fetch_gate_wait", seconds=round(remaining, 3))
                        await self._sleep(remaining)
                started_at = self._clock()
                self._last_start = started_at
        finally:
            self._waiting -= 1

        yield started_at


class InFlightLedger(Generic[_T]):
    """Per-key de-duplication of concurrent asynchronous work."""

    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Future[_T]] = {}

    def begin_or_join(self, key: str) -> tuple[bool, asyncio.Future[_T]]:
        """Register interest in *key*.

        Returns
        -------
        tuple[bool, asyncio.Future]
            ``(True, future)`` for the first caller, who must eventually
            call :meth:`complete` or :meth:`fail`; ``(False, future)`` for
            every caller that arrives while the key is in flight.
        """
        future = self._pending.get(key)
        if future is not None:
            _logger.debug("in_flight_joined", key=key)
            return False, future

        future = asyncio.get_running_loop().create_future()
        self._pending[key] = future
        return True, future

    def complete(self, key: str, value: _T) -> None:
        """Publish *value* to every waiter on *key* and release the key.

        A key that was already released (for example by a shutdown sweep)
        is ignored.
        """
        future = self._pending.pop(key, None)
        if future is not None and not future.done():
            future.set_result(value)

    def fail(self, key: str, exc: BaseException) -> None:
        """Publish *exc* to every waiter on *key* and release the key."""
        future = self._pending.pop(key, None)
        if future is None or future.done():
            return
        if isinstance(exc, asyncio.CancelledError):
            future.cancel()
        else:
            future.set_exception(exc)

    def is_in_flight(self, key: str) -> bool:
        return key in self._pending

    def __contains__(self, key: object) -> bool:
        return key in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._pending))
