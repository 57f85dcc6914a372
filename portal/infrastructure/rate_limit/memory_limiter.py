from __future__ import annotations

import asyncio
import logging
import threading
import time
from contextlib import suppress
from dataclasses import dataclass
from typing import Callable, Optional

from portal.domain.ports.rate_limiter import RateLimiterPort
from portal.domain.rate_limit import RateLimitResult

logger = logging.getLogger(__name__)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


@dataclass
class _Record:
    count: int
    window_start: float


class InMemoryRateLimiter(RateLimiterPort):
    """
    Fixed-window request counter keyed by an opaque identifier.

    The registry is process-local: N app instances behind a balancer give an
    effective quota of N x max_requests. Memory is bounded two ways:
    - a background sweep (start()/stop()) drops records older than
      `max_window_ms` every `cleanup_interval` seconds;
    - inserting a new identifier into a full registry evicts the record
      with the oldest window start.
    """

    def __init__(
        self,
        *,
        max_entries: int = 10_000,
        max_window_ms: int = 60_000,
        cleanup_interval: float = 300.0,
        clock: Callable[[], float] = _monotonic_ms,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self.max_window_ms = max_window_ms
        self.cleanup_interval = cleanup_interval
        self._clock = clock
        # insertion order == window_start order (clock is monotonic and a
        # restarted window is re-inserted at the end)
        self._records: dict[str, _Record] = {}
        self._lock = threading.Lock()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        """True while the background sweep task is alive."""
        return self._task is not None and not self._task.done()

    def __len__(self) -> int:
        return len(self._records)

    def check(self, identifier: str, max_requests: int, window_ms: int) -> RateLimitResult:
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")

        with self._lock:
            now = self._clock()
            record = self._records.get(identifier)

            if record is None or now - record.window_start > window_ms:
                if record is None:
                    self._make_room()
                else:
                    del self._records[identifier]
                self._records[identifier] = _Record(count=1, window_start=now)
                return RateLimitResult(
                    allowed=True, remaining=max_requests - 1, reset_in_ms=window_ms
                )

            reset_in_ms = int(window_ms - (now - record.window_start))
            if record.count >= max_requests:
                return RateLimitResult(allowed=False, remaining=0, reset_in_ms=reset_in_ms)

            record.count += 1
            return RateLimitResult(
                allowed=True,
                remaining=max_requests - record.count,
                reset_in_ms=reset_in_ms,
            )

    def _make_room(self) -> None:
        while len(self._records) >= self.max_entries:
            oldest = next(iter(self._records))
            del self._records[oldest]
            logger.debug("rate limit registry full; evicted oldest", extra={"key": oldest})

    def sweep(self) -> int:
        """Remove every record whose window started more than max_window_ms ago."""
        with self._lock:
            now = self._clock()
            stale = [
                key
                for key, record in self._records.items()
                if now - record.window_start > self.max_window_ms
            ]
            for key in stale:
                del self._records[key]
        return len(stale)

    async def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run_sweeps())
            logger.info(
                "rate limit sweeper started",
                extra={"interval_s": self.cleanup_interval, "max_entries": self.max_entries},
            )

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
            self._task = None
            logger.info("rate limit sweeper stopped")

    async def _run_sweeps(self) -> None:
        while True:
            await asyncio.sleep(self.cleanup_interval)
            removed = self.sweep()
            if removed:
                logger.info(
                    "rate limit sweep",
                    extra={"removed": removed, "remaining": len(self._records)},
                )
