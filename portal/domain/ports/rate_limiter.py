from typing import Protocol

from portal.domain.rate_limit import RateLimitResult


class RateLimiterPort(Protocol):
    def check(self, identifier: str, max_requests: int, window_ms: int) -> RateLimitResult:
        """Count one request for `identifier` and decide whether it may proceed."""

    def sweep(self) -> int:
        """Drop stale records; return how many were removed."""
