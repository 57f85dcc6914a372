from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_in_ms: int

    @property
    def retry_after_seconds(self) -> int:
        return max(1, math.ceil(self.reset_in_ms / 1000))


@dataclass(frozen=True)
class RateLimitPolicy:
    max_requests: int
    window_ms: int


# Endpoint category -> quota. The limiter itself never reads this table.
RATE_LIMITS: dict[str, RateLimitPolicy] = {
    "search": RateLimitPolicy(max_requests=20, window_ms=60_000),
    "company_detail": RateLimitPolicy(max_requests=30, window_ms=60_000),
    "compare": RateLimitPolicy(max_requests=15, window_ms=60_000),
    "batch": RateLimitPolicy(max_requests=20, window_ms=60_000),
    "login": RateLimitPolicy(max_requests=5, window_ms=60_000),
    "register": RateLimitPolicy(max_requests=3, window_ms=60_000),
    "forgot_password": RateLimitPolicy(max_requests=3, window_ms=60_000),
    "verify_email": RateLimitPolicy(max_requests=5, window_ms=60_000),
    "resend_verification": RateLimitPolicy(max_requests=2, window_ms=60_000),
}

UNKNOWN_CLIENT = "unknown"


def client_identifier(forwarded_for: str | None) -> str:
    """
    First hop of an X-Forwarded-For header, or "unknown".
    The header is client controlled; callers accept that spoofing risk.
    """
    if not forwarded_for:
        return UNKNOWN_CLIENT
    first = forwarded_for.split(",")[0].strip()
    return first or UNKNOWN_CLIENT


def rate_limit_key(category: str, client: str) -> str:
    return f"{category}:{client}"
