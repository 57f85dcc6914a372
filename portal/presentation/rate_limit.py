import logging

from fastapi import Depends, Request
from fastapi.responses import JSONResponse

from portal.domain.ports.rate_limiter import RateLimiterPort
from portal.domain.rate_limit import (
    RATE_LIMITS,
    RateLimitResult,
    client_identifier,
    rate_limit_key,
)
from portal.presentation.dependencies import get_rate_limiter

logger = logging.getLogger(__name__)

TOO_MANY_REQUESTS = "Too many requests. Please try again later."


class RateLimitExceeded(Exception):
    def __init__(self, category: str, result: RateLimitResult) -> None:
        super().__init__(category)
        self.category = category
        self.result = result


def rate_limit(category: str):
    """
    Dependency factory: count the request against RATE_LIMITS[category] for
    the calling client and raise RateLimitExceeded when over quota.
    """
    policy = RATE_LIMITS[category]

    async def _check(
        request: Request,
        limiter: RateLimiterPort = Depends(get_rate_limiter),
    ) -> RateLimitResult:
        client = client_identifier(request.headers.get("x-forwarded-for"))
        result = limiter.check(
            rate_limit_key(category, client), policy.max_requests, policy.window_ms
        )
        if not result.allowed:
            logger.warning(
                "rate limit exceeded",
                extra={"category": category, "client": client, "reset_in_ms": result.reset_in_ms},
            )
            raise RateLimitExceeded(category, result)
        return result

    return _check


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    retry_after = exc.result.retry_after_seconds
    return JSONResponse(
        status_code=429,
        content={"detail": TOO_MANY_REQUESTS, "retry_after": retry_after},
        headers={"Retry-After": str(retry_after)},
    )
