import asyncio
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

from portal.domain.ports.rate_limiter import RateLimiterPort
from portal.domain.ports.session_store import SessionStorePort
from portal.domain.ports.unit_of_work import UnitOfWorkPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CleanupPart:
    success: bool
    count: int


@dataclass(frozen=True)
class CleanupReport:
    tokens: CleanupPart
    sessions: CleanupPart
    rate_limit_entries: CleanupPart | None = None

    def as_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


async def _cleanup_tokens(uow: UnitOfWorkPort, now: datetime) -> CleanupPart:
    try:
        async with uow as transaction:
            count = await transaction.tokens.delete_expired(now)
            await transaction.commit()
    except Exception:  # noqa: BLE001
        logger.exception("token cleanup failed")
        return CleanupPart(success=False, count=0)
    return CleanupPart(success=True, count=count)


async def _cleanup_sessions(sessions: SessionStorePort) -> CleanupPart:
    try:
        count = await sessions.purge_expired()
    except Exception:  # noqa: BLE001
        logger.exception("session cleanup failed")
        return CleanupPart(success=False, count=0)
    return CleanupPart(success=True, count=count)


async def run_cleanup(
    uow: UnitOfWorkPort,
    sessions: SessionStorePort,
    rate_limiter: RateLimiterPort | None = None,
    now: datetime | None = None,
) -> CleanupReport:
    """
    Delete expired tokens and session bookkeeping (and sweep the rate limiter
    when one is given). A failing part is reported, the others still run.
    """
    now = now or datetime.now(timezone.utc)
    logger.info("cleanup started")

    tokens, sessions_part = await asyncio.gather(
        _cleanup_tokens(uow, now), _cleanup_sessions(sessions)
    )
    rate_limit_part = None
    if rate_limiter is not None:
        rate_limit_part = CleanupPart(success=True, count=rate_limiter.sweep())

    report = CleanupReport(
        tokens=tokens, sessions=sessions_part, rate_limit_entries=rate_limit_part
    )
    logger.info("cleanup finished", extra=report.as_dict())
    return report
