from __future__ import annotations

import asyncio
import logging
import signal
from contextlib import suppress

from portal.application.run_cleanup import run_cleanup
from portal.infrastructure.db.pool import close_pool, get_pool
from portal.infrastructure.db.uow import PgUnitOfWork
from portal.infrastructure.redis_cache.pool import close_redis, get_redis
from portal.infrastructure.redis_cache.sessions import RedisSessions
from portal.logging import setup_logging
from portal.settings import get_settings

logger = logging.getLogger(__name__)


async def run_periodically(uow_factory, sessions, interval: float) -> None:
    """Run a cleanup pass, then sleep `interval` seconds, forever."""
    while True:
        await run_cleanup(uow=uow_factory(), sessions=sessions)
        await asyncio.sleep(interval)


async def _run() -> None:
    settings = get_settings()
    setup_logging(
        settings.log_level,
        static_fields={"app": settings.app_name, "env": settings.app_env, "worker": "cleanup"},
    )

    pool = get_pool()
    await pool.open()
    logger.info("cleanup worker: pool opened")

    sessions = RedisSessions(get_redis(), ttl_seconds=settings.session_ttl_seconds)

    stop = asyncio.Event()

    def _on_signal(*_: object) -> None:
        logger.info("cleanup worker: stop signal received")
        stop.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with suppress(NotImplementedError):
            loop.add_signal_handler(sig, _on_signal)

    task = asyncio.create_task(
        run_periodically(
            lambda: PgUnitOfWork(pool), sessions, settings.cleanup_interval_seconds
        )
    )
    logger.info(
        "cleanup worker: started",
        extra={"interval_s": settings.cleanup_interval_seconds},
    )

    await stop.wait()

    task.cancel()
    with suppress(asyncio.CancelledError):
        await task

    await close_redis()
    await close_pool()
    logger.info("cleanup worker: stopped cleanly")


def main() -> None:
    asyncio.run(_run())


if __name__ == "__main__":
    main()
