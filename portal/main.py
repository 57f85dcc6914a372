import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from portal.infrastructure.db.pool import close_pool, get_pool
from portal.infrastructure.email.http_email_adapter import HttpEmailAdapter
from portal.infrastructure.http.client import (
    close_http_client,
    get_http_client,
    open_http_client,
)
from portal.infrastructure.rate_limit.memory_limiter import InMemoryRateLimiter
from portal.infrastructure.redis_cache.pool import close_redis, get_redis
from portal.logging import setup_logging
from portal.presentation.api import api
from portal.presentation.rate_limit import RateLimitExceeded, rate_limit_exceeded_handler
from portal.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def build_rate_limiter(settings: Settings) -> InMemoryRateLimiter:
    return InMemoryRateLimiter(
        max_entries=settings.rate_limit_max_entries,
        max_window_ms=settings.rate_limit_max_window_ms,
        cleanup_interval=settings.rate_limit_cleanup_interval_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings

    # startup
    pool = get_pool()
    if getattr(pool, "closed", True):
        await pool.open()

    await open_http_client()

    get_redis()

    # Create ONE shared Email adapter, using the shared HTTP client
    email_adapter = HttpEmailAdapter(
        base_url=settings.email_api_url,
        sender=f"{settings.app_name} <{settings.email_from}>",
        api_key=settings.email_api_key,
        timeout=settings.email_timeout_seconds,
        client=get_http_client(),
    )
    app.state.email_adapter = email_adapter  # expose to dependencies

    await app.state.rate_limiter.start()

    if not settings.cron_secret:
        logger.warning("CRON_SECRET is not set; /v1/cron/cleanup is unauthenticated")

    try:
        yield
    finally:
        # shutdown
        await app.state.rate_limiter.stop()
        await email_adapter.aclose()  # it won't close the shared client
        await close_http_client()  # closes the shared client
        await close_redis()
        await close_pool()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(
        settings.log_level, static_fields={"app": settings.app_name, "env": settings.app_env}
    )
    app = FastAPI(title="Portal Accounts API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    # constructed here so it exists even when the lifespan is not run (tests)
    app.state.rate_limiter = build_rate_limiter(settings)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.include_router(api)
    return app


app = create_app()
