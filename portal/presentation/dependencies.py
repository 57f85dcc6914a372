from typing import Callable

from fastapi import Request

from portal.application.emails import MailContext
from portal.domain.ports.email_port import EmailPort
from portal.domain.ports.rate_limiter import RateLimiterPort
from portal.domain.ports.session_store import SessionStorePort
from portal.domain.ports.unit_of_work import UnitOfWorkPort
from portal.infrastructure.db.pool import get_pool
from portal.infrastructure.db.uow import PgUnitOfWork
from portal.infrastructure.redis_cache.pool import get_redis
from portal.infrastructure.redis_cache.sessions import RedisSessions
from portal.infrastructure.security.password import hash_password, verify_password
from portal.settings import get_settings


def get_uow() -> UnitOfWorkPort:
    return PgUnitOfWork(get_pool())


def get_hash_password() -> Callable[..., str]:
    return hash_password


def get_verify_password() -> Callable[[str, str | None], bool]:
    return verify_password


def get_mail_context() -> MailContext:
    settings = get_settings()
    return MailContext(app_name=settings.app_name, app_url=settings.app_url)


def get_cron_secret() -> str | None:
    return get_settings().cron_secret or None


def get_email_port(request: Request) -> EmailPort:
    # This is set in portal.main lifespan()
    return request.app.state.email_adapter


def get_rate_limiter(request: Request) -> RateLimiterPort:
    # One limiter per process, created in portal.main lifespan()
    return request.app.state.rate_limiter


def get_sessions() -> SessionStorePort:
    return RedisSessions(get_redis(), ttl_seconds=get_settings().session_ttl_seconds)
