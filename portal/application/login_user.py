from typing import Callable

import portal.domain.services as domain_services
from portal.domain.entities import User
from portal.domain.errors import EmailNotVerified, InvalidCredentials
from portal.domain.ports.session_store import SessionStorePort
from portal.domain.ports.unit_of_work import UnitOfWorkPort


async def login_user(
    uow: UnitOfWorkPort,
    sessions: SessionStorePort,
    email: str,
    password: str,
    verify_password: Callable[[str, str | None], bool],
) -> str:
    """
    Check credentials and open a session; return its bearer token.

    `verify_password` is called exactly once on every path, with None when
    there is no stored hash, so unknown accounts cost as much as known ones.
    """
    normalized_email = domain_services.normalize_email(email)

    async with uow as transaction:
        record = await transaction.db_users.get_by_email_with_hash(normalized_email)

    user, password_hash = record if record else (None, None)
    password_ok = verify_password(password, password_hash)
    if user is None or not user.is_active or not password_ok:
        raise InvalidCredentials()
    # only reveal verification state to someone holding the password
    if not user.is_verified:
        raise EmailNotVerified()

    return await sessions.create(user.id)


async def logout_user(sessions: SessionStorePort, token: str) -> None:
    """Revoke a bearer session. Unknown tokens are ignored."""
    await sessions.revoke(token)


async def current_user(
    uow: UnitOfWorkPort,
    sessions: SessionStorePort,
    token: str,
) -> User | None:
    user_id = await sessions.get(token)
    if not user_id:
        return None
    async with uow as transaction:
        user = await transaction.db_users.get_by_id(user_id)
    if user is None or not user.is_active:
        return None
    return user
