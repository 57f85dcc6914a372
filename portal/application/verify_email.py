from datetime import datetime, timezone

from portal.application.tokens import consume_token, validate_token
from portal.domain.entities import TokenType, User
from portal.domain.errors import InvalidOrExpiredToken
from portal.domain.ports.unit_of_work import UnitOfWorkPort


async def verify_email(
    uow: UnitOfWorkPort,
    token: str,
    now: datetime | None = None,
) -> User:
    now = now or datetime.now(timezone.utc)

    async with uow as transaction:
        record = await validate_token(
            transaction, token, TokenType.EMAIL_VERIFICATION, now
        )
        user = await transaction.db_users.get_by_email(record.identifier)
        if user is None:
            raise InvalidOrExpiredToken("user_missing")
        if not user.is_verified:
            await transaction.db_users.set_email_verified(user.id, now)
            user.verify_email(now)
        await consume_token(transaction, record)
        await transaction.commit()
    return user
