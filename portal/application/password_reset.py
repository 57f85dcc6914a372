import logging
from datetime import datetime, timezone
from typing import Callable

import portal.domain.services as domain_services
from portal.application.emails import MailContext, OutgoingMail, password_reset_email
from portal.application.tokens import (
    consume_token,
    issue_persisted_token,
    validate_token,
)
from portal.domain.entities import TokenType
from portal.domain.errors import UserNotFound
from portal.domain.ports.unit_of_work import UnitOfWorkPort

logger = logging.getLogger(__name__)


async def request_password_reset(
    uow: UnitOfWorkPort,
    mail: MailContext,
    email: str,
    now: datetime | None = None,
) -> OutgoingMail | None:
    """
    Issue a reset token if the account exists and return the message to send.
    Unknown emails return None without side effects. Sending is left to the
    caller so both cases answer in the same time.
    """
    normalized_email = domain_services.normalize_email(email)
    now = now or datetime.now(timezone.utc)

    async with uow as transaction:
        user = await transaction.db_users.get_by_email(normalized_email)
        if user is None:
            return None
        issued = await issue_persisted_token(
            transaction, normalized_email, TokenType.PASSWORD_RESET, now
        )
        await transaction.commit()

    logger.info("password reset requested", extra={"user_id": user.id})
    subject, html = password_reset_email(mail, issued.token)
    return OutgoingMail(to=normalized_email, subject=subject, html=html)


async def reset_password(
    uow: UnitOfWorkPort,
    token: str,
    password: str,
    hash_password: Callable[..., str],
    now: datetime | None = None,
) -> None:
    now = now or datetime.now(timezone.utc)

    async with uow as transaction:
        record = await validate_token(transaction, token, TokenType.PASSWORD_RESET, now)
        user = await transaction.db_users.get_by_email(record.identifier)
        if user is None:
            raise UserNotFound()

        await transaction.db_users.set_password(user.id, hash_password(password))
        # following the emailed link proves ownership of the mailbox
        if not user.is_verified:
            await transaction.db_users.set_email_verified(user.id, now)
        await consume_token(transaction, record)
        await transaction.commit()

    logger.info("password reset", extra={"user_id": user.id})
