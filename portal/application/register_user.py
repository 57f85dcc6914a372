import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

import portal.domain.services as domain_services
from portal.application.emails import MailContext, verification_email
from portal.application.tokens import issue_persisted_token
from portal.domain.entities import TokenType
from portal.domain.errors import UserAlreadyExists
from portal.domain.ports.email_port import EmailPort
from portal.domain.ports.unit_of_work import UnitOfWorkPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistrationResult:
    user_id: str
    email_sent: bool


async def register_user(
    uow: UnitOfWorkPort,
    email_port: EmailPort,
    mail: MailContext,
    email: str,
    password: str,
    hash_password: Callable[..., str],
    name: str | None = None,
    now: datetime | None = None,
) -> RegistrationResult:
    normalized_email = domain_services.normalize_email(email)
    now = now or datetime.now(timezone.utc)

    async with uow as transaction:
        if await transaction.db_users.get_by_email(normalized_email):
            raise UserAlreadyExists()
        # a concurrent registration can still race us here; the unique
        # constraint on users.email makes create() raise UserAlreadyExists
        user = await transaction.db_users.create(
            normalized_email, hash_password(password), name=name
        )
        issued = await issue_persisted_token(
            transaction, normalized_email, TokenType.EMAIL_VERIFICATION, now
        )
        await transaction.commit()

    subject, html = verification_email(mail, issued.token)
    result = await email_port.send(to=normalized_email, subject=subject, html=html)
    if not result.success:
        # account stays; the user can ask for a resend
        logger.error(
            "verification email failed",
            extra={"user_id": user.id, "error": result.error},
        )
    return RegistrationResult(user_id=user.id, email_sent=result.success)
