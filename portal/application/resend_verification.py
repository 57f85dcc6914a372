from datetime import datetime, timezone

import portal.domain.services as domain_services
from portal.application.emails import MailContext, OutgoingMail, verification_email
from portal.application.tokens import issue_persisted_token
from portal.domain.entities import TokenType
from portal.domain.ports.unit_of_work import UnitOfWorkPort


async def resend_verification(
    uow: UnitOfWorkPort,
    mail: MailContext,
    email: str,
    now: datetime | None = None,
) -> OutgoingMail | None:
    """
    Re-issue the verification link and return the message to send. Unknown or
    already verified accounts give None, so the caller can answer the same
    way in every case.
    """
    normalized_email = domain_services.normalize_email(email)
    now = now or datetime.now(timezone.utc)

    async with uow as transaction:
        user = await transaction.db_users.get_by_email(normalized_email)
        if user is None or user.is_verified:
            return None
        issued = await issue_persisted_token(
            transaction, normalized_email, TokenType.EMAIL_VERIFICATION, now
        )
        await transaction.commit()

    subject, html = verification_email(mail, issued.token)
    return OutgoingMail(to=normalized_email, subject=subject, html=html)
