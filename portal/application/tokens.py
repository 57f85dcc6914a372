from __future__ import annotations

import logging
from datetime import datetime

import portal.domain.services as domain_services
from portal.domain.entities import TokenType, VerificationToken
from portal.domain.errors import InvalidOrExpiredToken
from portal.domain.ports.unit_of_work import UnitOfWorkPort

logger = logging.getLogger(__name__)


async def issue_persisted_token(
    transaction: UnitOfWorkPort,
    identifier: str,
    token_type: TokenType,
    now: datetime,
) -> domain_services.IssuedToken:
    """
    Replace any tokens of `token_type` held by `identifier` with a fresh one.
    Runs inside the caller's transaction so delete+insert commit together.
    """
    await transaction.tokens.delete_for_identifier(identifier, token_type)
    issued = domain_services.issue_token(token_type, now)
    await transaction.tokens.create(
        VerificationToken(
            identifier=identifier,
            token=issued.token,
            type=token_type,
            expires=issued.expires_at,
        )
    )
    return issued


async def validate_token(
    transaction: UnitOfWorkPort,
    token: str,
    token_type: TokenType,
    now: datetime,
) -> VerificationToken:
    record = await transaction.tokens.find_by_token(token)
    reason = domain_services.token_rejection_reason(record, token, token_type, now)
    if reason is not None:
        # expired rows stay put; the cleanup sweep reclaims them
        logger.info(
            "token rejected", extra={"reason": reason, "token_type": token_type.value}
        )
        raise InvalidOrExpiredToken(reason)
    return record


async def consume_token(transaction: UnitOfWorkPort, record: VerificationToken) -> None:
    await transaction.tokens.delete(record.id)
    if record.type == TokenType.PASSWORD_RESET:
        await transaction.tokens.delete_for_identifier(
            record.identifier, TokenType.PASSWORD_RESET
        )
