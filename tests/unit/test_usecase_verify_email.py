from datetime import timedelta

import pytest

from portal.application.tokens import issue_persisted_token
from portal.application.verify_email import verify_email
from portal.domain.entities import TokenType, User
from portal.domain.errors import InvalidOrExpiredToken


async def _issue(uow, identifier, token_type, now):
    return await issue_persisted_token(uow, identifier, token_type, now)


@pytest.mark.asyncio
async def test_verify_marks_account_and_consumes_token(uow, now):
    uow.db_users.add(User(email="jeremy@example.com"), "hash")
    issued = await _issue(uow, "jeremy@example.com", TokenType.EMAIL_VERIFICATION, now)

    user = await verify_email(uow=uow, token=issued.token, now=now + timedelta(hours=1))

    assert user.email_verified == now + timedelta(hours=1)
    assert uow.db_users.users["jeremy@example.com"].is_verified
    assert uow.tokens.records == []
    assert uow.committed is True


@pytest.mark.asyncio
async def test_token_is_single_use(uow, now):
    uow.db_users.add(User(email="jeremy@example.com"), "hash")
    issued = await _issue(uow, "jeremy@example.com", TokenType.EMAIL_VERIFICATION, now)

    await verify_email(uow=uow, token=issued.token, now=now)
    with pytest.raises(InvalidOrExpiredToken) as ei:
        await verify_email(uow=uow, token=issued.token, now=now)
    assert ei.value.reason == "not_found"


@pytest.mark.asyncio
async def test_expired_token_is_rejected_but_kept(uow, now):
    uow.db_users.add(User(email="jeremy@example.com"), "hash")
    issued = await _issue(uow, "jeremy@example.com", TokenType.EMAIL_VERIFICATION, now)

    with pytest.raises(InvalidOrExpiredToken) as ei:
        await verify_email(uow=uow, token=issued.token, now=issued.expires_at)

    assert ei.value.reason == "expired"
    assert len(uow.tokens.records) == 1
    assert uow.db_users.set_verified_calls == []
    assert uow.committed is False


@pytest.mark.asyncio
async def test_reset_token_cannot_verify_email(uow, now):
    uow.db_users.add(User(email="jeremy@example.com"), "hash")
    issued = await _issue(uow, "jeremy@example.com", TokenType.PASSWORD_RESET, now)

    with pytest.raises(InvalidOrExpiredToken) as ei:
        await verify_email(uow=uow, token=issued.token, now=now)
    assert ei.value.reason == "type_mismatch"


@pytest.mark.asyncio
async def test_already_verified_keeps_original_timestamp(uow, now):
    earlier = now - timedelta(days=3)
    uow.db_users.add(User(email="jeremy@example.com", email_verified=earlier), "hash")
    issued = await _issue(uow, "jeremy@example.com", TokenType.EMAIL_VERIFICATION, now)

    user = await verify_email(uow=uow, token=issued.token, now=now)

    assert user.email_verified == earlier
    assert uow.db_users.set_verified_calls == []
    assert uow.tokens.records == []


@pytest.mark.asyncio
async def test_token_for_missing_account(uow, now):
    issued = await _issue(uow, "gone@example.com", TokenType.EMAIL_VERIFICATION, now)

    with pytest.raises(InvalidOrExpiredToken) as ei:
        await verify_email(uow=uow, token=issued.token, now=now)
    assert ei.value.reason == "user_missing"
