import time

import pytest
from fastapi import BackgroundTasks

from portal.domain.entities import TokenType, User
from portal.presentation.routers.v1.auth import post_forgot_password, post_resend_verification
from portal.schemas.requests import EmailIn
from portal.schemas.responses import FORGOT_MESSAGE, RESEND_MESSAGE
from tests.api.helpers import from_ip
from tests.fakes import FakeEmailSlow


def _register(client, email="jeremy@example.com"):
    response = client.post(
        "/v1/auth/register", json={"email": email, "password": "s3cret-pass"}
    )
    assert response.status_code == 201, response.text


def test_verify_email_then_reuse(client, app_and_deps):
    _, uow, _ = app_and_deps
    _register(client)
    [record] = uow.tokens.for_identifier("jeremy@example.com", TokenType.EMAIL_VERIFICATION)

    first = client.get("/v1/auth/verify-email", params={"token": record.token})
    assert first.status_code == 200, first.text
    assert uow.db_users.users["jeremy@example.com"].is_verified

    again = client.get("/v1/auth/verify-email", params={"token": record.token})
    assert again.status_code == 400
    assert again.json()["detail"] == "Invalid or expired token"


def test_verify_email_rejects_malformed_token(client):
    response = client.get("/v1/auth/verify-email", params={"token": "not-hex"})
    assert response.status_code == 422


def test_resend_same_answer_for_known_and_unknown(client, app_and_deps):
    _, uow, email = app_and_deps
    uow.db_users.add(User(email="pending@example.com"), "hash")

    known = client.post(
        "/v1/auth/resend-verification",
        json={"email": "pending@example.com"},
        headers=from_ip("10.0.0.1"),
    )
    unknown = client.post(
        "/v1/auth/resend-verification",
        json={"email": "ghost@example.com"},
        headers=from_ip("10.0.0.2"),
    )

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json() == {"message": RESEND_MESSAGE}
    assert [c["to"] for c in email.calls] == ["pending@example.com"]


def test_forgot_password_same_answer_for_known_and_unknown(client, app_and_deps):
    _, uow, email = app_and_deps
    uow.db_users.add(User(email="user@example.com"), "hash")

    known = client.post("/v1/auth/forgot-password", json={"email": "user@example.com"})
    unknown = client.post("/v1/auth/forgot-password", json={"email": "ghost@example.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json() == {"message": FORGOT_MESSAGE}
    assert len(email.calls) == 1


def test_reset_password_flow(client, app_and_deps):
    _, uow, _ = app_and_deps
    uow.db_users.add(User(email="user@example.com"), "old-hash")
    client.post("/v1/auth/forgot-password", json={"email": "user@example.com"})
    [record] = uow.tokens.for_identifier("user@example.com", TokenType.PASSWORD_RESET)

    response = client.post(
        "/v1/auth/reset-password",
        json={"token": record.token, "password": "brand-new-pass"},
    )
    assert response.status_code == 200, response.text
    assert uow.db_users.password_hash_by_email["user@example.com"] == "hashed-brand-new-pass"

    replay = client.post(
        "/v1/auth/reset-password",
        json={"token": record.token, "password": "another-pass"},
    )
    assert replay.status_code == 400


def test_reset_password_unknown_token(client):
    response = client.post(
        "/v1/auth/reset-password",
        json={"token": "0" * 64, "password": "brand-new-pass"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid or expired token"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "handler",
    [post_forgot_password, post_resend_verification],
    ids=["forgot-password", "resend-verification"],
)
async def test_known_and_unknown_emails_answer_in_the_same_time(handler, uow, mail):
    uow.db_users.add(User(email="pending@example.com"), "hash")
    slow_email = FakeEmailSlow(delay=0.5)

    timings = {}
    queued = {}
    for address in ("pending@example.com", "ghost@example.com"):
        tasks = BackgroundTasks()
        started = time.perf_counter()
        response = await handler(
            body=EmailIn(email=address),
            background_tasks=tasks,
            uow=uow,
            email_port=slow_email,
            mail=mail,
        )
        timings[address] = time.perf_counter() - started
        queued[address] = tasks
        assert response.message

    # neither answer waits for the mail provider
    assert max(timings.values()) < 0.25
    assert slow_email.calls == []

    await queued["pending@example.com"]()
    await queued["ghost@example.com"]()
    assert [c["to"] for c in slow_email.calls] == ["pending@example.com"]
