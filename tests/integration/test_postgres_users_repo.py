from datetime import datetime, timezone

import pytest

from portal.domain.errors import UserAlreadyExists
from portal.infrastructure.db.users_repo import PgUserRepository


@pytest.mark.asyncio
async def test_users_repo_create_and_lookup(conn):
    """
    Integration test against the real Postgres:
    - insert a user (repo normalizes the email)
    - look it up by email and id, with and without the hash
    - duplicate emails are refused
    """
    repo = PgUserRepository(conn)

    user = await repo.create(" Jeremy@Example.COM ", "hash-1", name="Jeremy")
    assert user.id is not None
    assert user.email == "jeremy@example.com"
    assert user.name == "Jeremy"
    assert user.email_verified is None
    assert user.is_active is True

    by_email = await repo.get_by_email("JEREMY@example.com")
    assert by_email is not None and by_email.id == user.id

    by_id = await repo.get_by_id(user.id)
    assert by_id is not None and by_id.email == "jeremy@example.com"

    got = await repo.get_by_email_with_hash("jeremy@example.com")
    assert got is not None
    found, pwd_hash = got
    assert found.id == user.id
    assert pwd_hash == "hash-1"

    with pytest.raises(UserAlreadyExists):
        await repo.create("jeremy@example.com", "hash-2")


@pytest.mark.asyncio
async def test_users_repo_verification_and_password(conn):
    repo = PgUserRepository(conn)
    user = await repo.create("verify-me@example.com", "hash-1")

    first = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
    await repo.set_email_verified(user.id, first)
    # already verified: the original timestamp is kept
    await repo.set_email_verified(user.id, datetime(2025, 4, 1, tzinfo=timezone.utc))

    reloaded = await repo.get_by_id(user.id)
    assert reloaded.email_verified == first

    await repo.set_password(user.id, "hash-2")
    _, pwd_hash = await repo.get_by_email_with_hash("verify-me@example.com")
    assert pwd_hash == "hash-2"
