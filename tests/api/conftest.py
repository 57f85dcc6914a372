import pytest
from fastapi.testclient import TestClient

from portal.domain.entities import User
from portal.main import create_app
from portal.presentation.dependencies import (
    get_cron_secret,
    get_email_port,
    get_hash_password,
    get_sessions,
    get_uow,
    get_verify_password,
)
from tests.fakes import FakeEmailOK, FakeSessions, FakeUoW


@pytest.fixture()
def app_and_deps():
    app = create_app()
    uow = FakeUoW()
    email = FakeEmailOK()
    sessions = FakeSessions()

    app.dependency_overrides[get_uow] = lambda: uow
    app.dependency_overrides[get_email_port] = lambda: email
    app.dependency_overrides[get_sessions] = lambda: sessions
    app.dependency_overrides[get_cron_secret] = lambda: None
    app.dependency_overrides[get_hash_password] = lambda: (lambda plain: "hashed-" + plain)
    app.dependency_overrides[get_verify_password] = lambda: (
        lambda plain, hashed: hashed == "hashed-" + plain
    )

    try:
        yield app, uow, email
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app_and_deps):
    app, _, _ = app_and_deps
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def verified_user(app_and_deps, now) -> User:
    _, uow, _ = app_and_deps
    return uow.db_users.add(
        User(email="login@test.local", name="Login", email_verified=now), "hashed-s3cret-pass"
    )
