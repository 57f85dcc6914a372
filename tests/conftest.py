from datetime import datetime, timezone

import pytest

from portal.application.emails import MailContext
from tests.fakes import FakeClock, FakeEmailFailing, FakeEmailOK, FakeSessions, FakeUoW

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def uow():
    return FakeUoW()


@pytest.fixture()
def email_ok():
    return FakeEmailOK()


@pytest.fixture()
def email_failing():
    return FakeEmailFailing()


@pytest.fixture()
def sessions():
    return FakeSessions()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def mail():
    return MailContext(app_name="Posterns", app_url="https://posterns.test")


@pytest.fixture()
def now():
    return NOW


@pytest.fixture()
def hash_password_stub():
    return lambda p: "hashed-" + p
