from datetime import timedelta

import pytest

from portal.domain.entities import User


def test_email_normalized_and_defaults():
    u = User(id=None, email=" Alice@Example.COM ")
    assert u.email == "alice@example.com"
    assert u.email_verified is None
    assert u.is_verified is False
    assert u.is_active is True


def test_email_required():
    with pytest.raises(ValueError):
        User(id=None, email=None)
    with pytest.raises(ValueError):
        User(id=None, email="   ")


def test_verify_email_keeps_first_timestamp(now):
    u = User(id="u1", email="a@x.com")
    u.verify_email(now)
    u.verify_email(now + timedelta(days=1))
    assert u.email_verified == now
    assert u.is_verified is True
