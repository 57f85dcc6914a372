import pytest
from pydantic import ValidationError

from portal.schemas.requests import RegisterIn, ResetPasswordIn


def test_register_accepts_password_up_to_72_bytes():
    body = RegisterIn(email="a@example.com", password="p" * 72)
    assert len(body.password) == 72


def test_register_refuses_password_bcrypt_would_truncate():
    with pytest.raises(ValidationError):
        RegisterIn(email="a@example.com", password="p" * 73)


def test_limit_counts_bytes_not_characters():
    # 36 two-byte characters fit, 37 do not
    RegisterIn(email="a@example.com", password="é" * 36)
    with pytest.raises(ValidationError):
        RegisterIn(email="a@example.com", password="é" * 37)


def test_reset_password_applies_same_limits():
    with pytest.raises(ValidationError):
        ResetPasswordIn(token="a" * 64, password="p" * 73)
    with pytest.raises(ValidationError):
        ResetPasswordIn(token="a" * 64, password="short")
    assert ResetPasswordIn(token="a" * 64, password="long-enough").password == "long-enough"
