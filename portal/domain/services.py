# portal/domain/services.py
from __future__ import annotations

import hmac
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from portal.domain.entities import TokenType, VerificationToken

TOKEN_BYTES = 32

TOKEN_LIFETIMES: dict[TokenType, timedelta] = {
    TokenType.EMAIL_VERIFICATION: timedelta(hours=24),
    TokenType.PASSWORD_RESET: timedelta(hours=1),
}


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


def normalize_email(email: str) -> str:
    return email.strip().lower()


def generate_token() -> str:
    """64 hex chars backed by 256 bits from the OS CSPRNG."""
    return secrets.token_hex(TOKEN_BYTES)


def token_lifetime(token_type: TokenType) -> timedelta:
    return TOKEN_LIFETIMES[TokenType(token_type)]


def issue_token(token_type: TokenType, now: datetime) -> IssuedToken:
    """
    Mint a fresh token and its absolute expiry.
    Persisting it (and dropping older ones) is up to the caller.
    """
    return IssuedToken(token=generate_token(), expires_at=now + token_lifetime(token_type))


def secure_compare(a: str, b: str) -> bool:
    """
    Constant-time comparison for secrets.
    Accepts strings; falls back to bytes if needed.
    """
    try:
        # hmac.compare_digest supports str if types match
        return hmac.compare_digest(a, b)
    except TypeError:
        return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def token_rejection_reason(
    record: VerificationToken | None,
    token: str,
    token_type: TokenType,
    now: datetime,
) -> str | None:
    """
    Return None when `record` is a live token of `token_type` matching `token`,
    otherwise a short reason for logs: not_found, type_mismatch or expired.
    """
    if record is None or not secure_compare(record.token, token):
        return "not_found"
    if record.type != token_type:
        return "type_mismatch"
    if record.is_expired(now):
        return "expired"
    return None
