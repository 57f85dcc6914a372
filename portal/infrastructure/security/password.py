from __future__ import annotations

import secrets
from functools import lru_cache

from passlib.context import CryptContext

from portal.settings import get_settings

_pwd = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(plain: str, *, rounds: int | None = None) -> str:
    """
    Hash a password using bcrypt. If rounds is None, use settings.bcrypt_rounds.
    """
    if rounds is None:
        rounds = int(get_settings().bcrypt_rounds)
    return _pwd.hash(plain, rounds=rounds)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # same cost as real hashes; nobody knows the plaintext
    return hash_password(secrets.token_urlsafe(32))


def verify_password(plain: str, password_hash: str | None) -> bool:
    """
    Verify a password against its bcrypt hash. Without a hash (unknown or
    passwordless account) a dummy hash is checked anyway and the result is
    False, so every failure costs one bcrypt round. A stored value that is
    not a recognised hash never matches.
    """
    if not password_hash:
        _pwd.verify(plain, _dummy_hash())
        return False
    try:
        return _pwd.verify(plain, password_hash)
    except ValueError:
        return False
