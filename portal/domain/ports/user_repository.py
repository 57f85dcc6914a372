from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from portal.domain.entities import User


class UserRepositoryPort(Protocol):
    async def create(self, email: str, password_hash: str, name: str | None = None) -> User:
        """
        Insert a new, unverified account.
        Raise UserAlreadyExists if the email is taken.
        """

    async def get_by_email(self, email: str) -> Optional[User]:
        """Return None if not found."""

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Return None if not found."""

    async def get_by_email_with_hash(self, email: str) -> tuple[User, str | None] | None:
        """User plus stored password hash (None for accounts without a password)."""

    async def set_email_verified(self, user_id: str, when: datetime) -> None:
        """Set email_verified unless it is already set."""

    async def set_password(self, user_id: str, password_hash: str) -> None:
        """Replace the stored password hash."""
