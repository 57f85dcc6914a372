from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from portal.domain.entities import TokenType, VerificationToken


class TokenRepositoryPort(Protocol):
    async def create(self, token: VerificationToken) -> VerificationToken:
        """Insert a token record and return it with its id set."""

    async def find_by_token(self, token: str) -> Optional[VerificationToken]:
        """
        Exact lookup by token value, regardless of type or expiry.
        Validity is decided by the caller.
        """

    async def delete(self, token_id: str) -> None:
        """Delete one record by id (no-op if already gone)."""

    async def delete_for_identifier(self, identifier: str, token_type: TokenType) -> int:
        """Delete every token of `token_type` issued for `identifier`."""

    async def delete_expired(self, now: datetime) -> int:
        """Delete every token with expires < now, whatever its type."""
