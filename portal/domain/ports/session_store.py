from __future__ import annotations

from typing import Optional, Protocol


class SessionStorePort(Protocol):
    async def create(self, user_id: str) -> str:
        """Open a session and return its opaque bearer token."""

    async def get(self, token: str) -> Optional[str]:
        """User id for a live session, else None."""

    async def revoke(self, token: str) -> None:
        """End a session."""

    async def purge_expired(self) -> int:
        """Drop bookkeeping for sessions past their TTL; return how many."""
