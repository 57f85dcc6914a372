from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class EmailResult:
    success: bool
    error: str | None = None
    message_id: str | None = None


class EmailPort(Protocol):
    async def send(self, *, to: str, subject: str, html: str) -> EmailResult:
        """
        Send an HTML email.
        Provider and transport failures come back as EmailResult(success=False);
        this never raises for them.
        """
