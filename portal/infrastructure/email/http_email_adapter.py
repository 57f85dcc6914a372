from __future__ import annotations

import logging
from typing import Dict, Optional

import httpx

from portal.domain.ports.email_port import EmailPort, EmailResult

logger = logging.getLogger(__name__)


class HttpEmailAdapter(EmailPort):
    """
    Sends mail through an HTTP email API (POST {base_url}/emails with a
    bearer key). Failures are returned, not raised.
    """

    def __init__(
        self,
        base_url: str,
        *,
        sender: str,
        api_key: str = "",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 5.0,
        send_path: str = "/emails",
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._send_path = send_path if send_path.startswith("/") else f"/{send_path}"
        self._sender = sender
        self._api_key = api_key
        self._timeout = timeout
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(timeout=timeout)

    async def send(self, *, to: str, subject: str, html: str) -> EmailResult:
        headers: Dict[str, str] = {}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        url = f"{self._base_url}{self._send_path}"
        payload = {"from": self._sender, "to": to, "subject": subject, "html": html}

        try:
            resp = await self._client.post(
                url, json=payload, headers=headers, timeout=self._timeout
            )
        except httpx.HTTPError as e:
            logger.warning("email transport error", extra={"error": str(e)})
            return EmailResult(success=False, error=f"email HTTP error: {e}")

        if not (200 <= resp.status_code < 300):
            error = f"email API responded {resp.status_code}: {resp.text[:200]}"
            logger.warning("email rejected", extra={"status": resp.status_code})
            return EmailResult(success=False, error=error)

        try:
            body = resp.json()
        except ValueError:
            body = {}
        message_id = body.get("id") if isinstance(body, dict) else None
        return EmailResult(success=True, message_id=message_id)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
