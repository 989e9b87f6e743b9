"""
Email delivery transports.

BrevoEmailTransport talks to the Brevo transactional email API. The
logging transport stands in when no API key is configured, so a
missing key never breaks booking flows.
"""

import logging
from typing import Any, Optional, Protocol

import httpx

from src.schemas.notification_schema import EmailMessage

logger = logging.getLogger(__name__)


class EmailTransport(Protocol):
    async def send(self, message: EmailMessage) -> None: ...


def to_brevo_payload(message: EmailMessage) -> dict[str, Any]:
    """Map an EmailMessage onto Brevo's ``smtp/email`` request body."""
    payload: dict[str, Any] = {
        "sender": message.sender.model_dump(exclude_none=True),
        "to": [contact.model_dump(exclude_none=True) for contact in message.to],
        "subject": message.subject,
        "htmlContent": message.html_content,
    }
    if message.text_content:
        payload["textContent"] = message.text_content
    if message.tags:
        payload["tags"] = message.tags
    return payload


class BrevoEmailTransport:
    """Sends transactional email through Brevo over a long-lived httpx client."""

    def __init__(
        self,
        api_key: str,
        api_url: str,
        timeout: float,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not api_key:
            raise ValueError("BREVO_API_KEY is required for BrevoEmailTransport")
        self._api_key = api_key
        self._api_url = api_url
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def send(self, message: EmailMessage) -> None:
        if self._client is None:
            await self.start()
        response = await self._client.post(
            self._api_url,
            json=to_brevo_payload(message),
            headers={"api-key": self._api_key, "accept": "application/json"},
        )
        response.raise_for_status()
        message_id = response.json().get("messageId") if response.content else None
        logger.info("Email sent via Brevo: %r (messageId=%s)", message.subject, message_id)


class LoggingEmailTransport:
    """Logs emails instead of sending them."""

    async def send(self, message: EmailMessage) -> None:
        logger.warning(
            "BREVO_API_KEY not set; email not sent: %r to %s",
            message.subject, ", ".join(c.email for c in message.to),
        )


class RecordingEmailTransport:
    """Keeps every message in memory. Used by the demo and tests."""

    def __init__(self) -> None:
        self.sent: list[EmailMessage] = []

    async def send(self, message: EmailMessage) -> None:
        self.sent.append(message)
