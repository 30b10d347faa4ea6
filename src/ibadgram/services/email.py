"""Outgoing email delivery."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from ..exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    async def send_email(self, address: str, subject: str, body: str) -> None:
        """Deliver one HTML email or raise :class:`EmailDeliveryError`."""


@dataclass(slots=True)
class HttpEmailSender:
    """Hand emails to a transactional mail API over HTTP."""

    api_url: str
    api_key: str
    sender: str
    timeout: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None

    async def send_email(self, address: str, subject: str, body: str) -> None:
        payload = {
            "from": self.sender,
            "to": [address],
            "subject": subject,
            "html": body,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "email delivery rejected",
                extra={"status_code": exc.response.status_code, "subject": subject},
            )
            raise EmailDeliveryError(
                f"mail API responded with {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise EmailDeliveryError(f"mail API unreachable: {exc}") from exc
        logger.info("email sent", extra={"subject": subject})


@dataclass(slots=True)
class LoggingEmailSender:
    """Development sender that only records what would have been sent."""

    outbox: list[tuple[str, str, str]] = field(default_factory=list)

    async def send_email(self, address: str, subject: str, body: str) -> None:
        self.outbox.append((address, subject, body))
        logger.info("email captured", extra={"subject": subject})


def confirmation_email(code: str) -> tuple[str, str]:
    """Return subject and HTML body for an email confirmation code."""

    subject = "Code for confirm email"
    body = f"<h2>Welcome to Ibadgram!</h2>\n<p>Code: <span>{code}</span></p>"
    return subject, body


__all__ = ["EmailSender", "HttpEmailSender", "LoggingEmailSender", "confirmation_email"]
