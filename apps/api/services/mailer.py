"""Outbound mail transport.

``send_email`` never raises: callers branch on ``MailResult.status`` and fall
back to in-app notifications when mail is disabled.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Optional

from config import mail_is_configured, settings

logger = logging.getLogger(__name__)

MAIL_SENT = "sent"
MAIL_DISABLED = "disabled"
MAIL_ERROR = "error"


@dataclass
class MailResult:
    status: str
    message_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def sent(self) -> bool:
        return self.status == MAIL_SENT


def build_message(to: str, subject: str, text: str, html: Optional[str] = None) -> EmailMessage:
    message = EmailMessage()
    message["From"] = settings.SMTP_FROM
    message["To"] = to
    message["Subject"] = subject
    message["Message-ID"] = make_msgid()
    message.set_content(text)
    if html:
        message.add_alternative(html, subtype="html")
    return message


def _deliver(message: EmailMessage) -> None:
    smtp_cls = smtplib.SMTP_SSL if settings.SMTP_USE_SSL else smtplib.SMTP
    with smtp_cls(settings.SMTP_HOST, int(settings.SMTP_PORT), timeout=settings.SMTP_TIMEOUT_SECONDS) as client:
        if not settings.SMTP_USE_SSL:
            client.starttls()
        if settings.SMTP_USER:
            client.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        client.send_message(message)


async def send_email(to: str, subject: str, text: str, html: Optional[str] = None) -> MailResult:
    """Send one message and report whether it was sent, disabled or failed."""
    recipient = str(to or "").strip()
    if not mail_is_configured():
        logger.info("Mail transport disabled; skipping message subject=%r", subject)
        return MailResult(status=MAIL_DISABLED)
    if not recipient:
        return MailResult(status=MAIL_ERROR, error="Recipient address is empty")

    message = build_message(recipient, subject, text, html)
    try:
        await asyncio.to_thread(_deliver, message)
    except Exception as exc:
        logger.warning("Mail delivery to %s failed: %s", recipient, exc)
        return MailResult(status=MAIL_ERROR, error=str(exc))

    logger.info("Mail sent to %s subject=%r", recipient, subject)
    return MailResult(status=MAIL_SENT, message_id=message.get("Message-ID"))
