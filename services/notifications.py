"""Notification collaborator (Brevo transactional email).

Sending is fire-and-forget: routers schedule it with BackgroundTasks after the
workflow has committed, and a failed delivery is logged, never raised.
"""
import logging
from typing import Optional, Protocol

import httpx

from config import settings

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send(self, recipient: str, subject: str, body: str) -> None: ...


class BrevoNotifier:
    """Sends email through the Brevo v3 SMTP API."""

    API_URL = "https://api.brevo.com/v3/smtp/email"

    def __init__(self, api_key: str, sender_email: str, sender_name: str, timeout: float = 10.0):
        self.api_key = api_key
        self.sender = {"email": sender_email, "name": sender_name}
        self.timeout = timeout

    def send(self, recipient: str, subject: str, body: str) -> None:
        payload = {
            "sender": self.sender,
            "to": [{"email": recipient}],
            "subject": subject,
            "htmlContent": f"<html><body><p>{body}</p></body></html>",
        }
        response = httpx.post(
            self.API_URL,
            json=payload,
            headers={"api-key": self.api_key, "accept": "application/json"},
            timeout=self.timeout,
        )
        response.raise_for_status()


class LogNotifier:
    """Development fallback when no email provider is configured."""

    def send(self, recipient: str, subject: str, body: str) -> None:
        logger.info(f"[email to {recipient}] {subject}: {body}")


def deliver(notifier: Notifier, recipient: Optional[str], subject: str, body: str) -> None:
    """Best-effort send; errors are logged and swallowed."""
    if not recipient:
        logger.warning(f"Notification '{subject}' dropped: no recipient address")
        return
    try:
        notifier.send(recipient, subject, body)
    except Exception as e:
        logger.warning(f"Notification '{subject}' to {recipient} failed: {e}")


def otp_message(code: str) -> tuple[str, str]:
    return (
        "Your verification code",
        f"Your verification code is {code}. It expires in 15 minutes.",
    )


def curator_decision_message(approved: bool, points: int = 0, reason: Optional[str] = None) -> tuple[str, str]:
    if approved:
        return (
            "Your curator application was approved",
            f"You can now review products. {points} points have been added to your account.",
        )
    body = "Your curator application was not approved. Your account continues as a client account."
    if reason:
        body += f" Reason: {reason}"
    return "Your curator application was not approved", body


def _build_notifier() -> Notifier:
    if settings.BREVO_API_KEY:
        return BrevoNotifier(settings.BREVO_API_KEY, settings.BREVO_FROM_EMAIL, settings.BREVO_FROM_NAME)
    return LogNotifier()


_notifier = _build_notifier()


def get_notifier() -> Notifier:
    """FastAPI dependency; tests override it with a recording fake."""
    return _notifier
