"""
Welcome notifiers — best-effort side effects after a successful registration.

  • ``LogNotifier`` just logs the welcome (default, no external service).
  • ``GmailNotifier`` sends the welcome mail through the Gmail API.  All
    sync ``googleapiclient`` calls are offloaded to a thread via
    ``asyncio.to_thread()`` so they never block the event loop.

Callers go through ``send_welcome()``, which never raises: a failed welcome
must not fail the registration that triggered it.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Optional

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from config.settings import Settings

logger = logging.getLogger(__name__)

WELCOME_SUBJECT = "Welcome to Our Service"
WELCOME_HTML = "<h1>Welcome to Our Service!</h1><p>Thank you for registering with us.</p>"

GMAIL_SEND_SCOPE = "https://www.googleapis.com/auth/gmail.send"


class Notifier(ABC):
    @abstractmethod
    async def notify(self, email: str) -> None:
        """Deliver a welcome message to ``email``."""
        ...


class LogNotifier(Notifier):
    async def notify(self, email: str) -> None:
        logger.info("Welcome notification queued for %s", email)


class GmailNotifier(Notifier):
    """Sends the welcome mail as the account owning ``token_file``."""

    def __init__(self, token_file: str, sender_email: str = "") -> None:
        self._token_file = token_file
        self._sender_email = sender_email
        self._service: Optional[Any] = None

    async def _get_service(self) -> Any:
        if self._service is None:
            creds = Credentials.from_authorized_user_file(
                self._token_file, scopes=[GMAIL_SEND_SCOPE]
            )
            # googleapiclient discovery does I/O
            self._service = await asyncio.to_thread(
                build, "gmail", "v1", credentials=creds
            )
        return self._service

    @staticmethod
    def _build_raw(to: str, sender: str) -> str:
        mime = MIMEMultipart()
        mime["to"] = to
        if sender:
            mime["from"] = sender
        mime["subject"] = WELCOME_SUBJECT
        mime.attach(MIMEText(WELCOME_HTML, "html"))
        return base64.urlsafe_b64encode(mime.as_bytes()).decode()

    async def notify(self, email: str) -> None:
        service = await self._get_service()
        raw = self._build_raw(email, self._sender_email)
        sent = await asyncio.to_thread(
            service.users()
            .messages()
            .send(userId="me", body={"raw": raw})
            .execute
        )
        logger.info("Welcome mail sent to %s (id=%s)", email, sent.get("id"))


def build_notifier(settings: Settings) -> Notifier:
    if settings.notifier == "gmail":
        if not settings.gmail_token_file:
            raise RuntimeError("NOTIFIER=gmail requires GMAIL_TOKEN_FILE")
        return GmailNotifier(settings.gmail_token_file, settings.gmail_sender_email)
    if settings.notifier != "log":
        raise RuntimeError(f"Unknown notifier '{settings.notifier}' (expected 'log' or 'gmail')")
    return LogNotifier()


async def send_welcome(notifier: Notifier, email: str) -> None:
    """Fire the welcome notification; log and drop any failure."""
    try:
        await notifier.notify(email)
    except Exception as exc:
        logger.warning("Welcome notification to %s failed: %s", email, exc)
