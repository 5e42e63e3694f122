"""
Email notifier — league_site/channels/email_sender.py
Sends each accepted join request to league staff through a transactional
email provider (Azure Communication Services, SendGrid REST API or the
Gmail API).
"""
from __future__ import annotations

import asyncio
import base64
import logging
from dataclasses import dataclass
from email.mime.text import MIMEText
from typing import Literal, Protocol

import httplib2
import httpx
from azure.communication.email import EmailClient
from azure.core.exceptions import AzureError
from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from league_site.channels.google_http import HttpFactory, execute_isolated, timed_http_factory
from league_site.errors import EmailDeliveryError
from league_site.pipeline.formatters import compose_body, compose_subject
from league_site.pipeline.normalizer import NormalizedSubmission

logger = logging.getLogger(__name__)

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"
GMAIL_SCOPES = ["https://www.googleapis.com/auth/gmail.send"]
_EXCERPT_CHARS = 500


class EmailSender(Protocol):
    name: str

    async def send(self, *, to: str, sender: str, subject: str, body: str,
                   reply_to: str | None = None) -> None: ...


@dataclass(frozen=True)
class NotificationResult:
    status: Literal["sent", "failed"]
    detail: str = ""

    @property
    def sent(self) -> bool:
        return self.status == "sent"


class SendGridEmailSender:
    name = "sendgrid"

    def __init__(self, api_key: str, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.api_key = api_key
        self._transport = transport

    async def send(self, *, to: str, sender: str, subject: str, body: str,
                   reply_to: str | None = None) -> None:
        payload: dict = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": sender},
            "subject": subject,
            "content": [{"type": "text/plain", "value": body}],
        }
        if reply_to:
            payload["reply_to"] = {"email": reply_to}

        # Timeout is enforced by the Notifier around the whole call
        async with httpx.AsyncClient(timeout=None, transport=self._transport) as client:
            try:
                resp = await client.post(
                    SENDGRID_URL,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
            except httpx.HTTPError as exc:
                raise EmailDeliveryError(f"SendGrid request failed: {type(exc).__name__}: {exc}") from exc

        if not resp.is_success:
            raise EmailDeliveryError(
                f"SendGrid returned {resp.status_code}: {resp.text[:_EXCERPT_CHARS]}"
            )


class GmailEmailSender:
    name = "gmail"

    def __init__(self, credentials_path: str | None = None, *, timeout: float = 15.0,
                 service=None, credentials=None, http_factory: HttpFactory | None = None) -> None:
        self._http_factory = http_factory or timed_http_factory(timeout)
        if service is not None:
            self.service = service
            self.credentials = credentials
            return
        self.credentials = Credentials.from_authorized_user_file(credentials_path, GMAIL_SCOPES)
        self.service = build("gmail", "v1", credentials=self.credentials, cache_discovery=False)

    async def send(self, *, to: str, sender: str, subject: str, body: str,
                   reply_to: str | None = None) -> None:
        message = MIMEText(body, "plain", "utf-8")
        message["to"] = to
        message["from"] = sender
        message["subject"] = subject
        if reply_to:
            message["reply-to"] = reply_to

        raw = base64.urlsafe_b64encode(message.as_bytes()).decode("utf-8")
        request = self.service.users().messages().send(userId="me", body={"raw": raw})
        try:
            await asyncio.to_thread(execute_isolated, request, self.credentials, self._http_factory)
        except HttpError as exc:
            raise EmailDeliveryError(
                f"Gmail API returned {exc.resp.status}: {str(exc)[:_EXCERPT_CHARS]}"
            ) from exc
        except (GoogleAuthError, httplib2.HttpLib2Error, OSError) as exc:
            raise EmailDeliveryError(f"Gmail API request failed: {type(exc).__name__}: {exc}") from exc


class AcsEmailSender:
    """Azure Communication Services email; sends are long-running operations."""

    name = "acs"

    def __init__(self, connection_string: str | None = None, *, timeout: float = 20.0,
                 client: EmailClient | None = None) -> None:
        self.client = client or EmailClient.from_connection_string(connection_string)
        self.timeout = timeout

    def _send_and_wait(self, message: dict) -> dict | None:
        poller = self.client.begin_send(message)
        return poller.result(timeout=self.timeout)

    async def send(self, *, to: str, sender: str, subject: str, body: str,
                   reply_to: str | None = None) -> None:
        message: dict = {
            "senderAddress": sender,
            "recipients": {"to": [{"address": to}]},
            "content": {"subject": subject, "plainText": body},
        }
        if reply_to:
            message["replyTo"] = [{"address": reply_to}]

        try:
            result = await asyncio.to_thread(self._send_and_wait, message)
        except AzureError as exc:
            raise EmailDeliveryError(f"ACS send failed: {type(exc).__name__}: {exc}") from exc

        status = (result or {}).get("status")
        if status != "Succeeded":
            error = (result or {}).get("error")
            raise EmailDeliveryError(
                f"ACS send finished with status {status!r}: {str(error)[:_EXCERPT_CHARS]}"
            )



class Notifier:
    """Composes the staff email for a submission and hands it to a sender."""

    def __init__(
        self,
        sender: EmailSender,
        *,
        to_address: str,
        from_address: str,
        league_name: str,
        timeout: float = 15.0,
    ) -> None:
        self.sender = sender
        self.to_address = to_address
        self.from_address = from_address
        self.league_name = league_name
        self.timeout = timeout

    async def notify(self, submission: NormalizedSubmission) -> NotificationResult:
        subject = compose_subject(submission, self.league_name)
        body = compose_body(submission)
        try:
            await asyncio.wait_for(
                self.sender.send(
                    to=self.to_address,
                    sender=self.from_address,
                    subject=subject,
                    body=body,
                    reply_to=submission.email or None,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            detail = f"{self.sender.name} send timed out after {self.timeout:g}s"
            logger.error("Email send failed: %s", detail)
            return NotificationResult("failed", detail)
        except EmailDeliveryError as exc:
            logger.error("Email send failed via %s: %s", self.sender.name, exc)
            return NotificationResult("failed", str(exc))

        logger.info("Join request emailed via %s | name=%s", self.sender.name, submission.name)
        return NotificationResult("sent")
