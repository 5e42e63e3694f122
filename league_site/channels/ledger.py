"""
Ledger appender — league_site/channels/ledger.py
Best-effort append of each emailed join request to the league spreadsheet,
either through the Google Sheets API or a generic webhook (e.g. an Apps
Script web app). Failures are logged and never reach the client.
"""
from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Literal, Protocol

import httplib2
import httpx
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from league_site.channels.google_http import HttpFactory, execute_isolated, timed_http_factory
from league_site.errors import LedgerTargetError
from league_site.pipeline.formatters import WebhookRow, sheet_row
from league_site.pipeline.normalizer import NormalizedSubmission

logger = logging.getLogger(__name__)

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
MAX_ATTEMPTS = 2
_EXCERPT_CHARS = 500


class LedgerTarget(Protocol):
    name: str

    async def append(self, submission: NormalizedSubmission) -> None: ...


@dataclass(frozen=True)
class LedgerAppendResult:
    status: Literal["appended", "failed"]
    attempts: int
    detail: str = ""

    @property
    def appended(self) -> bool:
        return self.status == "appended"


def backoff_delay() -> float:
    """Seconds to wait before a retry: 400ms plus up to 600ms of jitter."""
    return 0.4 + random.random() * 0.6


class SheetsApiTarget:
    name = "sheets_api"

    def __init__(
        self,
        *,
        spreadsheet_id: str,
        sheet_name: str,
        client_email: str = "",
        private_key: str = "",
        timeout: float = 8.0,
        service=None,
        credentials=None,
        http_factory: HttpFactory | None = None,
    ) -> None:
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        self._http_factory = http_factory or timed_http_factory(timeout)
        if service is not None:
            self.service = service
            self.credentials = credentials
            return
        self.credentials = service_account.Credentials.from_service_account_info(
            {
                "client_email": client_email,
                "private_key": private_key,
                "token_uri": GOOGLE_TOKEN_URI,
            },
            scopes=SHEETS_SCOPES,
        )
        self.service = build(
            "sheets", "v4", credentials=self.credentials, cache_discovery=False
        )

    async def append(self, submission: NormalizedSubmission) -> None:
        request = self.service.spreadsheets().values().append(
            spreadsheetId=self.spreadsheet_id,
            range=f"{self.sheet_name}!A1",
            valueInputOption="USER_ENTERED",
            body={"values": [sheet_row(submission)]},
        )
        try:
            await asyncio.to_thread(
                execute_isolated, request, self.credentials, self._http_factory
            )
        except HttpError as exc:
            raise LedgerTargetError(
                f"Sheets API returned {exc.resp.status}: {str(exc)[:_EXCERPT_CHARS]}"
            ) from exc
        except (GoogleAuthError, httplib2.HttpLib2Error, OSError) as exc:
            raise LedgerTargetError(f"Sheets API request failed: {type(exc).__name__}: {exc}") from exc


class WebhookTarget:
    name = "webhook"

    def __init__(self, url: str, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.url = url
        self._transport = transport

    async def append(self, submission: NormalizedSubmission) -> None:
        payload = WebhookRow.from_submission(submission).to_payload()
        # Apps Script web apps answer with a redirect to the result page
        async with httpx.AsyncClient(
            timeout=None, follow_redirects=True, transport=self._transport
        ) as client:
            try:
                resp = await client.post(self.url, json=payload)
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                raise LedgerTargetError(f"{type(exc).__name__}: {exc}") from exc

        if not resp.is_success:
            raise LedgerTargetError(f"HTTP {resp.status_code}: {resp.text[:_EXCERPT_CHARS]}")


class LedgerAppender:
    """
    Runs a ledger target with a bounded, jittered retry.

    At most ``max_attempts`` sequential attempts, each under its own timeout.
    The wait between attempts comes from ``delay`` (see backoff_delay).
    """

    def __init__(
        self,
        target: LedgerTarget,
        *,
        max_attempts: int = MAX_ATTEMPTS,
        timeout: float = 8.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        delay: Callable[[], float] = backoff_delay,
    ) -> None:
        self.target = target
        self.max_attempts = max_attempts
        self.timeout = timeout
        self._sleep = sleep
        self._delay = delay

    async def append(self, submission: NormalizedSubmission) -> LedgerAppendResult:
        detail = ""
        for attempt in range(1, self.max_attempts + 1):
            try:
                await asyncio.wait_for(self.target.append(submission), timeout=self.timeout)
            except asyncio.TimeoutError:
                detail = f"timed out after {self.timeout:g}s"
            except LedgerTargetError as exc:
                detail = str(exc)
            else:
                logger.info(
                    "Ledger append succeeded | target=%s attempt=%d",
                    self.target.name, attempt,
                )
                return LedgerAppendResult("appended", attempt)

            logger.warning(
                "Ledger append attempt %d/%d failed | target=%s detail=%s",
                attempt, self.max_attempts, self.target.name, detail,
            )
            if attempt < self.max_attempts:
                await self._sleep(self._delay())

        logger.warning(
            "Ledger append ultimately failed | target=%s submitted_at=%s",
            self.target.name, submission.submitted_at,
        )
        return LedgerAppendResult("failed", self.max_attempts, detail)
