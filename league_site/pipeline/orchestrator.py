"""
Submission orchestrator — league_site/pipeline/orchestrator.py

Pipeline per submission:
  1. Normalize the raw payload
  2. Validate (honeypot -> required fields -> email format)
  3. Email league staff (fatal on failure)
  4. Append to the ledger (best-effort, never changes the response)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel

from league_site.channels.email_sender import Notifier
from league_site.channels.ledger import LedgerAppender
from league_site.pipeline.normalizer import NormalizedSubmission, normalize_submission
from league_site.pipeline.validator import Dropped, Rejected, validate_submission

logger = logging.getLogger(__name__)


class ContactAccepted(BaseModel):
    ok: bool = True


class ContactError(BaseModel):
    error: str


@dataclass(frozen=True)
class SubmissionResponse:
    status_code: int
    body: Optional[BaseModel] = None


NO_CONTENT = SubmissionResponse(204)
ACCEPTED = SubmissionResponse(200, ContactAccepted())
NOT_CONFIGURED = SubmissionResponse(500, ContactError(error="Server not configured"))
EMAIL_FAILED = SubmissionResponse(502, ContactError(error="Email send failed"))
SERVER_ERROR = SubmissionResponse(500, ContactError(error="Server error"))


class SubmissionOrchestrator:
    """
    Stateless per request; the notifier and ledger are built once at startup.
    Either may be None when its configuration is absent.
    """

    def __init__(self, notifier: Notifier | None, ledger: LedgerAppender | None = None) -> None:
        self.notifier = notifier
        self.ledger = ledger

    async def handle(self, payload: Any) -> SubmissionResponse:
        stage = "normalize"
        try:
            submission = normalize_submission(payload)

            stage = "validate"
            outcome = validate_submission(submission)
            if isinstance(outcome, Dropped):
                logger.info("Honeypot field filled — dropping submission silently")
                return NO_CONTENT
            if isinstance(outcome, Rejected):
                logger.info("Submission rejected: %s", outcome.reason)
                return SubmissionResponse(400, ContactError(error=outcome.reason))
            submission = outcome.submission

            stage = "notify"
            if self.notifier is None:
                logger.error(
                    "Email notifier not configured — set CONTACT_TO and "
                    "SENDGRID_API_KEY or GMAIL_CREDENTIALS_PATH"
                )
                return NOT_CONFIGURED
            result = await self.notifier.notify(submission)
            if not result.sent:
                # Ledger only records requests that staff were told about
                return EMAIL_FAILED

            stage = "ledger"
            await self._append_to_ledger(submission)
            return ACCEPTED
        except Exception:
            logger.exception("Submission pipeline failed at stage=%s", stage)
            return SERVER_ERROR

    async def _append_to_ledger(self, submission: NormalizedSubmission) -> None:
        if self.ledger is None:
            logger.debug("No ledger configured — skipping append")
            return
        try:
            await self.ledger.append(submission)
        except Exception:
            logger.exception(
                "Ledger append raised unexpectedly | target=%s", self.ledger.target.name
            )
