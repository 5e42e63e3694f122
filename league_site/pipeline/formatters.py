"""
league_site/pipeline/formatters.py
Outbound shapes for a join request: the staff email and the ledger rows.

THIS IS THE ONLY PLACE the email layout and row order are defined.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from league_site.pipeline.normalizer import NormalizedSubmission

PLACEHOLDER = "—"
RAW_MESSAGE_SEPARATOR = "--- Raw message ---"


def yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def _or_placeholder(value: str) -> str:
    return value or PLACEHOLDER


def compose_subject(submission: NormalizedSubmission, league_name: str) -> str:
    return f"{league_name} Contact / Join: {submission.name}"


def compose_body(submission: NormalizedSubmission) -> str:
    """
    Plain-text body for league staff.

    One line per known field in a fixed order, then the free-form notes,
    then the raw message below a separator. Empty optional fields render
    as an em-dash.
    """
    lines = [
        f"Name: {submission.name}",
        f"Email: {submission.email}",
        f"Phone: {_or_placeholder(submission.phone)}",
        f"Age: {_or_placeholder(submission.age)}",
        f"Level: {_or_placeholder(submission.current_level)}",
        f"Position: {_or_placeholder(submission.position)}",
        f"Goalie: {yes_no(submission.goalie)}",
        f"Spare-only: {yes_no(submission.spare_only)}",
        "",
        _or_placeholder(submission.notes),
        "",
        RAW_MESSAGE_SEPARATOR,
        submission.message,
    ]
    return "\n".join(lines)


def sheet_row(submission: NormalizedSubmission) -> list[str]:
    """Spreadsheet row; the message body is deliberately left out."""
    return [
        submission.submitted_at,
        submission.name,
        submission.email,
        submission.phone,
        submission.phone_display,
        submission.age,
        submission.current_level,
        submission.position,
        yes_no(submission.goalie),
        yes_no(submission.spare_only),
        submission.notes,
    ]


class WebhookRow(BaseModel):
    """JSON body posted to a generic ledger webhook."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    submitted_at: str = Field(alias="submittedAt")
    name: str
    email: str
    phone: str
    phone_display: str = Field(alias="phoneDisplay")
    age: str
    current_level: str = Field(alias="currentLevel")
    position: str
    goalie: bool
    spare_only: bool = Field(alias="spareOnly")
    notes: str
    message: str

    @classmethod
    def from_submission(cls, submission: NormalizedSubmission) -> "WebhookRow":
        return cls(
            submitted_at=submission.submitted_at,
            name=submission.name,
            email=submission.email,
            phone=submission.phone,
            phone_display=submission.phone_display,
            age=submission.age,
            current_level=submission.current_level,
            position=submission.position,
            goalie=submission.goalie,
            spare_only=submission.spare_only,
            notes=submission.notes,
            message=submission.message,
        )

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)
