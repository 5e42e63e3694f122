"""
Submission validator — league_site/pipeline/validator.py

Checks run in a fixed order and stop at the first failure:
honeypot -> required fields -> email format.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Union

from league_site.pipeline.normalizer import NormalizedSubmission

# Same pattern the join form uses client-side
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MISSING_FIELDS = "Missing name, email, or message"
INVALID_EMAIL = "Invalid email"


@dataclass(frozen=True)
class Valid:
    submission: NormalizedSubmission


@dataclass(frozen=True)
class Rejected:
    reason: str


@dataclass(frozen=True)
class Dropped:
    """Honeypot was filled in; the sender is treated as a bot."""


ValidationOutcome = Union[Valid, Rejected, Dropped]


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def validate_submission(submission: NormalizedSubmission) -> ValidationOutcome:
    """Classify a normalized submission. Valid results carry a submitted_at stamp."""
    if submission.honeypot:
        return Dropped()
    if not submission.name or not submission.email or not submission.message:
        return Rejected(MISSING_FIELDS)
    if not EMAIL_PATTERN.match(submission.email):
        return Rejected(INVALID_EMAIL)
    return Valid(replace(submission, submitted_at=utc_timestamp()))
