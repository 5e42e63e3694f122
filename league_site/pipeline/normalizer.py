"""
Input normalizer — league_site/pipeline/normalizer.py
Turns an untyped join/contact payload into a canonical, bounded record.

Rules:
- Only values that are already strings survive; anything else becomes "".
- Strings are trimmed first, then silently truncated to the field limit.
- goalie / spareOnly follow browser (JavaScript) truthiness of the raw JSON
  value: empty arrays and objects count as true, "" / 0 / null as false.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

# Field name in the payload -> max length after trimming
FIELD_LIMITS: dict[str, int] = {
    "name": 200,
    "email": 200,
    "message": 5000,
    "phone": 32,
    "phoneDisplay": 32,
    "age": 8,
    "currentLevel": 128,
    "position": 64,
    "notes": 2000,
}

# Hidden form input a human never fills in
HONEYPOT_FIELD = "company"


@dataclass(frozen=True)
class NormalizedSubmission:
    name: str = ""
    email: str = ""
    message: str = ""
    phone: str = ""
    phone_display: str = ""
    age: str = ""
    current_level: str = ""
    position: str = ""
    goalie: bool = False
    spare_only: bool = False
    notes: str = ""
    honeypot: str = ""
    submitted_at: str = ""  # stamped by the validator


def clean_text(value: Any, max_length: int | None = None) -> str:
    if not isinstance(value, str):
        return ""
    text = value.strip()
    if max_length is not None:
        text = text[:max_length]
    return text


def json_truthy(value: Any) -> bool:
    """Truthiness as the join form's JavaScript sees it."""
    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, (int, float)):
        return value != 0 and not math.isnan(value)
    if isinstance(value, str):
        return value != ""
    return True


def normalize_submission(data: Any) -> NormalizedSubmission:
    """
    Build a NormalizedSubmission from whatever the client posted.

    Never raises: a payload that is not a mapping is treated as empty, and
    unknown keys are ignored.
    """
    if not isinstance(data, dict):
        data = {}

    def field(key: str) -> str:
        return clean_text(data.get(key), FIELD_LIMITS[key])

    return NormalizedSubmission(
        name=field("name"),
        email=field("email"),
        message=field("message"),
        phone=field("phone"),
        phone_display=field("phoneDisplay"),
        age=field("age"),
        current_level=field("currentLevel"),
        position=field("position"),
        goalie=json_truthy(data.get("goalie")),
        spare_only=json_truthy(data.get("spareOnly")),
        notes=field("notes"),
        honeypot=clean_text(data.get(HONEYPOT_FIELD)),
    )
