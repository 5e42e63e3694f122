"""
Settings — league_site/config.py
Environment-driven configuration, read once at startup.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from league_site.errors import ConfigurationError

DEFAULT_CONTACT_FROM = "no-reply@wcoha.ca"
DEFAULT_SHEET_NAME = "JoinRequests"


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive, got {raw!r}")
    return value


def _flag(env: Mapping[str, str], key: str) -> bool:
    return env.get(key, "").strip().lower() == "true"


@dataclass(frozen=True)
class Settings:
    league_name: str = "WCOHA"
    cors_origins: tuple[str, ...] = ("http://localhost:3000",)

    # Email notifier
    email_provider: str = ""
    acs_connection_string: str = ""
    sendgrid_api_key: str = ""
    gmail_credentials_path: str = ""
    contact_to: str = ""
    contact_from: str = DEFAULT_CONTACT_FROM
    email_timeout: float = 15.0

    # Ledger
    use_google_sheets_api: bool = False
    google_sa_email: str = ""
    google_sa_key: str = ""
    sheets_spreadsheet_id: str = ""
    sheets_sheet_name: str = DEFAULT_SHEET_NAME
    sheet_endpoint: str = ""
    ledger_timeout: float = 8.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        origins = env.get("CORS_ORIGINS", "http://localhost:3000")
        return cls(
            league_name=env.get("LEAGUE_NAME", "").strip() or "WCOHA",
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            email_provider=env.get("EMAIL_PROVIDER", "").strip().lower(),
            acs_connection_string=env.get("ACS_EMAIL_CONNECTION_STRING", "").strip(),
            sendgrid_api_key=env.get("SENDGRID_API_KEY", "").strip(),
            gmail_credentials_path=env.get("GMAIL_CREDENTIALS_PATH", "").strip(),
            contact_to=env.get("CONTACT_TO", "").strip(),
            contact_from=env.get("CONTACT_FROM", "").strip() or DEFAULT_CONTACT_FROM,
            email_timeout=_float(env, "EMAIL_TIMEOUT_SECONDS", 15.0),
            use_google_sheets_api=_flag(env, "USE_GOOGLE_SHEETS_API"),
            google_sa_email=env.get("GOOGLE_SA_EMAIL", "").strip(),
            # Keys pasted into a single-line env var carry literal "\n"
            google_sa_key=env.get("GOOGLE_SA_KEY", "").replace("\\n", "\n"),
            sheets_spreadsheet_id=env.get("SHEETS_JOIN_SPREADSHEET_ID", "").strip(),
            sheets_sheet_name=env.get("SHEETS_JOIN_SHEET", "").strip() or DEFAULT_SHEET_NAME,
            sheet_endpoint=env.get("SHEET_ENDPOINT", "").strip(),
            ledger_timeout=_float(env, "LEDGER_TIMEOUT_SECONDS", 8.0),
        )

    def missing_sheets_keys(self) -> list[str]:
        missing: list[str] = []
        if not self.google_sa_email:
            missing.append("GOOGLE_SA_EMAIL")
        if not self.google_sa_key.strip():
            missing.append("GOOGLE_SA_KEY")
        if not self.sheets_spreadsheet_id:
            missing.append("SHEETS_JOIN_SPREADSHEET_ID")
        return missing
