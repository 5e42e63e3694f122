"""
league_site/capabilities.py
Builds the optional downstream collaborators from Settings, once at startup.
"""
from __future__ import annotations

import logging

import httpx

from league_site.channels.email_sender import (
    AcsEmailSender,
    EmailSender,
    GmailEmailSender,
    Notifier,
    SendGridEmailSender,
)
from league_site.channels.ledger import LedgerAppender, SheetsApiTarget, WebhookTarget
from league_site.config import Settings
from league_site.errors import ConfigurationError
from league_site.pipeline.orchestrator import SubmissionOrchestrator

logger = logging.getLogger(__name__)

EMAIL_PROVIDERS = ("acs", "sendgrid", "gmail")


def _select_provider(settings: Settings) -> str:
    if settings.email_provider:
        if settings.email_provider not in EMAIL_PROVIDERS:
            raise ConfigurationError(
                f"EMAIL_PROVIDER must be one of {EMAIL_PROVIDERS}, got {settings.email_provider!r}"
            )
        return settings.email_provider
    if settings.acs_connection_string:
        return "acs"
    if settings.sendgrid_api_key:
        return "sendgrid"
    if settings.gmail_credentials_path:
        return "gmail"
    return ""


def resolve_notifier(settings: Settings) -> Notifier | None:
    """Return a Notifier, or None (logged) when email is not configured."""
    provider = _select_provider(settings)
    if not provider:
        logger.error("No email provider configured — set ACS_EMAIL_CONNECTION_STRING, "
                     "SENDGRID_API_KEY or GMAIL_CREDENTIALS_PATH")
        return None
    if not settings.contact_to:
        logger.error("CONTACT_TO is not set — join requests cannot be emailed")
        return None

    sender: EmailSender
    if provider == "acs":
        if not settings.acs_connection_string:
            logger.error("EMAIL_PROVIDER=acs but ACS_EMAIL_CONNECTION_STRING is not set")
            return None
        try:
            sender = AcsEmailSender(settings.acs_connection_string, timeout=settings.email_timeout)
        except (KeyError, ValueError) as exc:
            # The connection string embeds the access key
            logger.error("ACS_EMAIL_CONNECTION_STRING could not be parsed: %s", type(exc).__name__)
            return None
    elif provider == "sendgrid":
        if not settings.sendgrid_api_key:
            logger.error("EMAIL_PROVIDER=sendgrid but SENDGRID_API_KEY is not set")
            return None
        sender = SendGridEmailSender(settings.sendgrid_api_key)
    else:
        if not settings.gmail_credentials_path:
            logger.error("EMAIL_PROVIDER=gmail but GMAIL_CREDENTIALS_PATH is not set")
            return None
        try:
            sender = GmailEmailSender(settings.gmail_credentials_path, timeout=settings.email_timeout)
        except (OSError, ValueError) as exc:
            logger.error("Gmail credentials not loaded: %s", exc)
            return None

    logger.info("Email notifier active via %s", sender.name)
    return Notifier(
        sender,
        to_address=settings.contact_to,
        from_address=settings.contact_from,
        league_name=settings.league_name,
        timeout=settings.email_timeout,
    )


def _check_endpoint(url: str) -> None:
    # The Apps Script URL carries the deployment id; keep it out of errors
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise ConfigurationError(f"SHEET_ENDPOINT is not a valid URL: {type(exc).__name__}") from None
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ConfigurationError("SHEET_ENDPOINT must be an absolute http(s) URL")


def resolve_ledger(settings: Settings) -> LedgerAppender | None:
    """
    Return a LedgerAppender for the configured target, or None when no
    target is selected.

    Raises:
        ConfigurationError: Sheets API selected but credentials are missing,
            or SHEET_ENDPOINT is not an absolute http(s) URL.
    """
    if settings.use_google_sheets_api:
        missing = settings.missing_sheets_keys()
        if missing:
            raise ConfigurationError(
                f"USE_GOOGLE_SHEETS_API=true but missing env: {', '.join(missing)}"
            )
        try:
            target = SheetsApiTarget(
                spreadsheet_id=settings.sheets_spreadsheet_id,
                sheet_name=settings.sheets_sheet_name,
                client_email=settings.google_sa_email,
                private_key=settings.google_sa_key,
                timeout=settings.ledger_timeout,
            )
        except ValueError as exc:
            # Never echo the key material itself
            raise ConfigurationError(f"GOOGLE_SA_KEY could not be loaded: {type(exc).__name__}") from None
    elif settings.sheet_endpoint:
        _check_endpoint(settings.sheet_endpoint)
        target = WebhookTarget(settings.sheet_endpoint)
    else:
        logger.info("No ledger target configured — join requests will only be emailed")
        return None

    logger.info("Ledger active via %s", target.name)
    return LedgerAppender(target, timeout=settings.ledger_timeout)


def build_orchestrator(settings: Settings) -> SubmissionOrchestrator:
    return SubmissionOrchestrator(
        notifier=resolve_notifier(settings),
        ledger=resolve_ledger(settings),
    )
