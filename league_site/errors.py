"""
league_site/errors.py
Exception types shared by the submission pipeline and its collaborators.
"""
from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Required settings for a selected capability are missing or malformed."""


class EmailDeliveryError(Exception):
    """The email provider refused or failed to accept a message."""


class LedgerTargetError(Exception):
    """A single ledger append attempt failed."""
