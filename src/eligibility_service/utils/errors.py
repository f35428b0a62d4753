# ABOUTME: Exception taxonomy shared by the client, engine, and routes.
# ABOUTME: Only ValidationError reaches callers as a client error.
"""Errors raised while checking dental eligibility."""

from __future__ import annotations

from typing import Any, Optional


class EligibilityError(Exception):
    """Base class for eligibility service failures."""


class ValidationError(EligibilityError):
    """Request input is missing or malformed. Never masked by the fallback."""


class ConfigurationError(EligibilityError):
    """Credentials or catalog are unavailable; fatal for the affected route."""


class TransportError(EligibilityError):
    """The upstream call could not complete (timeout, DNS, connection reset)."""


class UpstreamError(EligibilityError):
    """The upstream answered with a non-success status or an unreadable body."""

    def __init__(self, status_code: int, body: Optional[Any] = None, message: Optional[str] = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"Upstream eligibility call failed with HTTP {status_code}")

    @property
    def is_client_rejection(self) -> bool:
        """True for 4xx answers, i.e. upstream rejected the request we built."""
        return 400 <= self.status_code < 500
