# ABOUTME: Defines canonical reason codes for degraded-mode responses.
# ABOUTME: Keeps fallback taxonomy consistent across logs, metrics, and responses.
"""Centralized fallback reason codes used across the eligibility service."""

from eligibility_service.utils.errors import TransportError, UpstreamError


class FallbackReason:
    """String constants describing why a synthetic report was served."""

    TRANSPORT_ERROR = "transport_error"
    UPSTREAM_ERROR = "upstream_error"
    UPSTREAM_REJECTED_REQUEST = "upstream_rejected_request"
    API_DISABLED = "api_disabled"


FALLBACK_NOTES = {
    FallbackReason.TRANSPORT_ERROR: (
        "The insurance eligibility service could not be reached. "
        "Showing estimated coverage; verify with the payer before treatment."
    ),
    FallbackReason.UPSTREAM_ERROR: (
        "The insurance eligibility service returned an error. "
        "Showing estimated coverage; verify with the payer before treatment."
    ),
    FallbackReason.UPSTREAM_REJECTED_REQUEST: (
        "The insurance eligibility service rejected this inquiry. "
        "Showing estimated coverage; verify with the payer before treatment."
    ),
    FallbackReason.API_DISABLED: (
        "Live eligibility checks are disabled. Showing sample coverage data."
    ),
}


def reason_for(exc: Exception) -> str:
    """Map an upstream failure onto its fallback reason code."""
    if isinstance(exc, UpstreamError):
        if exc.is_client_rejection:
            return FallbackReason.UPSTREAM_REJECTED_REQUEST
        return FallbackReason.UPSTREAM_ERROR
    if isinstance(exc, TransportError):
        return FallbackReason.TRANSPORT_ERROR
    raise TypeError(f"no fallback reason for {type(exc).__name__}")


def note_for(reason: str) -> str:
    return FALLBACK_NOTES.get(reason, FALLBACK_NOTES[FallbackReason.UPSTREAM_ERROR])
