"""Decides whether a procedure is already covered by the general dental answer."""

from __future__ import annotations

from typing import Optional

from eligibility_service.models.schema import (
    DENTAL_SERVICE_TYPE_CODE,
    UpstreamPayload,
    parse_benefits,
)


def is_covered_in_general(general_result: Optional[UpstreamPayload], procedure_code: str) -> bool:
    """Return True when no per-code inquiry is needed for ``procedure_code``.

    A benefit line covers the code when its service label equals the code
    (case-insensitive) or when it carries the general dental service-type
    marker, which payers commonly return once for all basic dental work.

    Lines that cannot be read are ignored; the remaining lines still count.
    Absent, opaque, or empty results answer False so the caller performs the
    per-code lookup instead of under-reporting.
    """
    parsed = parse_benefits(general_result)
    if parsed is None or not parsed.benefits:
        return False

    for line in parsed.benefits:
        if line.names_service(procedure_code):
            return True
        if line.carries_service_type(DENTAL_SERVICE_TYPE_CODE):
            return True
    return False
