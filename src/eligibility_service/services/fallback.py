"""Deterministic synthetic report served when the upstream is unusable."""

from __future__ import annotations

from typing import Any, Dict, List

from eligibility_service.models.schema import FallbackReport, ProcedureBenefit
from eligibility_service.services.catalog import ProcedureCatalog
from eligibility_service.utils.error_codes import FallbackReason

DEFAULT_FALLBACK_LIMIT = 20

_GENERAL_TIERS: List[Dict[str, str]] = [
    {"service": "Dental - Preventive", "status": "active", "percentageCovered": "100", "copayAmount": "$0"},
    {"service": "Dental - Basic", "status": "active", "percentageCovered": "80", "copayAmount": "$25"},
    {"service": "Dental - Major", "status": "active", "percentageCovered": "50", "copayAmount": "$100"},
]


def _general_section() -> Dict[str, Any]:
    # fresh copies so callers can't alter the module-level tiers
    return {"benefits": [dict(tier) for tier in _GENERAL_TIERS]}


def _percentage_for(category: str) -> str:
    return "100" if "preventive" in category.lower() else "80"


def build_fallback_report(
    catalog: ProcedureCatalog,
    limit: int = DEFAULT_FALLBACK_LIMIT,
    reason: str = FallbackReason.UPSTREAM_ERROR,
) -> FallbackReport:
    """Build the synthetic report from the first ``limit`` catalog entries.

    No network access; the same catalog always yields the same report.
    """
    procedures = [
        ProcedureBenefit(
            code=entry.code,
            description=entry.description,
            category=entry.category,
            benefit={"percentageCovered": _percentage_for(entry.category)},
        )
        for entry in catalog.head(limit)
    ]
    return FallbackReport(
        general=_general_section(),
        procedures=procedures,
        fallback_reason=reason,
    )
