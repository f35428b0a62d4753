"""Data models for the eligibility service."""

from eligibility_service.models.schema import (
    COVERED_IN_GENERAL,
    DENTAL_SERVICE_TYPE_CODE,
    BenefitLine,
    BenefitsResult,
    CombinedReport,
    DentalBenefitsRequest,
    DentalBenefitsResponse,
    Encounter,
    FallbackReport,
    ProcedureBenefit,
    ProcedureDescriptor,
    Provider,
    Subscriber,
    parse_benefits,
)

__all__ = [
    "COVERED_IN_GENERAL",
    "DENTAL_SERVICE_TYPE_CODE",
    "BenefitLine",
    "BenefitsResult",
    "CombinedReport",
    "DentalBenefitsRequest",
    "DentalBenefitsResponse",
    "Encounter",
    "FallbackReport",
    "ProcedureBenefit",
    "ProcedureDescriptor",
    "Provider",
    "Subscriber",
    "parse_benefits",
]
