"""Service layer for business logic."""

from eligibility_service.services.aggregator import DentalBenefitsAggregator
from eligibility_service.services.catalog import ProcedureCatalog, load_catalog, load_default_catalog
from eligibility_service.services.classifier import is_covered_in_general
from eligibility_service.services.eligibility_client import EligibilityClient, EligibilityClientConfig
from eligibility_service.services.fallback import build_fallback_report

__all__ = [
    "DentalBenefitsAggregator",
    "EligibilityClient",
    "EligibilityClientConfig",
    "ProcedureCatalog",
    "build_fallback_report",
    "is_covered_in_general",
    "load_catalog",
    "load_default_catalog",
]
