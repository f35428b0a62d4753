"""API request/response schemas and eligibility entities."""

import re
from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from eligibility_service.utils.errors import ValidationError

# Upstream service-type code for general dental coverage.
DENTAL_SERVICE_TYPE_CODE = "35"

# Marks a procedure already covered by the general benefit; no per-code call was made.
COVERED_IN_GENERAL = "covered_in_general"

_DOB_PATTERNS = (
    re.compile(r"^(\d{4})-(\d{2})-(\d{2})$"),
    re.compile(r"^(\d{4})/(\d{2})/(\d{2})$"),
    re.compile(r"^(\d{4})(\d{2})(\d{2})$"),
)

CATEGORY_DISPLAY_NAMES = {
    "Preventive": "Preventative Coverage",
    "Restorative": "Basic Coverage",
    "Radiographs": "Basic Coverage",
    "Endodontics": "Major Coverage",
    "Periodontics": "Periodontal Coverage",
    "Prosthodontics": "Major Coverage",
    "Miscellaneous": "Miscellaneous",
}


class CamelModel(BaseModel):
    """Base model exposing camelCase names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Subscriber(CamelModel):
    """Insured member the inquiry is about."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    member_id: str = Field(min_length=1, description="Payer member identifier")
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    date_of_birth: str = Field(description="YYYY-MM-DD")

    def dob_for_upstream(self) -> str:
        """Return the date of birth as an unseparated 8-digit YYYYMMDD string."""
        value = self.date_of_birth.strip()
        for pattern in _DOB_PATTERNS:
            match = pattern.match(value)
            if match:
                try:
                    parsed = datetime.strptime("".join(match.groups()), "%Y%m%d")
                except ValueError:
                    break
                return parsed.strftime("%Y%m%d")
        raise ValidationError(f"dateOfBirth '{self.date_of_birth}' is not a YYYY-MM-DD date")

    def to_upstream(self) -> dict[str, Any]:
        """Outbound subscriber payload; the instance itself is left untouched."""
        payload = self.model_dump(by_alias=True, exclude_none=True)
        payload["dateOfBirth"] = self.dob_for_upstream()
        return payload


class Provider(CamelModel):
    """Rendering or billing provider, passed through verbatim."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    npi: str = Field(min_length=1, description="National Provider Identifier")
    organization_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    def to_upstream(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Encounter(CamelModel):
    """Service-type codes and optional procedure code for one inquiry."""

    service_type_codes: list[str] = Field(default_factory=lambda: [DENTAL_SERVICE_TYPE_CODE])
    procedure_code: Optional[str] = None

    def to_upstream(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ProcedureDescriptor(CamelModel):
    """One catalog entry (CDT code)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    code: str = Field(min_length=1)
    description: str
    category: str

    @property
    def display_category(self) -> str:
        return CATEGORY_DISPLAY_NAMES.get(self.category, self.category)


class BenefitLine(CamelModel):
    """Benefit line fields the classifier understands; anything else rides along."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    # Payers send codes and amounts as strings or numbers; only the
    # service label and service-type codes are interpreted.
    service: Optional[Union[str, int]] = None
    service_type_code: Optional[Union[str, int]] = None
    service_type_codes: Optional[list[Union[str, int]]] = None
    status: Any = None
    percentage_covered: Any = None
    copay_amount: Any = None

    def names_service(self, label: str) -> bool:
        if self.service is None:
            return False
        return str(self.service).strip().lower() == label.strip().lower()

    def carries_service_type(self, code: str) -> bool:
        if self.service_type_code is not None and str(self.service_type_code).strip() == code:
            return True
        return any(str(value).strip() == code for value in self.service_type_codes or [])


class BenefitsResult(CamelModel):
    """Known upstream benefits shape: ``{"benefits": [...]}`` plus pass-through fields."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    benefits: list[BenefitLine] = Field(default_factory=list)


# Upstream payload: either the known shape or opaque JSON kept verbatim.
UpstreamPayload = Union[BenefitsResult, dict[str, Any], list[Any]]


def parse_benefits(payload: Optional[UpstreamPayload]) -> Optional[BenefitsResult]:
    """Read an upstream payload as the known benefits shape.

    Returns None for absent or opaque payloads (non-mappings, or a ``benefits``
    value that is not a list). Each line is read on its own: lines that are not
    objects or do not fit ``BenefitLine`` are skipped so one odd line cannot hide
    the others. The raw payload is never modified.
    """
    if isinstance(payload, BenefitsResult):
        return payload
    if not isinstance(payload, dict):
        return None
    benefits = payload.get("benefits")
    if not isinstance(benefits, list):
        return None
    lines = []
    for raw in benefits:
        if not isinstance(raw, dict):
            continue
        try:
            lines.append(BenefitLine.model_validate(raw))
        except PydanticValidationError:
            continue
    return BenefitsResult(benefits=lines)


class ProcedureBenefit(CamelModel):
    """Per-code outcome inside a report."""

    code: str
    description: str
    category: str
    benefit: Optional[Any] = Field(
        default=None,
        description="COVERED_IN_GENERAL, the raw per-code benefits payload, or null",
    )

    @property
    def covered_in_general(self) -> bool:
        return self.benefit == COVERED_IN_GENERAL


class CombinedReport(CamelModel):
    """General benefits plus one entry per catalog procedure, in catalog order."""

    general: Any
    procedures: list[ProcedureBenefit] = Field(default_factory=list)
    synthetic: Literal[False] = False


class FallbackReport(CombinedReport):
    """Synthetic report built from local data when upstream is unusable."""

    synthetic: Literal[True] = True  # type: ignore[assignment]
    fallback_reason: Optional[str] = None


class DentalBenefitsRequest(CamelModel):
    """Body of POST /eligibility/dental-benefits.

    Both parts are optional here so a missing one surfaces as a 400 from the
    engine instead of a schema 422.
    """

    subscriber: Optional[Subscriber] = None
    provider: Optional[Provider] = None
    payer_id: Optional[str] = Field(default=None, description="Trading partner override")


class DentalBenefitsResponse(CamelModel):
    """Envelope returned to the UI."""

    success: bool
    data: Optional[Annotated[Union[CombinedReport, FallbackReport], Field(discriminator="synthetic")]] = None
    note: Optional[str] = None
    error: Optional[str] = None


class ProcedureCatalogEntry(CamelModel):
    code: str
    description: str
    category: str
    display_category: str


class ProcedureCatalogResponse(CamelModel):
    count: int
    procedures: list[ProcedureCatalogEntry]
