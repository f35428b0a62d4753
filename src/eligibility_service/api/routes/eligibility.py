"""Dental eligibility endpoints."""

import time
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from eligibility_service.models.schema import (
    DentalBenefitsRequest,
    DentalBenefitsResponse,
    ProcedureCatalogEntry,
    ProcedureCatalogResponse,
)
from eligibility_service.services.aggregator import DentalBenefitsAggregator, validate_inquiry
from eligibility_service.services.catalog import ProcedureCatalog
from eligibility_service.utils.error_codes import note_for
from eligibility_service.utils.errors import ValidationError
from eligibility_service.utils.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


# Dependency injection
def get_aggregator(request: Request) -> Optional[DentalBenefitsAggregator]:
    """Aggregator built at startup; None when the upstream credential is missing."""
    return request.app.state.aggregator


def get_configuration_error(request: Request) -> Optional[str]:
    return getattr(request.app.state, "configuration_error", None)


def get_catalog(request: Request) -> ProcedureCatalog:
    return request.app.state.catalog


def _envelope(body: DentalBenefitsResponse, status_code: int = 200) -> JSONResponse:
    """Serialize the response envelope.

    ``note`` and ``error`` are left out when unset; a present ``note`` is what
    marks a synthetic report. Nulls inside ``data`` (e.g. a per-code
    ``benefit`` of null) are kept.
    """
    content = body.model_dump(by_alias=True, mode="json")
    return JSONResponse(
        status_code=status_code,
        content={key: value for key, value in content.items() if value is not None},
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return _envelope(DentalBenefitsResponse(success=False, error=message), status_code)


@router.post(
    "/dental-benefits",
    response_model=DentalBenefitsResponse,
    responses={400: {"model": DentalBenefitsResponse}, 500: {"model": DentalBenefitsResponse}},
)
async def dental_benefits(
    body: DentalBenefitsRequest,
    aggregator: Optional[DentalBenefitsAggregator] = Depends(get_aggregator),
    configuration_error: Optional[str] = Depends(get_configuration_error),
):
    """Check dental benefits across the procedure catalog.

    Upstream failures never surface as HTTP errors: the response is a 200 with
    a synthetic report and a ``note`` explaining why. Only caller mistakes
    (400) and a missing upstream credential (500) are errors.
    """
    start_time = time.time()
    try:
        if aggregator is None:
            # validation still wins over the configuration problem
            validate_inquiry(body.subscriber, body.provider)
            return _error(500, configuration_error or "Eligibility service is not configured")

        report = await aggregator.aggregate(body.subscriber, body.provider, payer_id=body.payer_id)

    except ValidationError as e:
        return _error(400, str(e))
    except Exception:
        error_id = f"err_{int(time.time() * 1000)}"
        logger.error(
            "Dental benefits request failed",
            exc_info=True,
            extra={"error_id": error_id},
        )
        return _error(500, f"Internal server error (ID: {error_id})")

    logger.info(
        "Dental benefits report built",
        extra={
            "synthetic": report.synthetic,
            "procedures": len(report.procedures),
            "processing_time_ms": int((time.time() - start_time) * 1000),
        },
    )

    if report.synthetic:
        return _envelope(DentalBenefitsResponse(success=True, data=report, note=note_for(report.fallback_reason)))
    return _envelope(DentalBenefitsResponse(success=True, data=report))


@router.get("/procedures", response_model=ProcedureCatalogResponse)
async def list_procedures(catalog: ProcedureCatalog = Depends(get_catalog)) -> ProcedureCatalogResponse:
    """Procedure catalog in report order, with the UI's coverage grouping."""
    return ProcedureCatalogResponse(
        count=len(catalog),
        procedures=[
            ProcedureCatalogEntry(
                code=entry.code,
                description=entry.description,
                category=entry.category,
                display_category=entry.display_category,
            )
            for entry in catalog
        ],
    )
