"""Aggregates general and per-procedure dental eligibility into one report."""

from __future__ import annotations

import asyncio
import time
from typing import Any, List, Optional, Protocol, Sequence, Tuple, Union

from eligibility_service.models.schema import (
    COVERED_IN_GENERAL,
    CombinedReport,
    Encounter,
    FallbackReport,
    ProcedureBenefit,
    ProcedureDescriptor,
    Provider,
    Subscriber,
)
from eligibility_service.observability.eligibility_metrics import (
    record_fallback,
    record_report,
    record_short_circuit,
    record_upstream_call,
)
from eligibility_service.services.catalog import ProcedureCatalog
from eligibility_service.services.classifier import is_covered_in_general
from eligibility_service.services.fallback import DEFAULT_FALLBACK_LIMIT, build_fallback_report
from eligibility_service.utils.error_codes import FallbackReason, reason_for
from eligibility_service.utils.errors import TransportError, UpstreamError, ValidationError
from eligibility_service.utils.logging import get_logger


class EligibilityChecker(Protocol):
    async def check_eligibility(
        self,
        subscriber: Subscriber,
        provider: Provider,
        encounter: Optional[Encounter] = None,
        payer_id: Optional[str] = None,
    ) -> Any:
        ...


class DentalBenefitsAggregator:
    """Orchestrates one general inquiry plus per-code inquiries where needed.

    With no client (live checks disabled) every request gets the synthetic
    report. Any upstream failure abandons the in-progress report and returns the
    synthetic fallback instead; a partially filled report would be
    indistinguishable from genuine "not covered" answers.
    """

    def __init__(
        self,
        client: Optional[EligibilityChecker],
        catalog: ProcedureCatalog,
        max_concurrency: int = 1,
        fallback_limit: int = DEFAULT_FALLBACK_LIMIT,
        metrics_enabled: bool = True,
    ) -> None:
        self.logger = get_logger(__name__)
        self.client = client
        self.catalog = catalog
        self.max_concurrency = max(1, max_concurrency)
        self.fallback_limit = fallback_limit
        # per-app switch; the process-wide METRICS_ENABLED gate still applies
        self.metrics_enabled = metrics_enabled

    async def aggregate(
        self,
        subscriber: Optional[Subscriber],
        provider: Optional[Provider],
        payer_id: Optional[str] = None,
    ) -> Union[CombinedReport, FallbackReport]:
        """Build the combined dental benefits report.

        Raises:
            ValidationError: If subscriber or provider is missing or the date of
                birth cannot be normalized. Checked before any network call.
        """
        validate_inquiry(subscriber, provider)
        if self.client is None:
            return self.fallback(FallbackReason.API_DISABLED)

        try:
            report = await self._collect(subscriber, provider, payer_id)
        except (TransportError, UpstreamError) as exc:
            return self.fallback(reason_for(exc), exc)

        if self.metrics_enabled:
            record_report(synthetic=False)
        return report

    def fallback(self, reason: str, exc: Optional[Exception] = None) -> FallbackReport:
        """Return the synthetic report, logging why it was needed."""
        self._log_fallback(reason, exc)
        if self.metrics_enabled:
            record_fallback(reason)
            record_report(synthetic=True)
        return build_fallback_report(self.catalog, limit=self.fallback_limit, reason=reason)

    async def _collect(
        self,
        subscriber: Subscriber,
        provider: Provider,
        payer_id: Optional[str],
    ) -> CombinedReport:
        general = await self._call("general", subscriber, provider, Encounter(), payer_id)

        procedures: List[Optional[ProcedureBenefit]] = [None] * len(self.catalog)
        pending: List[Tuple[int, ProcedureDescriptor]] = []
        for index, entry in enumerate(self.catalog):
            if is_covered_in_general(general, entry.code):
                procedures[index] = _procedure_benefit(entry, COVERED_IN_GENERAL)
            else:
                pending.append((index, entry))

        short_circuited = len(self.catalog) - len(pending)
        if short_circuited and self.metrics_enabled:
            record_short_circuit(short_circuited)
        self.logger.info(
            "General dental inquiry complete",
            extra={
                "procedures": len(self.catalog),
                "covered_in_general": short_circuited,
                "per_code_lookups": len(pending),
            },
        )

        if self.max_concurrency == 1:
            for index, entry in pending:
                procedures[index] = await self._lookup_procedure(entry, subscriber, provider, payer_id)
        else:
            results = await self._lookup_concurrently(pending, subscriber, provider, payer_id)
            for (index, _), result in zip(pending, results):
                procedures[index] = result

        return CombinedReport(general=general, procedures=procedures)

    async def _lookup_concurrently(
        self,
        pending: Sequence[Tuple[int, ProcedureDescriptor]],
        subscriber: Subscriber,
        provider: Provider,
        payer_id: Optional[str],
    ) -> List[ProcedureBenefit]:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded(entry: ProcedureDescriptor) -> ProcedureBenefit:
            async with semaphore:
                return await self._lookup_procedure(entry, subscriber, provider, payer_id)

        tasks = [asyncio.create_task(bounded(entry)) for _, entry in pending]
        try:
            # gather keeps input order, so results line up with ``pending``
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _lookup_procedure(
        self,
        entry: ProcedureDescriptor,
        subscriber: Subscriber,
        provider: Provider,
        payer_id: Optional[str],
    ) -> ProcedureBenefit:
        result = await self._call(
            "procedure",
            subscriber,
            provider,
            Encounter(procedure_code=entry.code),
            payer_id,
        )
        benefit = result.get("benefits") if isinstance(result, dict) else None
        return _procedure_benefit(entry, benefit)

    async def _call(
        self,
        kind: str,
        subscriber: Subscriber,
        provider: Provider,
        encounter: Encounter,
        payer_id: Optional[str],
    ) -> Any:
        start = time.time()
        try:
            result = await self.client.check_eligibility(subscriber, provider, encounter, payer_id)
        except TransportError:
            self._record_call(kind, "transport_error", start)
            raise
        except UpstreamError:
            self._record_call(kind, "upstream_error", start)
            raise
        self._record_call(kind, "success", start)
        return result

    def _record_call(self, kind: str, outcome: str, start: float) -> None:
        if self.metrics_enabled:
            record_upstream_call(kind, outcome, time.time() - start)

    def _log_fallback(self, reason: str, exc: Optional[Exception]) -> None:
        extra = {"reason": reason, "error": str(exc) if exc else None}
        if isinstance(exc, UpstreamError):
            extra["status_code"] = exc.status_code
            extra["upstream_body"] = exc.body

        if reason == FallbackReason.UPSTREAM_REJECTED_REQUEST:
            # 4xx means upstream refused the inquiry we built, not an outage
            self.logger.error("Upstream rejected eligibility inquiry, serving synthetic report", extra=extra)
        elif reason == FallbackReason.API_DISABLED:
            self.logger.info("Live eligibility disabled, serving synthetic report", extra=extra)
        else:
            self.logger.warning("Upstream eligibility unavailable, serving synthetic report", extra=extra)


def _procedure_benefit(entry: ProcedureDescriptor, benefit: Any) -> ProcedureBenefit:
    return ProcedureBenefit(
        code=entry.code,
        description=entry.description,
        category=entry.category,
        benefit=benefit,
    )


def validate_inquiry(subscriber: Optional[Subscriber], provider: Optional[Provider]) -> None:
    """Reject caller misuse before any upstream traffic.

    Raises:
        ValidationError: If either party is missing or the date of birth
            cannot be normalized to YYYYMMDD.
    """
    missing = [name for name, value in (("subscriber", subscriber), ("provider", provider)) if value is None]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")
    subscriber.dob_for_upstream()
