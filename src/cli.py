"""
CLI entry points for the eligibility service.

Commands:
  - check-benefits: Run one dental benefits aggregation against the configured upstream
  - show-catalog: List the procedure catalog in report order
  - fallback-preview: Print the synthetic report served when upstream is unusable
  - serve: Run the HTTP API under uvicorn

Upstream credentials and limits come from the same environment / .env settings
the API uses.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Optional

import typer
import uvicorn

from eligibility_service.config import settings
from eligibility_service.models.schema import Provider, Subscriber
from eligibility_service.services.aggregator import DentalBenefitsAggregator
from eligibility_service.services.catalog import ProcedureCatalog, load_catalog
from eligibility_service.services.eligibility_client import EligibilityClient, EligibilityClientConfig
from eligibility_service.services.fallback import build_fallback_report
from eligibility_service.utils.error_codes import note_for
from eligibility_service.utils.errors import ConfigurationError, ValidationError
from eligibility_service.utils.logging import get_logger, log_event

app = typer.Typer(help="Dental eligibility aggregation CLI.")
logger = get_logger("eligibility-cli")


def _load_catalog_or_exit(catalog_path: Optional[Path]) -> ProcedureCatalog:
    try:
        return load_catalog(str(catalog_path) if catalog_path else settings.procedure_catalog_path)
    except ConfigurationError as exc:
        typer.echo(f"Catalog error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


async def _run_check(
    subscriber: Subscriber,
    provider: Provider,
    catalog: ProcedureCatalog,
    payer_id: Optional[str],
) -> Dict[str, Any]:
    client: Optional[EligibilityClient] = None
    if settings.eligibility_api_enabled:
        client = EligibilityClient(EligibilityClientConfig.from_settings(settings))
    aggregator = DentalBenefitsAggregator(
        client=client,
        catalog=catalog,
        max_concurrency=settings.max_concurrency,
        fallback_limit=settings.fallback_procedure_limit,
        metrics_enabled=settings.metrics_enabled,
    )
    try:
        report = await aggregator.aggregate(subscriber, provider, payer_id=payer_id)
    finally:
        if client is not None:
            await client.close()

    output: Dict[str, Any] = {"success": True, "data": report.model_dump(by_alias=True)}
    if report.synthetic:
        output["note"] = note_for(report.fallback_reason)
    return output


@app.command()
def check_benefits(
    member_id: str = typer.Option(..., help="Subscriber member ID"),
    first_name: str = typer.Option(..., help="Subscriber first name"),
    last_name: str = typer.Option(..., help="Subscriber last name"),
    dob: str = typer.Option(..., help="Date of birth, YYYY-MM-DD"),
    npi: str = typer.Option(..., help="Provider NPI"),
    organization_name: Optional[str] = typer.Option(None, help="Provider organization name"),
    payer_id: Optional[str] = typer.Option(None, help="Trading partner ID (defaults to configured payer)"),
    catalog_path: Optional[Path] = typer.Option(None, help="Procedure catalog JSON"),
) -> None:
    """Aggregate dental benefits for one subscriber and print the report as JSON."""
    catalog = _load_catalog_or_exit(catalog_path)
    subscriber = Subscriber(member_id=member_id, first_name=first_name, last_name=last_name, date_of_birth=dob)
    provider = Provider(npi=npi, organization_name=organization_name)

    try:
        output = asyncio.run(_run_check(subscriber, provider, catalog, payer_id))
    except ConfigurationError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    log_event(
        logger,
        "check_benefits",
        synthetic=output["data"]["synthetic"],
        procedures=len(output["data"]["procedures"]),
    )
    typer.echo(json.dumps(output, indent=2))


@app.command()
def show_catalog(
    catalog_path: Optional[Path] = typer.Option(None, help="Procedure catalog JSON"),
) -> None:
    """List procedure codes in report order."""
    catalog = _load_catalog_or_exit(catalog_path)
    for entry in catalog:
        typer.echo(f"{entry.code}\t{entry.category}\t{entry.display_category}\t{entry.description}")
    typer.echo(f"{len(catalog)} procedures")


@app.command()
def fallback_preview(
    limit: int = typer.Option(settings.fallback_procedure_limit, min=1, help="Procedures to include"),
    catalog_path: Optional[Path] = typer.Option(None, help="Procedure catalog JSON"),
) -> None:
    """Print the synthetic report exactly as the API would serve it."""
    catalog = _load_catalog_or_exit(catalog_path)
    report = build_fallback_report(catalog, limit=limit)
    typer.echo(json.dumps(report.model_dump(by_alias=True), indent=2))


@app.command()
def serve(
    host: str = typer.Option(settings.api_host, help="Bind address"),
    port: int = typer.Option(settings.api_port, help="Bind port"),
    reload: bool = typer.Option(False, help="Reload on code changes (development only)"),
) -> None:
    """Start the eligibility API."""
    uvicorn.run(
        "eligibility_service.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    app()
