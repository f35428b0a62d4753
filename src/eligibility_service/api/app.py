"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from eligibility_service import __version__
from eligibility_service.config import Settings, settings as default_settings
from eligibility_service.api.routes import eligibility, health
from eligibility_service.api.middleware import RequestLoggingMiddleware, MetricsMiddleware
from eligibility_service.services.aggregator import DentalBenefitsAggregator
from eligibility_service.services.catalog import load_catalog
from eligibility_service.services.eligibility_client import EligibilityClient, EligibilityClientConfig
from eligibility_service.utils.errors import ConfigurationError
from eligibility_service.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown logic."""
    yield
    client: Optional[EligibilityClient] = getattr(app.state, "eligibility_client", None)
    if client is not None:
        await client.close()


def _wire_engine(app: FastAPI, app_settings: Settings) -> None:
    """Build the catalog, client, and aggregator once and park them on app.state.

    A missing or malformed catalog raises ConfigurationError and stops startup.
    A missing API key only disables the eligibility route (HTTP 500) so health
    checks keep answering.
    """
    catalog = load_catalog(app_settings.procedure_catalog_path)
    client: Optional[EligibilityClient] = None
    configuration_error: Optional[str] = None

    if app_settings.eligibility_api_enabled:
        try:
            client = EligibilityClient(EligibilityClientConfig.from_settings(app_settings))
        except ConfigurationError as exc:
            configuration_error = str(exc)
            logger.error("Eligibility route disabled", extra={"error": configuration_error})
    else:
        logger.info("Live eligibility checks disabled; serving synthetic reports")

    aggregator = None
    if configuration_error is None:
        aggregator = DentalBenefitsAggregator(
            client=client,
            catalog=catalog,
            max_concurrency=app_settings.max_concurrency,
            fallback_limit=app_settings.fallback_procedure_limit,
            metrics_enabled=app_settings.metrics_enabled,
        )

    app.state.settings = app_settings
    app.state.catalog = catalog
    app.state.eligibility_client = client
    app.state.aggregator = aggregator
    app.state.configuration_error = configuration_error
    logger.info(
        "Procedure catalog loaded",
        extra={"procedures": len(catalog), "source": app_settings.procedure_catalog_path or "bundled"},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies get the same 400 envelope as missing parties."""
    errors = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'] if part != 'body')}: {error['msg']}"
        for error in exc.errors()
    )
    return JSONResponse(status_code=400, content={"success": False, "error": f"Invalid request: {errors}"})


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        app_settings: Settings to use instead of the environment-derived ones

    Returns:
        Configured FastAPI application
    """
    app_settings = app_settings or default_settings
    app = FastAPI(
        title=app_settings.app_name,
        description="Dental eligibility aggregation",
        version=__version__,
        debug=app_settings.debug,
        lifespan=lifespan
    )

    _wire_engine(app, app_settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestLoggingMiddleware)
    if app_settings.metrics_enabled:
        app.add_middleware(MetricsMiddleware)

    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Routes
    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(eligibility.router, prefix="/eligibility", tags=["eligibility"])

    # Prometheus metrics endpoint
    if app_settings.metrics_enabled:
        metrics_app = make_asgi_app()
        app.mount("/metrics", metrics_app)

    return app
