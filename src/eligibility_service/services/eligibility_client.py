"""Async client for the upstream eligibility (270/271) API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from eligibility_service.config import Settings
from eligibility_service.models.schema import Encounter, Provider, Subscriber
from eligibility_service.utils.errors import ConfigurationError, TransportError, UpstreamError
from eligibility_service.utils.logging import get_logger

ELIGIBILITY_PATH = "/eligibility/v3"

logger = get_logger(__name__)


@dataclass(frozen=True)
class EligibilityClientConfig:
    """Process-wide upstream settings, built once at startup."""

    api_key: str
    base_url: str
    timeout_seconds: float = 15.0
    default_trading_partner_id: str = "62308"
    max_attempts: int = 1

    @classmethod
    def from_settings(cls, settings: Settings) -> "EligibilityClientConfig":
        return cls(
            api_key=settings.stedi_api_key,
            base_url=settings.stedi_base_url,
            timeout_seconds=settings.stedi_timeout_seconds,
            default_trading_partner_id=settings.default_trading_partner_id,
            max_attempts=settings.stedi_max_attempts,
        )


class EligibilityClient:
    """Issues one eligibility inquiry per call.

    Holds no per-request state; a single instance (and its connection pool)
    is shared by all requests and closed on shutdown.
    """

    def __init__(
        self,
        config: EligibilityClientConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Upstream credentials and limits
            transport: Optional httpx transport (tests inject a mock here)

        Raises:
            ConfigurationError: If the API key is missing
        """
        if not config.api_key:
            raise ConfigurationError("Upstream eligibility API key is not configured")
        if not config.base_url:
            raise ConfigurationError("Upstream eligibility base URL is not configured")

        self.config = config
        self.client = httpx.AsyncClient(
            base_url=config.base_url.rstrip("/"),
            headers={"Authorization": config.api_key, "Content-Type": "application/json"},
            timeout=config.timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    def build_payload(
        self,
        subscriber: Subscriber,
        provider: Provider,
        encounter: Encounter,
        payer_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Outbound inquiry body. The date of birth is sent as YYYYMMDD."""
        return {
            "tradingPartnerServiceId": payer_id or self.config.default_trading_partner_id,
            "subscriber": subscriber.to_upstream(),
            "provider": provider.to_upstream(),
            "encounter": encounter.to_upstream(),
        }

    async def check_eligibility(
        self,
        subscriber: Subscriber,
        provider: Provider,
        encounter: Optional[Encounter] = None,
        payer_id: Optional[str] = None,
    ) -> Any:
        """Run one eligibility inquiry and return the parsed upstream payload.

        Raises:
            ValidationError: If the subscriber's date of birth cannot be normalized
            TransportError: If the call cannot complete (timeout, DNS, reset)
            UpstreamError: If upstream answers with a non-success status
        """
        payload = self.build_payload(subscriber, provider, encounter or Encounter(), payer_id)

        if self.config.max_attempts <= 1:
            return await self._post(payload)

        result: Any = None
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.config.max_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
            retry=retry_if_exception_type(TransportError),
            reraise=True,
        ):
            with attempt:
                result = await self._post(payload)
        return result

    async def _post(self, payload: Dict[str, Any]) -> Any:
        try:
            response = await self.client.post(ELIGIBILITY_PATH, json=payload)
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"Eligibility request timed out after {self.config.timeout_seconds}s"
            ) from exc
        except httpx.TransportError as exc:
            raise TransportError(f"Eligibility request failed: {exc}") from exc

        if not response.is_success:
            body = _decode_body(response)
            logger.debug(
                "Upstream eligibility rejection",
                extra={"status_code": response.status_code},
            )
            raise UpstreamError(response.status_code, body)

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(
                response.status_code,
                response.text,
                message="Upstream eligibility response was not JSON",
            ) from exc


def _decode_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None
