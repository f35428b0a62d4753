"""Configuration management for the eligibility service."""

from typing import List, Literal, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application
    app_name: str = "eligibility-service"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_allow_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"]
    )

    # Upstream eligibility API (Stedi)
    stedi_api_key: str = Field(default="", description="Upstream eligibility API key")
    stedi_base_url: str = "https://healthcare.us.stedi.com/2024-04-01/change/medicalnetwork"
    stedi_timeout_seconds: float = 15.0
    stedi_max_attempts: int = Field(
        default=1, description="Attempts per upstream call; transport failures only are retried"
    )
    default_trading_partner_id: str = Field(
        default="62308", description="Payer routed to when the caller supplies none (CIGNA)"
    )
    eligibility_api_enabled: bool = Field(
        default=True, description="When False, serve the synthetic report without calling upstream"
    )

    # Aggregation
    procedure_catalog_path: Optional[str] = Field(
        default=None, description="JSON procedure catalog; bundled CDT list when unset"
    )
    fallback_procedure_limit: int = 20
    max_concurrency: int = Field(
        default=1, description="Per-code upstream calls in flight per request (1 = sequential)"
    )

    # Observability
    metrics_enabled: bool = True

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper

    @field_validator("max_concurrency", "stedi_max_attempts", "fallback_procedure_limit")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Ensure counters are at least 1."""
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    @property
    def has_upstream_credentials(self) -> bool:
        return bool(self.stedi_api_key)


# Global settings instance
settings = Settings()
