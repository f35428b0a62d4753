"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from eligibility_service.api.app import create_app
from eligibility_service.config import Settings
from eligibility_service.models.schema import ProcedureDescriptor, Provider, Subscriber
from eligibility_service.services.catalog import ProcedureCatalog


@pytest.fixture
def test_settings():
    """Settings isolated from the developer's environment / .env."""
    return Settings(
        _env_file=None,
        stedi_api_key="test-api-key",
        stedi_base_url="https://eligibility.test/medicalnetwork",
        metrics_enabled=False,
    )


@pytest.fixture
def app(test_settings):
    """Create FastAPI app for testing."""
    return create_app(test_settings)


@pytest.fixture
def client(app):
    """Create test client."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def subscriber():
    return Subscriber(
        member_id="0000000000",
        first_name="John",
        last_name="Doe",
        date_of_birth="1987-05-21",
    )


@pytest.fixture
def provider():
    return Provider(npi="1234567890", organization_name="Smith Dental Clinic")


@pytest.fixture
def small_catalog():
    """Three-code catalog used by the per-code scenarios."""
    return ProcedureCatalog(
        [
            ProcedureDescriptor(code="D0120", description="Periodic oral evaluation", category="Preventive"),
            ProcedureDescriptor(code="D1110", description="Adult prophylaxis (cleaning)", category="Preventive"),
            ProcedureDescriptor(code="D2140", description="Amalgam - one surface", category="Restorative"),
        ]
    )


@pytest.fixture
def sample_request_body():
    """Request body in the UI's camelCase shape."""
    return {
        "subscriber": {
            "memberId": "0000000000",
            "firstName": "John",
            "lastName": "Doe",
            "dateOfBirth": "1987-05-21",
        },
        "provider": {"npi": "1234567890", "organizationName": "Smith Dental Clinic"},
    }
