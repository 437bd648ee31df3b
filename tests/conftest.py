"""
Test configuration and fixtures for Health Advisor AI.

- Mock model gateway and a fresh request counter per test
- TestClient with gateway/counter dependency overrides
- A configured API key so requests get past the credential check
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from health_advisor.config import settings
from health_advisor.main import app
from health_advisor.services.ai_gateway import get_model_gateway
from health_advisor.services.rate_limit import RequestCounter, get_request_counter
from tests.fixtures.mocks import MockModelGateway


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def api_key(monkeypatch) -> str:
    """Configure a dummy Anthropic API key."""
    monkeypatch.setattr(settings, "anthropic_api_key", "test-key")
    return "test-key"


@pytest.fixture
def mock_gateway() -> MockModelGateway:
    """
    Mock model gateway for testing AI functionality.

    Returns a mock that can be configured per test.
    """
    return MockModelGateway()


@pytest.fixture
def request_counter() -> RequestCounter:
    """Fresh counter with the production limits."""
    return RequestCounter(max_requests=10, window_seconds=60)


# =============================================================================
# Client Fixtures
# =============================================================================


@pytest.fixture
def client(
    api_key: str, mock_gateway: MockModelGateway, request_counter: RequestCounter
) -> Generator[TestClient, None, None]:
    """TestClient with the gateway and counter replaced by test instances."""
    app.dependency_overrides[get_model_gateway] = lambda: mock_gateway
    app.dependency_overrides[get_request_counter] = lambda: request_counter

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# pytest markers
# =============================================================================


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
