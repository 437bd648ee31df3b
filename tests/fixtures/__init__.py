"""Test fixtures for Health Advisor AI."""

from tests.fixtures.mocks import MockModelGateway, sample_ai_advice

__all__ = [
    "MockModelGateway",
    "sample_ai_advice",
]
