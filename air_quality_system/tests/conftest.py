"""
Pytest configuration for Air Quality System tests.

Registers custom markers and provides shared fixtures. HTTP traffic is
replaced by a mocked requests.Session, so no test touches the network.
"""

from unittest.mock import MagicMock, Mock

import pytest
import requests

from airquality.config import AirQualityConfig


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def config():
    """Fixture providing a configuration with a WAQI token and fixed URLs."""
    return AirQualityConfig(
        geocoder_url="https://geocoder.test",
        router_url="https://router.test",
        air_api_url="https://air.test/v1/air-quality",
        waqi_url="https://waqi.test",
        waqi_token="test-token",
        timeout=5.0,
    )


@pytest.fixture
def session():
    """Fixture providing a mocked requests.Session."""
    mocked = MagicMock(spec=requests.Session)
    mocked.headers = {}
    return mocked


@pytest.fixture
def make_response():
    """Fixture providing a factory for mocked HTTP responses."""
    def _make(payload=None, status_code=200, invalid_json=False):
        response = Mock()
        response.status_code = status_code
        response.ok = status_code < 400
        if invalid_json:
            response.json.side_effect = ValueError("No JSON object could be decoded")
        else:
            response.json.return_value = payload
        return response
    return _make
