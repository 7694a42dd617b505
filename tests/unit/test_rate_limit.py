"""Tests for rate limiter construction and keying."""

from unittest.mock import MagicMock

import pytest
from starlette.requests import Request

from src.taskrelay.core import rate_limit
from src.taskrelay.core.rate_limit import create_limiter, get_rate_limit_key

pytestmark = pytest.mark.unit


@pytest.fixture
def mock_request() -> MagicMock:
    request = MagicMock(spec=Request)
    request.headers = {"X-Forwarded-For": "10.0.0.1"}
    request.client = MagicMock()
    request.client.host = "192.168.1.100"
    return request


def test_key_is_client_ip_not_forwarded_header(mock_request):
    assert get_rate_limit_key(mock_request) == "192.168.1.100"


def test_disabled_in_testing():
    assert create_limiter().enabled is False


def test_enabled_outside_testing(monkeypatch):
    settings = MagicMock()
    settings.app_env = "development"
    monkeypatch.setattr(rate_limit, "get_settings", lambda: settings)

    assert create_limiter().enabled is True
