"""Shared test fixtures."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from cspolicy.policy.builder import PolicyBuilder


@pytest.fixture(autouse=True)
def _mock_settings(monkeypatch):
    """Provide default settings for all tests."""
    monkeypatch.setenv("CSP_LOG_JSON", "false")
    monkeypatch.setenv("CSP_LOG_LEVEL", "debug")
    monkeypatch.delenv("CSP_REPORT_URI", raising=False)
    monkeypatch.delenv("CSP_REPORT_ONLY", raising=False)
    monkeypatch.delenv("CSP_REPORT_DIR", raising=False)
    monkeypatch.delenv("CSP_POLICY_FILE", raising=False)

    # Reset cached settings and policy file
    import cspolicy.config.loader as loader
    loader._settings = None
    loader._policy = None
    yield
    loader._settings = None
    loader._policy = None


@pytest.fixture
def policy() -> PolicyBuilder:
    """Builder with constructor defaults."""
    return PolicyBuilder()


@pytest.fixture
def client():
    """FastAPI test client with lifespan."""
    from cspolicy.main import create_app

    with TestClient(create_app(), raise_server_exceptions=False) as c:
        yield c
