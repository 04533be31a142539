"""Pytest fixtures for webapp tests."""

import pytest

from breach_protocol.webapp.app import create_app
from breach_protocol.webapp.config import TestConfig


@pytest.fixture
def config_class(tmp_path):
    """TestConfig with storage under a temporary directory."""

    class IsolatedTestConfig(TestConfig):
        DATA_PATH = str(tmp_path / "data")
        DATABASE_URI = str(tmp_path / "test.db")

    return IsolatedTestConfig


@pytest.fixture
def app(config_class):
    """Create test application."""
    return create_app(config_class)


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def session_id(client):
    """Create a started session and return its id."""
    response = client.post("/api/sessions")
    return response.get_json()["session_id"]
