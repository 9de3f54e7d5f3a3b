"""
Test configuration and fixtures for the Prizm color service.
"""
import pytest
from fastapi.testclient import TestClient

from prizm.main import app


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    from prizm.utils.metrics import reset_metrics
    reset_metrics()


@pytest.fixture(autouse=True)
def reset_palettes():
    """Drop every session palette between tests."""
    from prizm.services.store import session_stores
    session_stores.clear()
    yield
    session_stores.clear()
