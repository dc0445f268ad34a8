"""Test configuration and fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient

from repo_agent.main import app
from tests.test_data.fakes import FakeSandboxProvider


@pytest.fixture
def provider() -> FakeSandboxProvider:
    """In-memory sandbox provider seeded with a README."""
    return FakeSandboxProvider()


@pytest.fixture
async def async_client():
    """Create an async test client for FastAPI."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
