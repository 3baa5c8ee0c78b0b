"""
Integration test fixtures for API testing.
Provides the real application with sandbox, scraper and rate limiter swapped
for test doubles through FastAPI dependency overrides.
"""

from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from gateway.core.sandbox import CommandResult, SandboxContainer, get_sandbox_manager
from gateway.core.scraping import FirecrawlClient, get_firecrawl_client
from gateway.core.security import get_rate_limiter
from gateway.main import app


FIRECRAWL_PAYLOAD = {
    "success": True,
    "data": {
        "markdown": "Welcome to “Example”…",
        "metadata": {"title": "Example Domain", "description": "Illustrative"},
        "screenshot": "https://cdn.test/shot.png",
    },
}


@pytest.fixture
def sandbox(mock_docker_container) -> SandboxContainer:
    """A sandbox whose process calls are recorded."""
    container = SandboxContainer(container=mock_docker_container, workdir="/home/user/app")
    container.run = AsyncMock(return_value=CommandResult(exit_code=0, stdout="ok\n", stderr=""))
    container.install_packages = AsyncMock(
        return_value=CommandResult(exit_code=0, stdout="added 1 package", stderr="")
    )
    container.read_file = AsyncMock(return_value="export default App;")
    container.write_file = AsyncMock(return_value=None)
    return container


@pytest.fixture
def sandbox_manager(sandbox):
    """Sandbox manager with an active sandbox."""
    manager = MagicMock()
    manager.get_active = MagicMock(return_value=sandbox)
    manager.create_sandbox = AsyncMock(return_value=sandbox)
    manager.destroy_sandbox = AsyncMock(return_value=True)
    return manager


@pytest.fixture
def firecrawl_requests():
    """Requests received by the fake Firecrawl endpoint."""
    return []


@pytest.fixture
def scraper(firecrawl_requests) -> FirecrawlClient:
    """Firecrawl client backed by an in-process mock transport."""

    def handler(request: httpx.Request) -> httpx.Response:
        firecrawl_requests.append(request)
        return httpx.Response(200, json=FIRECRAWL_PAYLOAD)

    return FirecrawlClient(
        api_key="fc-test",
        api_url="https://firecrawl.test/v1/scrape",
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def integration_app(rate_limiter, sandbox_manager, scraper):
    """The application with external collaborators overridden."""
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    app.dependency_overrides[get_sandbox_manager] = lambda: sandbox_manager
    app.dependency_overrides[get_firecrawl_client] = lambda: scraper
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    transport = ASGITransport(app=integration_app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
