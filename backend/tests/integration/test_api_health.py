"""Integration tests for service endpoints and error handling."""

import pytest

from gateway import __version__
from gateway.core.scraping import FirecrawlClient, get_firecrawl_client
from gateway.core.security.errors import GENERIC_ERROR_MESSAGE


@pytest.mark.integration
@pytest.mark.api
class TestServiceAPI:
    """Test root, health and the catch-all error handler."""

    @pytest.mark.asyncio
    async def test_root(self, client):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["version"] == __version__

    @pytest.mark.asyncio
    async def test_health_when_configured(self, client):
        await client.post("/api/v1/sandbox/commands", json={"command": "pwd"})

        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["sandbox"]["active"] is True
        assert data["services"]["scraping"]["configured"] is True
        assert data["rate_limiter"] == {"tracked_keys": 1, "sweeping": False}

    @pytest.mark.asyncio
    async def test_health_degraded_without_scraper_key(self, client, integration_app):
        integration_app.dependency_overrides[get_firecrawl_client] = lambda: FirecrawlClient(api_key="")

        response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_unhandled_errors_return_safe_payload(self, client, sandbox_manager):
        sandbox_manager.get_active.side_effect = RuntimeError(
            "connection to http+docker://localhost/v1.43 refused"
        )

        response = await client.get("/api/v1/sandbox")

        assert response.status_code == 500
        body = response.json()
        assert body["detail"]["context"] == "/api/v1/sandbox"
        assert body["detail"]["error"] == GENERIC_ERROR_MESSAGE
        assert "docker" not in response.text
        assert "Traceback" not in response.text
