"""Integration tests for the scrape API endpoint."""

import json

import httpx
import pytest

from gateway.core.scraping import FirecrawlClient, get_firecrawl_client


@pytest.mark.integration
@pytest.mark.api
class TestScrapeAPI:
    """Test POST /scrape."""

    @pytest.mark.asyncio
    async def test_scrape_public_url(self, client, firecrawl_requests):
        response = await client.post("/api/v1/scrape", json={"url": "https://example.com/docs"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["url"] == "https://example.com/docs"
        assert data["screenshot"] == "https://cdn.test/shot.png"
        assert data["structured"]["title"] == "Example Domain"
        assert data["structured"]["content"] == 'Welcome to "Example"...'
        assert data["content"].startswith("Title: Example Domain\nDescription: Illustrative\n")
        assert data["metadata"]["scraper"] == "firecrawl-enhanced"
        assert data["metadata"]["contentLength"] == len(data["content"])

        assert len(firecrawl_requests) == 1
        sent = json.loads(firecrawl_requests[0].content)
        assert sent["url"] == "https://example.com/docs"
        assert firecrawl_requests[0].headers["authorization"] == "Bearer fc-test"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "url, reason",
        [
            ("http://localhost:8080/admin", "blocked_network"),
            ("http://127.0.0.1/", "blocked_network"),
            ("http://169.254.169.254/latest/meta-data/", "blocked_network"),
            ("http://10.1.2.3/", "blocked_network"),
            ("http://[::ffff:127.0.0.1]/", "blocked_network"),
            ("http://2130706433/", "blocked_network"),
            ("http://0x7f.1/", "blocked_network"),
            ("ftp://example.com/file", "invalid_protocol"),
            ("file:///etc/passwd", "invalid_protocol"),
            ("not a url", "invalid_format"),
            (None, "invalid_format"),
        ],
    )
    async def test_rejected_urls_never_reach_scraper(self, client, firecrawl_requests, url, reason):
        response = await client.post("/api/v1/scrape", json={"url": url})

        assert response.status_code == 400
        assert response.json()["detail"]["reason"] == reason
        assert firecrawl_requests == []

    @pytest.mark.asyncio
    async def test_unconfigured_scraper(self, client, integration_app):
        integration_app.dependency_overrides[get_firecrawl_client] = lambda: FirecrawlClient(api_key="")

        response = await client.post("/api/v1/scrape", json={"url": "https://example.com/docs"})

        assert response.status_code == 503
        assert response.json()["detail"]["error"] == "Scraping service is not configured."

    @pytest.mark.asyncio
    async def test_upstream_failure_is_sanitized(self, client, integration_app):
        def handler(request):
            return httpx.Response(500, text="Traceback (most recent call last): secret")

        integration_app.dependency_overrides[get_firecrawl_client] = lambda: FirecrawlClient(
            api_key="fc-test",
            api_url="https://firecrawl.test/v1/scrape",
            transport=httpx.MockTransport(handler),
        )

        response = await client.post("/api/v1/scrape", json={"url": "https://example.com/docs"})

        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["context"] == "scrape"
        assert "Traceback" not in detail["error"]

    @pytest.mark.asyncio
    async def test_rate_limited_after_ten_calls(self, client, firecrawl_requests, clock):
        for _ in range(10):
            response = await client.post("/api/v1/scrape", json={"url": "https://example.com/docs"})
            assert response.status_code == 200

        response = await client.post("/api/v1/scrape", json={"url": "https://example.com/docs"})

        assert response.status_code == 429
        assert len(firecrawl_requests) == 10

        clock.advance(60_000)
        response = await client.post("/api/v1/scrape", json={"url": "https://example.com/docs"})

        assert response.status_code == 200


def _override_scraper(integration_app, payload, requests=None):
    def handler(request):
        if requests is not None:
            requests.append(json.loads(request.content))
        return httpx.Response(200, json=payload)

    integration_app.dependency_overrides[get_firecrawl_client] = lambda: FirecrawlClient(
        api_key="fc-test",
        api_url="https://firecrawl.test/v1/scrape",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.integration
@pytest.mark.api
class TestScrapeWebsiteAPI:
    """Test POST /scrape/website."""

    @pytest.mark.asyncio
    async def test_defaults(self, client, integration_app):
        sent = []
        _override_scraper(
            integration_app,
            {
                "success": True,
                "data": {
                    "markdown": "# Docs",
                    "html": "<h1>Docs</h1>",
                    "links": ["https://example.com/a"],
                    "metadata": {"title": "Docs", "description": "All the docs"},
                },
            },
            sent,
        )

        response = await client.post("/api/v1/scrape/website", json={"url": "https://example.com/docs"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "Docs"
        assert data["content"] == "# Docs"
        assert data["html"] == "<h1>Docs</h1>"
        assert data["links"] == ["https://example.com/a"]
        assert sent[0]["formats"] == ["markdown", "html"]
        assert sent[0]["onlyMainContent"] is True
        assert sent[0]["waitFor"] == 2000
        assert sent[0]["timeout"] == 30000

    @pytest.mark.asyncio
    async def test_chosen_formats_and_options(self, client, integration_app):
        sent = []
        _override_scraper(
            integration_app, {"success": True, "data": {"html": "<p>x</p>"}}, sent
        )

        response = await client.post(
            "/api/v1/scrape/website",
            json={
                "url": "https://example.com/docs",
                "formats": ["html", "links", "html"],
                "options": {"onlyMainContent": False, "waitFor": 500, "timeout": 10000},
            },
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "Untitled"
        assert data["content"] == "<p>x</p>"
        assert sent[0]["formats"] == ["html", "links"]
        assert sent[0]["onlyMainContent"] is False
        assert sent[0]["waitFor"] == 500
        assert sent[0]["timeout"] == 10000

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"formats": ["pdf"]},
            {"formats": []},
            {"options": {"waitFor": -1}},
            {"options": {"timeout": 600000}},
        ],
    )
    async def test_rejects_unknown_formats_and_out_of_range_options(self, client, firecrawl_requests, body):
        response = await client.post(
            "/api/v1/scrape/website", json={"url": "https://example.com/docs", **body}
        )

        assert response.status_code == 422
        assert firecrawl_requests == []

    @pytest.mark.asyncio
    async def test_blocked_url(self, client, firecrawl_requests):
        response = await client.post("/api/v1/scrape/website", json={"url": "http://127.1/"})

        assert response.status_code == 400
        assert response.json()["detail"]["reason"] == "blocked_network"
        assert firecrawl_requests == []

    @pytest.mark.asyncio
    async def test_shares_scrape_rate_limit(self, client):
        for _ in range(10):
            await client.post("/api/v1/scrape", json={"url": "https://example.com/docs"})

        response = await client.post("/api/v1/scrape/website", json={"url": "https://example.com/docs"})

        assert response.status_code == 429


@pytest.mark.integration
@pytest.mark.api
class TestScrapeScreenshotAPI:
    """Test POST /scrape/screenshot."""

    @pytest.mark.asyncio
    async def test_capture(self, client, firecrawl_requests):
        response = await client.post("/api/v1/scrape/screenshot", json={"url": "https://example.com/docs"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["screenshot"] == "https://cdn.test/shot.png"
        assert data["metadata"]["title"] == "Example Domain"
        sent = json.loads(firecrawl_requests[0].content)
        assert sent["formats"] == ["screenshot"]
        assert sent["onlyMainContent"] is False

    @pytest.mark.asyncio
    async def test_missing_screenshot(self, client, integration_app):
        _override_scraper(integration_app, {"success": True, "data": {"markdown": "# no image"}})

        response = await client.post("/api/v1/scrape/screenshot", json={"url": "https://example.com/docs"})

        assert response.status_code == 502
        assert response.json()["detail"]["error"] == "Screenshot not available in response."

    @pytest.mark.asyncio
    async def test_unsuccessful_capture(self, client, integration_app):
        _override_scraper(integration_app, {"success": False, "error": "blocked by robots"})

        response = await client.post("/api/v1/scrape/screenshot", json={"url": "https://example.com/docs"})

        assert response.status_code == 502
        assert "robots" not in response.text

    @pytest.mark.asyncio
    async def test_metadata_address_rejected(self, client, firecrawl_requests):
        response = await client.post("/api/v1/scrape/screenshot", json={"url": "http://0xa9fea9fe/"})

        assert response.status_code == 400
        assert firecrawl_requests == []
