"""Web scraping API routes."""

import logging
from datetime import datetime, timezone
from typing import Any

import httpx
from fastapi import APIRouter, Depends, HTTPException, status

from gateway.api.deps import RateLimitGuard, raise_for_rejection
from gateway.core.scraping import (
    ENHANCED_OPTIONS,
    SCREENSHOT_OPTIONS,
    FirecrawlClient,
    ScrapeError,
    ScrapeOptions,
    ScrapeResult,
    format_scraped_content,
    get_firecrawl_client,
    sanitize_quotes,
)
from gateway.core.security import to_safe_error, validate_url
from gateway.models.schemas import (
    ScrapeRequest,
    ScrapeResponse,
    ScrapeStructured,
    ScreenshotResponse,
    WebsiteScrapeData,
    WebsiteScrapeRequest,
    WebsiteScrapeResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scrape", tags=["scrape"])


def _scrape_target(raw_url: Any, scraper: FirecrawlClient) -> httpx.URL:
    """Validate the URL and make sure there is a service to send it to."""
    verdict = validate_url(raw_url)
    if not verdict.ok:
        raise_for_rejection(verdict)

    if not scraper.is_configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "Scraping service is not configured."},
        )
    return verdict.value


async def _scrape(
    scraper: FirecrawlClient, url: httpx.URL, options: ScrapeOptions, context: str
) -> ScrapeResult:
    logger.info("[%s] Scraping %s", context, url)
    try:
        return await scraper.scrape(url, options)
    except ScrapeError as e:
        logger.warning("[%s] Failed to scrape %s: %s", context, url, e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=to_safe_error(e, context),
        )


@router.post(
    "",
    response_model=ScrapeResponse,
    dependencies=[Depends(RateLimitGuard("scrape"))],
)
async def scrape_url(
    request: ScrapeRequest,
    scraper: FirecrawlClient = Depends(get_firecrawl_client),
):
    """Scrape a public web page into a prompt-ready text block."""
    url = _scrape_target(request.url, scraper)
    result = await _scrape(scraper, url, ENHANCED_OPTIONS, "scrape")

    url_text = str(url)
    content = format_scraped_content(result, url_text)
    markdown = sanitize_quotes(result.markdown)

    return ScrapeResponse(
        url=url_text,
        content=content,
        screenshot=result.screenshot,
        structured=ScrapeStructured(
            title=sanitize_quotes(result.title),
            description=sanitize_quotes(result.description),
            content=markdown,
            url=url_text,
            screenshot=result.screenshot,
        ),
        metadata={
            **result.metadata,
            "scraper": "firecrawl-enhanced",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "contentLength": len(content),
            "cached": result.cached,
        },
    )


@router.post(
    "/website",
    response_model=WebsiteScrapeResponse,
    dependencies=[Depends(RateLimitGuard("scrape"))],
)
async def scrape_website(
    request: WebsiteScrapeRequest,
    scraper: FirecrawlClient = Depends(get_firecrawl_client),
):
    """Scrape a public web page in the requested formats."""
    url = _scrape_target(request.url, scraper)
    options = ScrapeOptions(
        formats=tuple(dict.fromkeys(request.formats)),
        only_main_content=request.options.only_main_content,
        wait_for=request.options.wait_for,
        timeout_ms=request.options.timeout,
    )
    result = await _scrape(scraper, url, options, "scrape-website")

    return WebsiteScrapeResponse(
        data=WebsiteScrapeData(
            title=result.title or "Untitled",
            content=result.markdown or result.html,
            description=result.description,
            markdown=result.markdown,
            html=result.html,
            metadata=result.metadata,
            screenshot=result.screenshot,
            links=result.links,
        )
    )


@router.post(
    "/screenshot",
    response_model=ScreenshotResponse,
    dependencies=[Depends(RateLimitGuard("scrape"))],
)
async def scrape_screenshot(
    request: ScrapeRequest,
    scraper: FirecrawlClient = Depends(get_firecrawl_client),
):
    """Capture a screenshot of a public web page."""
    url = _scrape_target(request.url, scraper)
    result = await _scrape(scraper, url, SCREENSHOT_OPTIONS, "scrape-screenshot")

    if not result.screenshot:
        logger.warning("[scrape-screenshot] No screenshot in response for %s", url)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "Screenshot not available in response.", "context": "scrape-screenshot"},
        )

    return ScreenshotResponse(screenshot=result.screenshot, metadata=result.metadata)
