"""Scraping module."""

from gateway.core.scraping.firecrawl import (
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

__all__ = [
    "ENHANCED_OPTIONS",
    "SCREENSHOT_OPTIONS",
    "FirecrawlClient",
    "ScrapeError",
    "ScrapeOptions",
    "ScrapeResult",
    "format_scraped_content",
    "get_firecrawl_client",
    "sanitize_quotes",
]
