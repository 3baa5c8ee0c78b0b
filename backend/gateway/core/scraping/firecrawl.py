"""Firecrawl scraping client."""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

import httpx

from gateway.core.config import settings

logger = logging.getLogger(__name__)

_QUOTE_REPLACEMENTS = [
    (re.compile(r"[\u2018\u2019\u201A\u201B]"), "'"),
    (re.compile(r"[\u201C\u201D\u201E\u201F]"), '"'),
    (re.compile(r"[\u00AB\u00BB]"), '"'),
    (re.compile(r"[\u2039\u203A]"), "'"),
    (re.compile(r"[\u2013\u2014]"), "-"),
    (re.compile(r"\u2026"), "..."),
    (re.compile(r"\u00A0"), " "),
]


class ScrapeError(Exception):
    """Raised when the scraping service cannot deliver a page."""


def sanitize_quotes(text: str) -> str:
    """Replace smart quotes, dashes, ellipses and non-breaking spaces with ASCII."""
    for pattern, replacement in _QUOTE_REPLACEMENTS:
        text = pattern.sub(replacement, text)
    return text


@dataclass(frozen=True)
class ScrapeOptions:
    """Firecrawl scrape parameters."""

    formats: Tuple[str, ...] = ("markdown", "html")
    only_main_content: bool = True
    wait_for: int = 2000
    timeout_ms: int = 30000
    actions: Tuple[Dict[str, Any], ...] = ()
    block_ads: bool = False
    max_age: int | None = None

    def to_payload(self, url: httpx.URL) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "url": str(url),
            "formats": list(self.formats),
            "onlyMainContent": self.only_main_content,
            "waitFor": self.wait_for,
            "timeout": self.timeout_ms,
        }
        if self.actions:
            payload["actions"] = [dict(action) for action in self.actions]
        if self.block_ads:
            payload["blockAds"] = True
        if self.max_age is not None:
            payload["maxAge"] = self.max_age
        return payload


# Full-page capture used to feed the code generator
ENHANCED_OPTIONS = ScrapeOptions(
    formats=("markdown", "html", "screenshot"),
    wait_for=3000,
    actions=(
        {"type": "wait", "milliseconds": 2000},
        {"type": "screenshot", "fullPage": False},
    ),
    block_ads=True,
    max_age=3600000,
)

SCREENSHOT_OPTIONS = ScrapeOptions(
    formats=("screenshot",),
    only_main_content=False,
    wait_for=3000,
    actions=({"type": "wait", "milliseconds": 2000},),
)


@dataclass
class ScrapeResult:
    """Scraped page content."""

    markdown: str = ""
    html: str = ""
    title: str = ""
    description: str = ""
    screenshot: str | None = None
    cached: bool = False
    links: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _parse_result(data: Dict[str, Any]) -> ScrapeResult:
    """Build a result from the ``data`` object, ignoring fields of the wrong type."""
    metadata = _mapping(data.get("metadata"))
    screenshots = _mapping(data.get("actions")).get("screenshots")
    if not isinstance(screenshots, list):
        screenshots = []
    screenshot = _text(data.get("screenshot")) or next(
        (shot for shot in screenshots if isinstance(shot, str) and shot), None
    )
    links = data.get("links")

    return ScrapeResult(
        markdown=_text(data.get("markdown")),
        html=_text(data.get("html")),
        title=_text(metadata.get("title")),
        description=_text(metadata.get("description")),
        screenshot=screenshot or None,
        cached=bool(data.get("cached", False)),
        links=[link for link in links if isinstance(link, str)] if isinstance(links, list) else [],
        metadata=metadata,
    )


def format_scraped_content(result: ScrapeResult, url: str) -> str:
    """Build the plain-text block handed to the code generator."""
    return (
        f"Title: {sanitize_quotes(result.title)}\n"
        f"Description: {sanitize_quotes(result.description)}\n"
        f"URL: {url}\n"
        f"\n"
        f"Main Content:\n"
        f"{sanitize_quotes(result.markdown)}"
    ).strip()


class FirecrawlClient:
    """Thin async client for the Firecrawl scrape endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize Firecrawl client.

        Args:
            api_key: Firecrawl API key (defaults to settings)
            api_url: Scrape endpoint URL (defaults to settings)
            timeout: Request timeout in seconds
            transport: Custom httpx transport (used by tests)
        """
        self.api_key = api_key if api_key is not None else settings.firecrawl_api_key
        self.api_url = api_url or settings.firecrawl_api_url
        self.timeout = timeout or settings.scrape_timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def scrape(self, url: httpx.URL, options: ScrapeOptions = ENHANCED_OPTIONS) -> ScrapeResult:
        """
        Scrape a page through Firecrawl.

        Args:
            url: Already validated target URL
            options: Formats, waits and actions to request

        Returns:
            ScrapeResult

        Raises:
            ScrapeError: If the service is unconfigured, unreachable, or
                reports a failure
        """
        if not self.is_configured:
            raise ScrapeError("Scraping service is not configured.")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.api_url,
                    json=options.to_payload(url),
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.HTTPError as e:
            logger.warning("Firecrawl request failed: %s", e)
            raise ScrapeError("Failed to reach the scraping service.") from e

        if response.is_error:
            logger.warning("Firecrawl API error %s: %s", response.status_code, response.text[:500])
            raise ScrapeError("Failed to scrape the requested URL.")

        try:
            body = response.json()
        except ValueError as e:
            raise ScrapeError("Scraping service returned an invalid response.") from e

        if not isinstance(body, dict) or not body.get("success"):
            raise ScrapeError("Failed to scrape content.")
        data = body.get("data")
        if not isinstance(data, dict):
            raise ScrapeError("Failed to scrape content.")

        return _parse_result(data)


# Global Firecrawl client instance
_firecrawl_client: FirecrawlClient | None = None


def get_firecrawl_client() -> FirecrawlClient:
    """Get global Firecrawl client instance."""
    global _firecrawl_client
    if _firecrawl_client is None:
        _firecrawl_client = FirecrawlClient()
    return _firecrawl_client
