"""Scrape schemas for API validation."""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

ScrapeFormat = Literal["markdown", "html", "rawHtml", "links", "screenshot", "screenshot@fullPage"]


class ScrapeRequest(BaseModel):
    """Schema for scraping a URL."""
    url: Any = None


class ScrapeStructured(BaseModel):
    """Structured fields of a scraped page."""
    title: str
    description: str
    content: str
    url: str
    screenshot: Optional[str] = None


class ScrapeResponse(BaseModel):
    """Schema for scrape response."""
    success: bool = True
    url: str
    content: str
    screenshot: Optional[str] = None
    structured: ScrapeStructured
    metadata: Dict[str, Any] = Field(default_factory=dict)


class WebsiteScrapeOptions(BaseModel):
    """Client tunable Firecrawl options."""
    model_config = ConfigDict(populate_by_name=True)

    only_main_content: bool = Field(True, alias="onlyMainContent")
    wait_for: int = Field(2000, alias="waitFor", ge=0, le=30000)
    timeout: int = Field(30000, ge=1000, le=60000)


class WebsiteScrapeRequest(BaseModel):
    """Schema for scraping a URL with chosen output formats."""
    url: Any = None
    formats: List[ScrapeFormat] = Field(default_factory=lambda: ["markdown", "html"], min_length=1)
    options: WebsiteScrapeOptions = Field(default_factory=WebsiteScrapeOptions)


class WebsiteScrapeData(BaseModel):
    """Content returned for a website scrape."""
    title: str
    content: str
    description: str = ""
    markdown: str = ""
    html: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)
    screenshot: Optional[str] = None
    links: List[str] = Field(default_factory=list)


class WebsiteScrapeResponse(BaseModel):
    """Schema for website scrape response."""
    success: bool = True
    data: WebsiteScrapeData


class ScreenshotResponse(BaseModel):
    """Schema for screenshot capture response."""
    success: bool = True
    screenshot: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
