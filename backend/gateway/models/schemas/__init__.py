"""Pydantic schemas for API validation."""

from gateway.models.schemas.sandbox import (
    SandboxResponse,
    CommandRequest,
    CommandResponse,
    PackageInstallRequest,
    PackageInstallResponse,
    FileWriteRequest,
    FileResponse,
)
from gateway.models.schemas.scrape import (
    ScrapeRequest,
    ScrapeStructured,
    ScrapeResponse,
    ScreenshotResponse,
    WebsiteScrapeData,
    WebsiteScrapeOptions,
    WebsiteScrapeRequest,
    WebsiteScrapeResponse,
)

__all__ = [
    "SandboxResponse",
    "CommandRequest",
    "CommandResponse",
    "PackageInstallRequest",
    "PackageInstallResponse",
    "FileWriteRequest",
    "FileResponse",
    "ScrapeRequest",
    "ScrapeStructured",
    "ScrapeResponse",
    "ScreenshotResponse",
    "WebsiteScrapeData",
    "WebsiteScrapeOptions",
    "WebsiteScrapeRequest",
    "WebsiteScrapeResponse",
]
