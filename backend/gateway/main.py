"""Main FastAPI application."""

import logging
import time
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gateway import __version__
from gateway.core.config import settings
from gateway.core.logging import setup_logging
from gateway.core.sandbox import SandboxManager, get_sandbox_manager
from gateway.core.scraping import FirecrawlClient, get_firecrawl_client
from gateway.core.security import RateLimiter, get_rate_limiter, to_safe_error
from gateway.api.routes import sandbox, scrape

logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging(settings.log_level)
    rate_limiter = get_rate_limiter()
    await rate_limiter.start()
    logger.info("Rate limiter sweep started (every %ss)", rate_limiter.sweep_interval)

    yield

    # Shutdown
    await rate_limiter.stop()
    logger.info("Rate limiter sweep stopped")

    await get_sandbox_manager().cleanup_all()
    logger.info("Application shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Sandbox Gateway Backend",
    description="Sandboxed command execution and web scraping API",
    version=__version__,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(sandbox.router, prefix="/api/v1")
app.include_router(scrape.router, prefix="/api/v1")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Never let a stack trace reach the client."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    # exception text may hold library internals
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": to_safe_error(None, request.url.path)},
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Sandbox Gateway Backend",
        "version": __version__,
        "status": "running",
    }


@app.get("/health")
async def health(
    scraper: FirecrawlClient = Depends(get_firecrawl_client),
    manager: SandboxManager = Depends(get_sandbox_manager),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
):
    """Health check endpoint."""
    scraping_configured = scraper.is_configured
    status_text = "healthy" if scraping_configured else "degraded"

    return JSONResponse(
        status_code=status.HTTP_200_OK if scraping_configured else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": status_text,
            "version": __version__,
            "uptime": int(time.monotonic() - STARTED_AT),
            "sandbox": {
                "image": settings.sandbox_image,
                "active": manager.get_active() is not None,
            },
            "services": {
                "scraping": {"configured": scraping_configured},
            },
            "rate_limiter": {
                "tracked_keys": len(rate_limiter.snapshot()),
                "sweeping": rate_limiter.is_running,
            },
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "gateway.main:app",
        host=settings.host,
        port=settings.port,
    )
