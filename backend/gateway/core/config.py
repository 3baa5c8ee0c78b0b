"""Application configuration."""

from typing import Dict, List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: str = "http://localhost:3000,http://localhost:5173"
    log_level: str = "INFO"

    # Sandbox
    sandbox_root: str = "/home/user/app"
    sandbox_alt_root: str = "/vercel/sandbox"  # Root used by the alternate sandbox backend
    sandbox_image: str = "node:20-slim"
    sandbox_mem_limit: str = "1g"
    sandbox_cpu_quota: int = 50000  # 50% of one CPU
    command_timeout: int = 60

    # Scraping (Firecrawl)
    firecrawl_api_key: str | None = None
    firecrawl_api_url: str = "https://api.firecrawl.dev/v1/scrape"
    scrape_timeout: float = 60.0

    # Rate limiting (requests per window, per client)
    rate_limit_window_ms: int = 60_000
    rate_limit_command: int = 20
    rate_limit_scrape: int = 10
    rate_limit_install: int = 5
    rate_limit_files: int = 30
    rate_limit_sandbox: int = 5
    rate_limit_sweep_interval: float = 300.0  # seconds
    rate_limit_stale_after_ms: int = 300_000

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins as list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def sandbox_roots(self) -> List[str]:
        """Allowed sandbox roots, primary first."""
        return [self.sandbox_root, self.sandbox_alt_root]

    @property
    def rate_limits(self) -> Dict[str, int]:
        """Per-operation request limits."""
        return {
            "command": self.rate_limit_command,
            "scrape": self.rate_limit_scrape,
            "install": self.rate_limit_install,
            "files": self.rate_limit_files,
            "sandbox": self.rate_limit_sandbox,
        }

    def rate_limit_for(self, operation: str) -> int:
        """Get the request limit for an operation class."""
        try:
            return self.rate_limits[operation]
        except KeyError:
            raise ValueError(f"Unknown rate limit operation: {operation}")


# Global settings instance
settings = Settings()
