"""
Pytest configuration and fixtures for the sandbox gateway test suite.
"""

import io
import os
import tarfile
from unittest.mock import MagicMock

import pytest

# Set test environment variables before importing app modules
os.environ.pop("FIRECRAWL_API_KEY", None)


from gateway.core.sandbox.container import SandboxContainer
from gateway.core.security.rate_limit import RateLimiter


# ============================================================================
# Clock Fixtures
# ============================================================================


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock starting at a fixed time."""
    return FakeClock()


@pytest.fixture
def rate_limiter(clock: FakeClock) -> RateLimiter:
    """Create a rate limiter driven by the fake clock."""
    return RateLimiter(clock=clock, sweep_interval=300, stale_after_ms=300_000)


# ============================================================================
# Mock Fixtures
# ============================================================================


def make_tar(name: str, data: bytes) -> bytes:
    """Build a single-file tar archive like docker's get_archive returns."""
    stream = io.BytesIO()
    with tarfile.open(fileobj=stream, mode="w") as tar:
        info = tarfile.TarInfo(name=name)
        info.size = len(data)
        tar.addfile(info, io.BytesIO(data))
    return stream.getvalue()


@pytest.fixture
def mock_docker_container():
    """Create a mock Docker container."""
    container = MagicMock()
    container.id = "test_container_id_12345"
    container.status = "running"
    container.reload = MagicMock()
    container.exec_run = MagicMock(
        return_value=MagicMock(exit_code=0, output=(b"stdout output", b"stderr output"))
    )
    container.stop = MagicMock()
    container.remove = MagicMock()
    container.put_archive = MagicMock(return_value=True)
    container.get_archive = MagicMock(
        return_value=([make_tar("App.tsx", b"export default App;")], {"name": "App.tsx"})
    )
    return container


@pytest.fixture
def mock_sandbox_container(mock_docker_container):
    """Create a SandboxContainer around the mock Docker container."""
    return SandboxContainer(container=mock_docker_container, workdir="/home/user/app")
