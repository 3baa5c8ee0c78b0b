"""Sandbox lifecycle manager."""

import asyncio
import logging
import uuid
from typing import Any, Dict

import docker
from docker.errors import DockerException, ImageNotFound

from gateway.core.config import settings
from gateway.core.sandbox.container import SandboxContainer, SandboxError

logger = logging.getLogger(__name__)


def get_security_config() -> Dict[str, Any]:
    """
    Get Docker security configuration for sandbox containers.

    Returns:
        Keyword arguments for ``containers.run``
    """
    return {
        # Disable privileged mode
        "privileged": False,
        # Drop all capabilities
        "cap_drop": ["ALL"],
        # No new privileges
        "security_opt": ["no-new-privileges"],
        # Resource limits
        "mem_limit": settings.sandbox_mem_limit,
        "memswap_limit": settings.sandbox_mem_limit,
        "cpu_quota": settings.sandbox_cpu_quota,
    }


class SandboxManager:
    """Owns the single active sandbox container of this process."""

    def __init__(self, docker_client: docker.DockerClient | None = None):
        """
        Initialize sandbox manager.

        Args:
            docker_client: Docker client (connects from the environment on
                first use if not provided)
        """
        self._docker_client = docker_client
        self._active: SandboxContainer | None = None
        self._lock = asyncio.Lock()

    @property
    def docker_client(self) -> docker.DockerClient:
        if self._docker_client is None:
            try:
                self._docker_client = docker.from_env()
            except DockerException as e:
                raise SandboxError("Sandbox backend is unavailable") from e
        return self._docker_client

    def _ensure_image(self, image_name: str) -> None:
        try:
            self.docker_client.images.get(image_name)
        except ImageNotFound:
            logger.info("Image %s not found, pulling...", image_name)
            self.docker_client.images.pull(image_name)

    async def create_sandbox(self) -> SandboxContainer:
        """
        Create the sandbox, or return the active one if it is still running.

        Returns:
            SandboxContainer instance

        Raises:
            SandboxError: If the container cannot be started
        """
        async with self._lock:
            if self._active is not None:
                if self._active.is_running:
                    return self._active
                # Clean up dead container
                await asyncio.to_thread(self._discard_active)

            workdir = settings.sandbox_root
            name = f"gateway-sandbox-{uuid.uuid4().hex[:12]}"

            def _create():
                self._ensure_image(settings.sandbox_image)
                container = self.docker_client.containers.run(
                    settings.sandbox_image,
                    command=["sleep", "infinity"],
                    detach=True,
                    working_dir=workdir,
                    environment={"SANDBOX_ROOT": workdir},
                    network_mode="bridge",
                    name=name,
                    **get_security_config(),
                )
                return SandboxContainer(container, workdir)

            try:
                self._active = await asyncio.to_thread(_create)
            except DockerException as e:
                raise SandboxError("Failed to create sandbox") from e

            logger.info("Created sandbox %s (%s)", name, self._active.container_id)
            return self._active

    def get_active(self) -> SandboxContainer | None:
        """Get the active sandbox, if any."""
        return self._active

    def _discard_active(self) -> bool:
        sandbox, self._active = self._active, None
        if sandbox is None:
            return False
        sandbox.stop()
        sandbox.remove()
        logger.info("Destroyed sandbox %s", sandbox.container_id)
        return True

    async def destroy_sandbox(self) -> bool:
        """
        Stop and remove the active sandbox.

        Returns:
            True if a sandbox was destroyed
        """
        async with self._lock:
            return await asyncio.to_thread(self._discard_active)

    async def cleanup_all(self):
        """Cleanup on shutdown."""
        await self.destroy_sandbox()


# Global sandbox manager instance
_sandbox_manager: SandboxManager | None = None


def get_sandbox_manager() -> SandboxManager:
    """Get global sandbox manager instance."""
    global _sandbox_manager
    if _sandbox_manager is None:
        _sandbox_manager = SandboxManager()
    return _sandbox_manager
