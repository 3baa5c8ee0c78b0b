"""Docker container wrapper for sandbox execution."""

import asyncio
import base64
import io
import logging
import mimetypes
import posixpath
import tarfile
from dataclasses import dataclass
from typing import List, Sequence

from docker.errors import DockerException
from docker.models.containers import Container as DockerContainer

logger = logging.getLogger(__name__)


class SandboxError(Exception):
    """Raised when the sandbox backend fails to carry out a request."""


@dataclass
class CommandResult:
    """Outcome of a process run inside the sandbox."""

    exit_code: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class SandboxContainer:
    """Wrapper for a Docker container used as a sandbox."""

    def __init__(self, container: DockerContainer, workdir: str):
        """
        Initialize sandbox container.

        Args:
            container: Docker container instance
            workdir: Default working directory inside the container
        """
        self.container = container
        self.workdir = workdir
        self.container_id = container.id

    @property
    def is_running(self) -> bool:
        """Check if container is running."""
        try:
            self.container.reload()
            return self.container.status == "running"
        except DockerException:
            return False

    async def run(
        self,
        executable: str,
        arguments: Sequence[str] = (),
        workdir: str | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        """
        Run a program with an argument vector.

        The argv goes straight to the container runtime, no shell is
        involved, so arguments are never interpreted.

        Args:
            executable: Program name
            arguments: Program arguments
            workdir: Working directory (defaults to the sandbox root)
            timeout: Seconds to wait for the result

        Returns:
            CommandResult

        Raises:
            SandboxError: If the container runtime fails or times out
        """
        argv = [executable, *arguments]

        def _run():
            exec_result = self.container.exec_run(
                cmd=argv,
                workdir=workdir or self.workdir,
                demux=True,
                stream=False,
            )
            stdout, stderr = exec_result.output or (None, None)
            return CommandResult(
                exit_code=exec_result.exit_code,
                stdout=stdout.decode("utf-8", errors="replace") if stdout else "",
                stderr=stderr.decode("utf-8", errors="replace") if stderr else "",
            )

        try:
            return await asyncio.wait_for(asyncio.to_thread(_run), timeout=timeout)
        except asyncio.TimeoutError:
            raise SandboxError(f"Command timed out after {timeout} seconds")
        except DockerException as e:
            raise SandboxError("Command execution failed") from e

    async def install_packages(
        self, packages: List[str], timeout: float | None = None
    ) -> CommandResult:
        """Install npm packages into the sandbox project."""
        return await self.run("npm", ["install", *packages], timeout=timeout)

    async def write_file(self, container_path: str, content: str) -> None:
        """
        Write content to a file in the container.

        Args:
            container_path: Absolute path inside container
            content: File content

        Raises:
            SandboxError: If the archive upload fails
        """

        def _write():
            tar_stream = io.BytesIO()
            file_data = content.encode("utf-8")
            with tarfile.open(fileobj=tar_stream, mode="w") as tar:
                tarinfo = tarfile.TarInfo(name=posixpath.basename(container_path))
                tarinfo.size = len(file_data)
                tar.addfile(tarinfo, io.BytesIO(file_data))
            tar_stream.seek(0)

            directory = posixpath.dirname(container_path)
            # put_archive needs the target directory to exist
            self.container.exec_run(cmd=["mkdir", "-p", directory])
            if not self.container.put_archive(path=directory, data=tar_stream.getvalue()):
                raise SandboxError("Failed to write file")

        try:
            await asyncio.to_thread(_write)
        except DockerException as e:
            raise SandboxError("Failed to write file") from e

    async def read_file(self, container_path: str) -> str:
        """
        Read a file from the container.

        Args:
            container_path: Absolute path inside container

        Returns:
            File content. Binary files come back as a base64 data URI.

        Raises:
            SandboxError: If the file cannot be read
        """

        def _read():
            bits, _stat = self.container.get_archive(container_path)

            tar_stream = io.BytesIO()
            for chunk in bits:
                tar_stream.write(chunk)
            tar_stream.seek(0)

            with tarfile.open(fileobj=tar_stream) as tar:
                member = tar.next()
                extracted = tar.extractfile(member) if member else None
                if extracted is None:
                    raise SandboxError("Not a regular file")
                raw_bytes = extracted.read()

            try:
                return raw_bytes.decode("utf-8")
            except UnicodeDecodeError:
                mime_type, _ = mimetypes.guess_type(container_path)
                b64_data = base64.b64encode(raw_bytes).decode("ascii")
                return f"data:{mime_type or 'application/octet-stream'};base64,{b64_data}"

        try:
            return await asyncio.to_thread(_read)
        except (DockerException, tarfile.TarError) as e:
            raise SandboxError("Failed to read file") from e

    def stop(self):
        """Stop the container."""
        try:
            self.container.stop(timeout=5)
        except DockerException as e:
            logger.warning("Error stopping container %s: %s", self.container_id, e)

    def remove(self):
        """Remove the container."""
        try:
            self.container.remove(force=True)
        except DockerException as e:
            logger.warning("Error removing container %s: %s", self.container_id, e)
