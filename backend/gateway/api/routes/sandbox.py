"""Sandbox API routes."""

import logging

from docker.errors import DockerException
from fastapi import APIRouter, Depends, HTTPException, status

from gateway.api.deps import RateLimitGuard, raise_for_rejection
from gateway.core.config import settings
from gateway.core.sandbox import SandboxContainer, SandboxError, SandboxManager, get_sandbox_manager
from gateway.core.security import (
    RejectionReason,
    sanitize_package_list,
    to_safe_error,
    validate_command,
    validate_sandbox_path,
)
from gateway.models.schemas import (
    CommandRequest,
    CommandResponse,
    FileResponse,
    FileWriteRequest,
    PackageInstallRequest,
    PackageInstallResponse,
    SandboxResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sandbox", tags=["sandbox"])

SANDBOX_ERRORS = (SandboxError, DockerException)


def _require_sandbox(manager: SandboxManager) -> SandboxContainer:
    sandbox = manager.get_active()
    if sandbox is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "No active sandbox"},
        )
    return sandbox


def _sandbox_failure(error: Exception, context: str) -> HTTPException:
    logger.exception("[%s] Sandbox operation failed", context)
    # SandboxError messages are written for clients, raw SDK errors are not
    safe = error if isinstance(error, SandboxError) else None
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=to_safe_error(safe, context),
    )


@router.get("", response_model=SandboxResponse)
async def get_sandbox(manager: SandboxManager = Depends(get_sandbox_manager)):
    """Get the active sandbox."""
    sandbox = manager.get_active()
    if sandbox is None:
        return SandboxResponse(active=False)
    return SandboxResponse(active=True, sandbox_id=sandbox.container_id, workdir=sandbox.workdir)


@router.post(
    "",
    response_model=SandboxResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(RateLimitGuard("sandbox"))],
)
async def create_sandbox(manager: SandboxManager = Depends(get_sandbox_manager)):
    """Create the sandbox (or return the running one)."""
    try:
        sandbox = await manager.create_sandbox()
    except SANDBOX_ERRORS as e:
        raise _sandbox_failure(e, "create-sandbox")

    return SandboxResponse(active=True, sandbox_id=sandbox.container_id, workdir=sandbox.workdir)


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(RateLimitGuard("sandbox"))],
)
async def destroy_sandbox(manager: SandboxManager = Depends(get_sandbox_manager)):
    """Destroy the active sandbox."""
    try:
        await manager.destroy_sandbox()
    except SANDBOX_ERRORS as e:
        raise _sandbox_failure(e, "destroy-sandbox")


@router.post(
    "/commands",
    response_model=CommandResponse,
    dependencies=[Depends(RateLimitGuard("command"))],
)
async def run_command(
    request: CommandRequest,
    manager: SandboxManager = Depends(get_sandbox_manager),
):
    """Run an allow-listed command in the sandbox."""
    verdict = validate_command(request.command)
    if not verdict.ok:
        raise_for_rejection(verdict)

    sandbox = _require_sandbox(manager)
    parsed = verdict.value
    logger.info("[run-command] Executing: %s", " ".join(parsed.argv))

    try:
        result = await sandbox.run(
            parsed.executable, parsed.arguments, timeout=settings.command_timeout
        )
    except SANDBOX_ERRORS as e:
        raise _sandbox_failure(e, "run-command")

    return CommandResponse(
        success=result.success,
        output=result.stdout,
        error=result.stderr,
        exit_code=result.exit_code,
        message="Command executed successfully" if result.success else "Command failed",
    )


@router.post(
    "/packages",
    response_model=PackageInstallResponse,
    dependencies=[Depends(RateLimitGuard("install"))],
)
async def install_packages(
    request: PackageInstallRequest,
    manager: SandboxManager = Depends(get_sandbox_manager),
):
    """Install the valid subset of the requested packages."""
    if not isinstance(request.packages, list) or not request.packages:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Packages array is required"},
        )

    packages = sanitize_package_list(request.packages)
    if packages.invalid:
        logger.warning("[install-packages] Rejected invalid package names: %s", packages.invalid)

    if not packages.valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "No valid package names provided",
                "reason": RejectionReason.INVALID_GRAMMAR.value,
                "rejected": packages.invalid,
            },
        )

    sandbox = _require_sandbox(manager)
    logger.info("[install-packages] Installing: %s", ", ".join(packages.valid))

    try:
        result = await sandbox.install_packages(packages.valid, timeout=settings.command_timeout)
    except SANDBOX_ERRORS as e:
        raise _sandbox_failure(e, "install-packages")

    return PackageInstallResponse(
        success=result.success,
        installed=packages.valid if result.success else [],
        rejected=packages.invalid,
        output=result.stdout,
        error=result.stderr,
        message="Packages installed successfully" if result.success else "Package installation failed",
    )


@router.get("/files", response_model=FileResponse)
async def read_file(
    path: str,
    manager: SandboxManager = Depends(get_sandbox_manager),
):
    """Read a file inside the sandbox."""
    verdict = validate_sandbox_path(path)
    if not verdict.ok:
        raise_for_rejection(verdict)

    sandbox = _require_sandbox(manager)
    try:
        content = await sandbox.read_file(verdict.value)
    except SANDBOX_ERRORS as e:
        raise _sandbox_failure(e, "read-file")

    return FileResponse(path=verdict.value, content=content)


@router.put(
    "/files",
    response_model=FileResponse,
    dependencies=[Depends(RateLimitGuard("files"))],
)
async def write_file(
    request: FileWriteRequest,
    manager: SandboxManager = Depends(get_sandbox_manager),
):
    """Write a file inside the sandbox."""
    verdict = validate_sandbox_path(request.path)
    if not verdict.ok:
        raise_for_rejection(verdict)

    sandbox = _require_sandbox(manager)
    try:
        await sandbox.write_file(verdict.value, request.content)
    except SANDBOX_ERRORS as e:
        raise _sandbox_failure(e, "write-file")

    return FileResponse(path=verdict.value)
