"""Sandbox schemas for API validation."""

from typing import Any, List, Optional
from pydantic import BaseModel, Field


class SandboxResponse(BaseModel):
    """Schema for sandbox status response."""
    active: bool
    sandbox_id: Optional[str] = None
    workdir: Optional[str] = None


class CommandRequest(BaseModel):
    """Schema for running a command in the sandbox.

    Left untyped so non-string input reaches the command validator.
    """
    command: Any = None


class CommandResponse(BaseModel):
    """Schema for command execution response."""
    success: bool
    output: str = ""
    error: str = ""
    exit_code: int
    message: str


class PackageInstallRequest(BaseModel):
    """Schema for installing packages in the sandbox."""
    packages: Any = None


class PackageInstallResponse(BaseModel):
    """Schema for package installation response."""
    success: bool
    installed: List[str] = Field(default_factory=list)
    rejected: List[str] = Field(default_factory=list)
    output: str = ""
    error: str = ""
    message: str


class FileWriteRequest(BaseModel):
    """Schema for writing a file in the sandbox."""
    path: Any = None
    content: str = Field(..., max_length=1_000_000)


class FileResponse(BaseModel):
    """Schema for file read/write response."""
    path: str
    content: Optional[str] = None
