"""Sandbox module."""

from gateway.core.sandbox.container import CommandResult, SandboxContainer, SandboxError
from gateway.core.sandbox.manager import SandboxManager, get_sandbox_manager

__all__ = [
    "CommandResult",
    "SandboxContainer",
    "SandboxError",
    "SandboxManager",
    "get_sandbox_manager",
]
