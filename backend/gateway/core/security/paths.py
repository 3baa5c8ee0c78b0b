"""Sandbox path validation."""

# Use posixpath for sandbox paths, os.path would use host separators on Windows
import posixpath
from typing import Any, Sequence

from gateway.core.config import settings
from gateway.core.security.verdict import Accepted, Rejected, RejectionReason, Verdict


def validate_sandbox_path(
    path: Any, allowed_roots: Sequence[str] | None = None
) -> Verdict[str]:
    """
    Validate a file path and anchor it inside the sandbox.

    Args:
        path: Client supplied path, absolute or relative to the first root
        allowed_roots: Allowed root prefixes (defaults to the configured
            sandbox roots, primary first)

    Returns:
        Accepted(absolute path) or Rejected

    Note: This is a lexical prefix check. Symlinks are not resolved, callers
    needing that must resolve the real path and check the prefix again.
    """
    roots = list(allowed_roots or settings.sandbox_roots)

    if not isinstance(path, str) or not path:
        return Rejected(RejectionReason.EMPTY_INPUT, "Path is required.")

    if ".." in path:
        return Rejected(RejectionReason.OUTSIDE_SANDBOX, "Path traversal is not allowed.")

    if "\0" in path:
        return Rejected(RejectionReason.OUTSIDE_SANDBOX, "Null bytes are not allowed in paths.")

    full_path = path if path.startswith("/") else posixpath.join(roots[0], path)

    if not any(full_path.startswith(root) for root in roots):
        return Rejected(
            RejectionReason.OUTSIDE_SANDBOX,
            f"Path must be within {' or '.join(roots)}.",
            detail=full_path,
        )

    return Accepted(full_path)
