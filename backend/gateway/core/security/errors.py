"""Client-safe error payloads."""

from typing import Dict

GENERIC_ERROR_MESSAGE = "An unexpected error occurred."


def to_safe_error(caught: object, context: str) -> Dict[str, str]:
    """
    Convert a caught error into a response body that leaks no internals.

    Only the exception message crosses the boundary, never the traceback,
    repr or attached SDK objects.

    Args:
        caught: Whatever was caught
        context: Short name of the operation that failed

    Returns:
        Dict with ``error`` and ``context`` keys
    """
    message = str(caught).strip() if isinstance(caught, BaseException) else ""
    return {
        "error": message or GENERIC_ERROR_MESSAGE,
        "context": context,
    }
