"""Command validation for sandbox execution."""

import logging
from dataclasses import dataclass
from typing import Any, List, Tuple

from gateway.core.security.patterns import (
    ALLOWED_COMMANDS,
    BLOCKED_COMMAND_PATTERNS,
    MAX_COMMAND_LENGTH,
)
from gateway.core.security.verdict import Accepted, Rejected, RejectionReason, Verdict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedCommand:
    """An allow-listed executable with its arguments, ready for direct exec."""

    executable: str
    arguments: Tuple[str, ...]

    @property
    def argv(self) -> List[str]:
        """Argument vector for direct process invocation."""
        return [self.executable, *self.arguments]


def validate_command(command: Any) -> Verdict[ParsedCommand]:
    """
    Validate a command line against the allow-list and deny-list.

    Rules are applied in order and the first failure wins:
    empty input, length ceiling, blocked patterns anywhere in the string,
    then the executable allow-list.

    Args:
        command: Raw command line from the client

    Returns:
        Accepted(ParsedCommand) or Rejected

    Note: The accepted command must be executed as an argument vector.
    Running it through a shell would reopen everything filtered here.
    """
    if not isinstance(command, str) or not command.strip():
        return Rejected(RejectionReason.EMPTY_INPUT, "Command is required and cannot be empty.")

    trimmed = command.strip()
    if len(trimmed) > MAX_COMMAND_LENGTH:
        return Rejected(
            RejectionReason.TOO_LONG,
            f"Command exceeds maximum length ({MAX_COMMAND_LENGTH} characters).",
        )

    for pattern in BLOCKED_COMMAND_PATTERNS:
        if pattern.search(trimmed):
            logger.info("Command rejected by blocked pattern %s", pattern.pattern)
            return Rejected(
                RejectionReason.BLOCKED_PATTERN,
                f"Command contains blocked pattern: {pattern.pattern}",
                detail=pattern.pattern,
            )

    executable, *arguments = trimmed.split()
    if executable not in ALLOWED_COMMANDS:
        return Rejected(
            RejectionReason.DISALLOWED_COMMAND,
            f"Command '{executable}' is not allowed. "
            f"Allowed: {', '.join(sorted(ALLOWED_COMMANDS))}",
            detail=executable,
        )

    return Accepted(ParsedCommand(executable=executable, arguments=tuple(arguments)))
