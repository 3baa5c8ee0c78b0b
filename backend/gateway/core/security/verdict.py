"""Validation verdicts returned by the security validators."""

import enum
from dataclasses import dataclass
from typing import ClassVar, Generic, TypeVar, Union

T = TypeVar("T")


class RejectionReason(str, enum.Enum):
    """Why a validator refused its input."""

    EMPTY_INPUT = "empty_input"
    TOO_LONG = "too_long"
    BLOCKED_PATTERN = "blocked_pattern"
    DISALLOWED_COMMAND = "disallowed_command"
    INVALID_FORMAT = "invalid_format"
    INVALID_PROTOCOL = "invalid_protocol"
    BLOCKED_NETWORK = "blocked_network"
    OUTSIDE_SANDBOX = "outside_sandbox"
    INVALID_GRAMMAR = "invalid_grammar"
    RATE_LIMITED = "rate_limited"


@dataclass(frozen=True)
class Accepted(Generic[T]):
    """Input passed validation; ``value`` is the normalized payload."""

    value: T
    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class Rejected:
    """Input failed validation.

    ``message`` is safe to show to the client since it only describes the
    client's own input. ``detail`` carries the offending token or pattern.
    """

    reason: RejectionReason
    message: str
    detail: str | None = None
    ok: ClassVar[bool] = False


Verdict = Union[Accepted[T], Rejected]
