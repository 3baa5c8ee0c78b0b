"""Request sanitization and abuse-prevention layer."""

from gateway.core.security.verdict import Accepted, Rejected, RejectionReason, Verdict
from gateway.core.security.commands import ParsedCommand, validate_command
from gateway.core.security.urls import validate_url, is_blocked_host
from gateway.core.security.paths import validate_sandbox_path
from gateway.core.security.packages import (
    PackageList,
    validate_package_name,
    sanitize_package_list,
)
from gateway.core.security.rate_limit import (
    RateLimiter,
    RateLimitDecision,
    get_rate_limiter,
)
from gateway.core.security.errors import to_safe_error

__all__ = [
    "Accepted",
    "Rejected",
    "RejectionReason",
    "Verdict",
    "ParsedCommand",
    "validate_command",
    "validate_url",
    "is_blocked_host",
    "validate_sandbox_path",
    "PackageList",
    "validate_package_name",
    "sanitize_package_list",
    "RateLimiter",
    "RateLimitDecision",
    "get_rate_limiter",
    "to_safe_error",
]
