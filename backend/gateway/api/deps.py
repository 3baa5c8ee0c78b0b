"""Shared route dependencies: client identification and request guards."""

import logging
from typing import NoReturn

from fastapi import Depends, HTTPException, Request, status

from gateway.core.config import settings
from gateway.core.security import (
    RateLimitDecision,
    RateLimiter,
    Rejected,
    RejectionReason,
    get_rate_limiter,
)

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


def get_client_id(request: Request) -> str:
    """
    Identify the client for rate limiting.

    Uses the left-most ``X-Forwarded-For`` entry, then ``X-Real-IP``. All
    clients without either header share the "unknown" key.
    """
    forwarded = request.headers.get("x-forwarded-for", "").split(",")[0].strip()
    return forwarded or request.headers.get("x-real-ip") or UNKNOWN_CLIENT


class RateLimitGuard:
    """Dependency that admits or rejects a request for one operation class."""

    def __init__(self, operation: str):
        self.operation = operation

    def __call__(
        self,
        request: Request,
        limiter: RateLimiter = Depends(get_rate_limiter),
    ) -> RateLimitDecision:
        key = f"{self.operation}:{get_client_id(request)}"
        decision = limiter.check(
            key,
            settings.rate_limit_for(self.operation),
            settings.rate_limit_window_ms,
        )
        if not decision.allowed:
            logger.warning("Rate limit exceeded for %s", key)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail={
                    "error": "Rate limit exceeded. Try again later.",
                    "reason": RejectionReason.RATE_LIMITED.value,
                },
                headers={"Retry-After": str(decision.retry_after)},
            )
        return decision


def raise_for_rejection(verdict: Rejected) -> NoReturn:
    """Turn a validator rejection into a 400 response."""
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": verdict.message, "reason": verdict.reason.value},
    )
