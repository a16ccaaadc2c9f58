"""Rate limiting dependency for the analysis endpoints."""

import logging
from typing import Annotated

from fastapi import Depends, Request

from proposal_analyzer.core.errors import RateLimitExceededError
from proposal_analyzer.services import SlidingWindowRateLimiter

from .clients import get_rate_limiter

logger = logging.getLogger(__name__)


def client_address(request: Request) -> str:
    """Key requests by the peer address of the connection."""
    if request.client is None:
        return "unknown"
    return request.client.host


async def enforce_rate_limit(
    request: Request,
    limiter: Annotated[SlidingWindowRateLimiter, Depends(get_rate_limiter)],
) -> None:
    """Reject the request once its client address exceeds the rolling cap."""
    address = client_address(request)
    decision = limiter.hit(address)
    if not decision.allowed:
        logger.warning(
            "Rate limit exceeded for %s on %s; retry in %ds.",
            address,
            request.url.path,
            decision.retry_after_seconds,
        )
        raise RateLimitExceededError(retry_after_seconds=decision.retry_after_seconds)


__all__ = ["client_address", "enforce_rate_limit"]
