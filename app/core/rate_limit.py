"""
Simple in-memory rate limiter for the auth endpoints.

Windows are kept per (scope, client IP) so login attempts do not consume the
signup budget. State is per process.
"""
import logging
import time
from collections import defaultdict
from typing import Dict, List, Tuple
from fastapi import Request, HTTPException, status

logger = logging.getLogger(__name__)

# {(scope, ip): [timestamps]}
rate_limit_store: Dict[Tuple[str, str], List[float]] = defaultdict(list)


def get_client_ip(request: Request) -> str:
    """Extract client IP address from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # First IP in the proxy chain
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


def check_rate_limit(
    request: Request,
    scope: str = "default",
    max_requests: int = 10,
    window_seconds: int = 60,
) -> None:
    """
    Record a request and reject it once the window is full.

    Raises:
        HTTPException: 429 if rate limit exceeded
    """
    key = (scope, get_client_ip(request))
    now = time.time()
    cutoff = now - window_seconds

    window = [ts for ts in rate_limit_store[key] if ts > cutoff]
    if len(window) >= max_requests:
        rate_limit_store[key] = window
        logger.warning(f"Rate limit exceeded: scope={scope}, ip={key[1]}, requests={len(window)}/{window_seconds}s")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Rate limit exceeded. Maximum {max_requests} requests per {window_seconds} seconds.",
        )

    window.append(now)
    rate_limit_store[key] = window


def reset_rate_limits() -> None:
    rate_limit_store.clear()
