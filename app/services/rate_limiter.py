"""
Gateway Rate Limiter — In-memory sliding window.

Keyed by authenticated user (JWT ``sub``) or client IP. Free tier quota:
``rate_limit_max_free`` requests per ``rate_limit_window_min`` minutes.
Resets on deploy/crash; single-process only.
"""

from __future__ import annotations

import logging
import math
import time
from collections import defaultdict

from fastapi import Depends, Request

from app.config import settings
from app.errors import RateLimitExceeded
from app.services.auth import auth_optional

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests, please upgrade to Pro or try again later."


class SlidingWindowRateLimiter:
    """Sliding window rate limiter for generation endpoints."""

    def __init__(self) -> None:
        # key -> list of request timestamps
        self._windows: dict[str, list[float]] = defaultdict(list)
        self._last_sweep = 0.0

    def check(self, key: str, limit: int, window_seconds: float) -> bool:
        """Check if request is allowed. Returns True if allowed, False if blocked."""
        now = time.monotonic()
        window_start = now - window_seconds

        if now - self._last_sweep >= window_seconds:
            self._sweep(window_start)
            self._last_sweep = now

        # Prune expired entries
        timestamps = [t for t in self._windows.pop(key, []) if t > window_start]

        if len(timestamps) >= limit:
            self._windows[key] = timestamps
            logger.warning("Rate limit hit: %s (%d per %.0fs)", key, limit, window_seconds)
            return False

        timestamps.append(now)
        self._windows[key] = timestamps
        return True

    def _sweep(self, window_start: float) -> None:
        """Drop keys with no request inside the window."""
        stale = [k for k, ts in self._windows.items() if not ts or ts[-1] <= window_start]
        for key in stale:
            del self._windows[key]

    def retry_after(self, key: str, window_seconds: float) -> int:
        """Seconds until the oldest request in the window expires."""
        timestamps = self._windows.get(key)
        if not timestamps:
            return 0
        remaining = timestamps[0] + window_seconds - time.monotonic()
        return max(0, math.ceil(remaining))

    def reset(self) -> None:
        """Clear all windows (for testing)."""
        self._windows.clear()


# Singleton
_rate_limiter: SlidingWindowRateLimiter | None = None


def get_rate_limiter() -> SlidingWindowRateLimiter:
    """Get or create the singleton rate limiter."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = SlidingWindowRateLimiter()
    return _rate_limiter


def reset_rate_limiter() -> None:
    """Reset the singleton (for testing)."""
    global _rate_limiter
    _rate_limiter = None


def get_client_ip(request: Request) -> str:
    """Extract client IP, respecting X-Forwarded-For behind proxies."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def generation_rate_limit(
    request: Request,
    user: dict | None = Depends(auth_optional),
) -> None:
    """FastAPI dependency: free-tier quota for generation endpoints."""
    subject = user.get("sub") if user else None
    key = f"user:{subject}" if subject else f"ip:{get_client_ip(request)}"
    window_seconds = settings.rate_limit_window_min * 60.0

    limiter = get_rate_limiter()
    if not limiter.check(key, settings.rate_limit_max_free, window_seconds):
        raise RateLimitExceeded(
            RATE_LIMIT_MESSAGE,
            retry_after=limiter.retry_after(key, window_seconds),
        )
