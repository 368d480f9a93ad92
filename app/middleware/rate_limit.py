"""
Rate Limiting Middleware
Token-bucket limiter that gates public and AI-backed endpoints.

State lives in this process only: restarts and horizontal scaling reset
every counter. Callers that need cluster-wide enforcement must move the
bucket storage to a shared counter store; the `admit()` interface stays
the same.
"""
import logging
import math
import random
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from fastapi import HTTPException, Request
from slowapi.util import get_remote_address

from app.core.config import settings

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests. Please wait a moment."

# Entries untouched for longer than this are evicted by a sweep
STALE_AFTER_MS = 10 * 60 * 1000
SWEEP_PROBABILITY = 0.05


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


@dataclass
class RateLimitEntry:
    """Bucket state for one identifier."""
    tokens: int
    last_refill: float


class TokenBucketRateLimiter:
    """
    Per-identifier token bucket with lazy, continuous refill.

    No background timers: refill is computed from elapsed time on each
    check, and stale entries are swept on a random ~5% of calls.
    """

    def __init__(
        self,
        clock: Callable[[], float] = _monotonic_ms,
        rng: Callable[[], float] = random.random,
        stale_after_ms: float = STALE_AFTER_MS,
        sweep_probability: float = SWEEP_PROBABILITY,
    ):
        self._clock = clock
        self._rng = rng
        self._stale_after_ms = stale_after_ms
        self._sweep_probability = sweep_probability
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    def admit(self, identifier: str, max_tokens: int = 5, interval_ms: float = 60 * 1000) -> bool:
        """
        Check if a request is within rate limits.

        Args:
            identifier: Unique identifier (usually the caller IP address)
            max_tokens: Maximum number of requests per interval
            interval_ms: Interval length in milliseconds

        Returns:
            True if the request is allowed, False if rate-limited
        """
        with self._lock:
            if self._rng() < self._sweep_probability:
                self._sweep_locked()

            now = self._clock()
            entry = self._entries.get(identifier)

            if entry is None:
                self._entries[identifier] = RateLimitEntry(
                    tokens=max(0, max_tokens - 1),
                    last_refill=now,
                )
                return True

            if interval_ms <= 0:
                refill = max_tokens
            else:
                elapsed = now - entry.last_refill
                refill = math.floor((elapsed / interval_ms) * max_tokens)

            # The refill clock only moves when tokens are actually added,
            # otherwise sub-interval time would be lost on every check.
            if refill > 0:
                entry.tokens = max(0, min(max_tokens, entry.tokens + refill))
                entry.last_refill = now

            if entry.tokens > 0:
                entry.tokens -= 1
                return True

            return False

    def remaining_tokens(self, identifier: str, max_tokens: int = 5) -> int:
        """Tokens left for an identifier (a full bucket if it was never seen)."""
        with self._lock:
            entry = self._entries.get(identifier)
            if entry is None:
                return max_tokens
            return entry.tokens

    def sweep(self) -> int:
        """Evict stale entries now. Returns the number of evicted identifiers."""
        with self._lock:
            return self._sweep_locked()

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()

    def _sweep_locked(self) -> int:
        now = self._clock()
        stale = [
            key for key, entry in self._entries.items()
            if now - entry.last_refill > self._stale_after_ms
        ]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug(f"🧹 Rate limiter evicted {len(stale)} stale identifiers")
        return len(stale)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._entries

    def __len__(self) -> int:
        return len(self._entries)


# Process-wide limiter shared by every route
limiter = TokenBucketRateLimiter()


def client_identifier(request: Request) -> str:
    """
    Resolve the caller identifier used as the bucket key.

    Prefers the first X-Forwarded-For hop, then X-Real-IP, then the socket
    peer address.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return get_remote_address(request)

    return "unknown"


class RateLimit:
    """
    FastAPI dependency enforcing a token-bucket ceiling on a route.

    Usage:
        @router.post("/x")
        async def handler(identifier: str = Depends(RateLimit(5, 60_000))): ...
    """

    def __init__(
        self,
        max_tokens: int,
        interval_ms: float = 60 * 1000,
        message: str = RATE_LIMIT_MESSAGE,
        bucket: Optional[TokenBucketRateLimiter] = None,
    ):
        self.max_tokens = max_tokens
        self.interval_ms = interval_ms
        self.message = message
        self.bucket = bucket

    async def __call__(self, request: Request) -> str:
        identifier = client_identifier(request)

        if not settings.rate_limit_enabled:
            return identifier

        bucket = self.bucket if self.bucket is not None else limiter
        if not bucket.admit(identifier, self.max_tokens, self.interval_ms):
            logger.warning(f"⛔ Rate limit hit: {identifier} on {request.method} {request.url.path}")
            raise HTTPException(status_code=429, detail=self.message)

        return identifier
