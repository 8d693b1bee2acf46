# =============================================================================
# lib/rate_limiter.py - Fixed-Window Rate Limiting
# =============================================================================
# Counts requests per (bucket name, client IP) in fixed windows.
#
# Backends:
# - memory: per-process dict (default; fine for a single worker and tests)
# - redis:  INCR + PEXPIRE on REDIS_URL, shared by every worker
#
# Usage (as a route dependency):
#   from lib.rate_limiter import rate_limit
#
#   @router.post("", dependencies=[Depends(rate_limit("applications:create", 60, 60_000))])
#   async def create_application(...):
#       ...
# =============================================================================

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Protocol

import redis
from fastapi import Request

from app.config import settings
from app.exceptions import RateLimitedError
from lib.utils import get_client_ip

logger = logging.getLogger(__name__)


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    retry_after_ms: int


class RateLimitBackend(Protocol):
    def hit(self, key: str, limit: int, window_ms: int) -> RateLimitResult: ...

    def reset(self) -> None: ...


# =============================================================================
# Backends
# =============================================================================

class MemoryRateLimitBackend:
    """Per-process fixed windows keyed by bucket."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._buckets: dict[str, tuple[int, float]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, limit: int, window_ms: int) -> RateLimitResult:
        now_ms = self._clock() * 1000
        with self._lock:
            count, reset_at = self._buckets.get(key, (0, 0.0))
            if now_ms >= reset_at:
                count, reset_at = 0, now_ms + window_ms
            count += 1
            self._buckets[key] = (count, reset_at)

            if len(self._buckets) > 10_000:
                self._buckets = {k: v for k, v in self._buckets.items() if v[1] > now_ms}

        retry_after_ms = max(0, int(reset_at - now_ms))
        if count > limit:
            return RateLimitResult(allowed=False, remaining=0, retry_after_ms=retry_after_ms)
        return RateLimitResult(allowed=True, remaining=limit - count, retry_after_ms=0)

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()


class RedisRateLimitBackend:
    """Shared fixed windows stored in Redis."""

    def __init__(self, url: str):
        self._client = redis.Redis.from_url(url)

    def hit(self, key: str, limit: int, window_ms: int) -> RateLimitResult:
        redis_key = f"ratelimit:{key}"
        pipe = self._client.pipeline()
        pipe.incr(redis_key)
        pipe.pttl(redis_key)
        count, ttl = pipe.execute()

        if ttl is None or ttl < 0:
            self._client.pexpire(redis_key, window_ms)
            ttl = window_ms

        if count > limit:
            return RateLimitResult(allowed=False, remaining=0, retry_after_ms=int(ttl))
        return RateLimitResult(allowed=True, remaining=limit - count, retry_after_ms=0)

    def reset(self) -> None:
        for key in self._client.scan_iter("ratelimit:*"):
            self._client.delete(key)


# =============================================================================
# Limiter
# =============================================================================

class RateLimiter:
    """Facade over the configured backend."""

    def __init__(self, backend: RateLimitBackend):
        self.backend = backend

    def check(self, name: str, identifier: str, limit: int, window_ms: int) -> RateLimitResult:
        key = f"{name}:{identifier}"
        try:
            return self.backend.hit(key, limit, window_ms)
        except redis.RedisError as e:
            # Store unreachable: allow the request
            logger.error(f"Rate limiter backend error for {name}: {e}")
            return RateLimitResult(allowed=True, remaining=limit, retry_after_ms=0)

    def reset(self) -> None:
        self.backend.reset()


def _create_limiter() -> RateLimiter:
    if settings.RATE_LIMIT_BACKEND == "redis":
        logger.info("Using Redis rate limit backend")
        return RateLimiter(RedisRateLimitBackend(settings.REDIS_URL))
    return RateLimiter(MemoryRateLimitBackend())


limiter = _create_limiter()


def rate_limit(name: str, limit: int, window_ms: int = 60_000):
    """
    Build a FastAPI dependency enforcing `limit` requests per `window_ms`
    for each client IP.

    Raises:
        RateLimitedError: 429 with retry_after_ms once the bucket is exhausted
    """

    async def dependency(request: Request) -> None:
        ip = get_client_ip(request)
        result = limiter.check(name, ip, limit, window_ms)
        if not result.allowed:
            logger.warning(f"Rate limit hit: {name} for {ip}")
            raise RateLimitedError(retry_after_ms=result.retry_after_ms)

    return dependency
