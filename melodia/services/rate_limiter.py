"""
Rate Limiting
Fixed-window request counting behind a pluggable store (in-memory or Redis)
"""

import asyncio
import time
from typing import Dict, Optional, Protocol, Tuple

import redis.asyncio as redis
import structlog

logger = structlog.get_logger("melodia.rate_limit")


class RateLimitStore(Protocol):
    async def hit(self, key: str, window_seconds: int) -> int:
        """Count one request against key and return the count in the current window"""
        ...


class InMemoryRateLimitStore:
    """Single-process store; expired windows are dropped, not kept at zero"""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._windows: Dict[str, Tuple[int, float]] = {}
        self._lock = asyncio.Lock()
        self._next_sweep = 0.0

    def _sweep(self, now: float) -> None:
        expired = [key for key, (_, reset_at) in self._windows.items() if now >= reset_at]
        for key in expired:
            del self._windows[key]

    async def hit(self, key: str, window_seconds: int) -> int:
        async with self._lock:
            now = self._clock()
            if now >= self._next_sweep:
                self._sweep(now)
                self._next_sweep = now + window_seconds

            count, reset_at = self._windows.pop(key, (0, 0.0))
            if now >= reset_at:
                count, reset_at = 0, now + window_seconds
            count += 1
            self._windows[key] = (count, reset_at)
            return count


class RedisRateLimitStore:
    """Shared store; the window starts with the first INCR of a key"""

    def __init__(self, client: redis.Redis, prefix: str = "melodia:ratelimit:"):
        self.client = client
        self.prefix = prefix

    async def hit(self, key: str, window_seconds: int) -> int:
        redis_key = f"{self.prefix}{key}"
        count = await self.client.incr(redis_key)
        if count == 1:
            await self.client.expire(redis_key, window_seconds)
        return int(count)


class RateLimiter:
    """Allows up to limit requests per client key per window"""

    def __init__(self, store: RateLimitStore, limit: int, window_seconds: int):
        self.store = store
        self.limit = limit
        self.window_seconds = window_seconds

    async def check(self, client_key: str) -> bool:
        count = await self.store.hit(client_key, self.window_seconds)
        if count > self.limit:
            logger.warning(
                "Rate limit exceeded",
                client=client_key,
                count=count,
                limit=self.limit,
                window_seconds=self.window_seconds
            )
            return False
        return True


def create_rate_limiter(
    limit: int,
    window_seconds: int,
    backend: str = "memory",
    redis_client: Optional[redis.Redis] = None
) -> RateLimiter:
    """Build a limiter for the configured backend; Redis needs a live client"""
    if backend == "redis":
        if redis_client is None:
            logger.warning("Redis rate limit backend requested without a client, using memory")
            return RateLimiter(InMemoryRateLimitStore(), limit, window_seconds)
        return RateLimiter(RedisRateLimitStore(redis_client), limit, window_seconds)
    return RateLimiter(InMemoryRateLimitStore(), limit, window_seconds)
