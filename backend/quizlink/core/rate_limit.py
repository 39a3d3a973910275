from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Protocol

from fastapi import Depends, HTTPException, Request

from quizlink.core.client import client_ip
from quizlink.core.config import settings
from quizlink.core.redis_client import get_redis


class RateLimiter(Protocol):
    window_seconds: int

    def allow(self, key: str) -> bool: ...


class RedisRateLimiter:
    """Fixed-window counter shared by every instance pointing at the same Redis.

    Redis errors let the request through.
    """

    def __init__(self, redis, *, limit: int, window_seconds: int):
        self.redis = redis
        self.limit = int(limit)
        self.window_seconds = int(window_seconds)

    def allow(self, key: str) -> bool:
        try:
            current = self.redis.incr(key)
            if int(current) == 1:
                self.redis.expire(key, self.window_seconds)
        except Exception:
            return True
        return int(current) <= self.limit

    def retry_after(self, key: str) -> int:
        try:
            ttl = self.redis.ttl(key)
        except Exception:
            ttl = None
        return int(ttl) if ttl and ttl > 0 else self.window_seconds


class MemoryRateLimiter:
    """Per-process fixed window. Counters are not shared between workers."""

    def __init__(self, *, limit: int, window_seconds: int, clock=time.monotonic):
        self.limit = int(limit)
        self.window_seconds = int(window_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: dict[str, tuple[int, float]] = {}
        self._next_sweep = 0.0

    def _sweep(self, now: float) -> None:
        # Called with the lock held; drops windows that have run out.
        if now < self._next_sweep:
            return
        self._windows = {k: w for k, w in self._windows.items() if w[1] > now}
        self._next_sweep = now + self.window_seconds

    def allow(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            self._sweep(now)
            count, reset_at = self._windows.get(key, (0, 0.0))
            if now >= reset_at:
                self._windows[key] = (1, now + self.window_seconds)
                return True
            if count >= self.limit:
                return False
            self._windows[key] = (count + 1, reset_at)
            return True

    def retry_after(self, key: str) -> int:
        with self._lock:
            _, reset_at = self._windows.get(key, (0, 0.0))
        remaining = int(reset_at - self._clock())
        return remaining if remaining > 0 else self.window_seconds

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
            self._next_sweep = 0.0


_memory_limiters: dict[tuple[str, int, int], MemoryRateLimiter] = {}
_memory_lock = threading.Lock()


def get_rate_limiter(*, key_prefix: str, limit: int, window_seconds: int) -> RateLimiter:
    backend = str(getattr(settings, "rate_limit_backend", "redis") or "redis").strip().lower()
    if backend == "memory":
        k = (key_prefix, int(limit), int(window_seconds))
        with _memory_lock:
            limiter = _memory_limiters.get(k)
            if limiter is None:
                limiter = MemoryRateLimiter(limit=limit, window_seconds=window_seconds)
                _memory_limiters[k] = limiter
        return limiter
    return RedisRateLimiter(get_redis(), limit=limit, window_seconds=window_seconds)


def reset_memory_limiters() -> None:
    with _memory_lock:
        _memory_limiters.clear()


@dataclass(frozen=True)
class RateLimit:
    key: str
    limit: int
    window_seconds: int


def rate_limit(*, key_prefix: str, limit: int, window_seconds: int):
    async def _dep(request: Request) -> RateLimit:
        caller = getattr(request.state, "user_id", None) or client_ip(request)
        key = f"rl:{key_prefix}:{caller}"

        limiter = get_rate_limiter(key_prefix=key_prefix, limit=limit, window_seconds=window_seconds)
        if not limiter.allow(key):
            retry_after = getattr(limiter, "retry_after", None)
            seconds = retry_after(key) if callable(retry_after) else int(window_seconds)
            raise HTTPException(
                status_code=429,
                detail={"error_code": "rate_limited", "error_message": "rate limit exceeded"},
                headers={"Retry-After": str(seconds)},
            )

        return RateLimit(key=key, limit=int(limit), window_seconds=int(window_seconds))

    return Depends(_dep)
