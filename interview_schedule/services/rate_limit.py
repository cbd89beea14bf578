# interview_schedule/services/rate_limit.py
"""
Window-based rate limiting for public endpoints.

Counters are kept per "action:identifier" key:

- no bucket, or now - window_start >= window_ms -> {count: 1, window_start: now}
- otherwise count += 1; count > max_requests -> rejected (remaining = 0)

Storage is swappable (RateLimitStore):
- InMemoryRateLimitStore: process-local dict, lazy sweep of expired buckets
- RedisRateLimitStore: shared counter (INCR + PTTL), for multi-process setups

This is abuse mitigation, not an accounting ledger: in-memory state is
lost on restart and is not shared between processes.
"""

import math
import threading
import time
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Optional

from redis import Redis
from redis.exceptions import RedisError

from ..config import settings
from ..redis_client import get_redis

logger = logging.getLogger(__name__)


# ============================================================
# RATE LIMIT CONFIGURATION
# ============================================================

@dataclass(frozen=True)
class RateLimitConfig:
    max_requests: int
    window_ms: int


RATE_LIMITS: dict[str, RateLimitConfig] = {
    # Public booking
    "publicBooking": RateLimitConfig(max_requests=5, window_ms=60000),

    # Public cancellation (own bucket, same budget as booking)
    "publicCancel": RateLimitConfig(max_requests=5, window_ms=60000),

    # Public schedule listing
    "publicScheduleView": RateLimitConfig(max_requests=30, window_ms=60000),

    # Public candidate form submission
    "publicForm": RateLimitConfig(max_requests=10, window_ms=60000),

    # AI document generation
    "aiGeneration": RateLimitConfig(max_requests=3, window_ms=60000),
}

# Used for any action without a named preset
DEFAULT_RATE_LIMIT = RateLimitConfig(max_requests=20, window_ms=60000)


def get_rate_limit_config(action: str) -> RateLimitConfig:
    return RATE_LIMITS.get(action, DEFAULT_RATE_LIMIT)


@dataclass(frozen=True)
class RateLimitResult:
    success: bool
    remaining: int
    reset_at_ms: int

    def retry_after_seconds(self, now_ms: int) -> int:
        return max(1, math.ceil((self.reset_at_ms - now_ms) / 1000))


# ============================================================
# STORES
# ============================================================

class RateLimitStore:
    """Counter storage. hit() returns (count, window_start_ms) after counting."""

    def hit(self, key: str, now_ms: int, window_ms: int) -> tuple[int, int]:
        raise NotImplementedError


@dataclass
class _Bucket:
    count: int
    window_start: int
    window_ms: int


class InMemoryRateLimitStore(RateLimitStore):
    def __init__(self, sweep_interval_ms: int = 60000):
        self._buckets: dict[str, _Bucket] = {}
        self._lock = threading.Lock()
        self._sweep_interval_ms = sweep_interval_ms
        self._last_sweep = 0

    def __len__(self) -> int:
        return len(self._buckets)

    def hit(self, key: str, now_ms: int, window_ms: int) -> tuple[int, int]:
        with self._lock:
            self._maybe_sweep(now_ms)

            bucket = self._buckets.get(key)
            if bucket is None or now_ms - bucket.window_start >= window_ms:
                bucket = _Bucket(count=1, window_start=now_ms, window_ms=window_ms)
                self._buckets[key] = bucket
            else:
                bucket.count += 1
                bucket.window_ms = window_ms

            return bucket.count, bucket.window_start

    def _maybe_sweep(self, now_ms: int) -> None:
        """Drop expired buckets, at most once per sweep interval."""
        if now_ms - self._last_sweep < self._sweep_interval_ms:
            return
        self._last_sweep = now_ms

        expired = [
            key for key, bucket in self._buckets.items()
            if now_ms - bucket.window_start >= bucket.window_ms
        ]
        for key in expired:
            del self._buckets[key]
        if expired:
            logger.debug(f"Rate limit sweep: dropped {len(expired)} buckets")


class RedisRateLimitStore(RateLimitStore):
    KEY_PREFIX = "rl"

    def __init__(self, redis: Redis):
        self.redis = redis

    def _key(self, key: str) -> str:
        return f"{self.KEY_PREFIX}:{key}"

    def hit(self, key: str, now_ms: int, window_ms: int) -> tuple[int, int]:
        redis_key = self._key(key)

        pipe = self.redis.pipeline()
        pipe.incr(redis_key)
        pipe.pttl(redis_key)
        count, ttl = pipe.execute()

        # Fresh key (or one that lost its TTL): the window starts now
        if ttl is None or ttl < 0:
            self.redis.pexpire(redis_key, window_ms)
            ttl = window_ms

        window_start = now_ms - (window_ms - int(ttl))
        return int(count), window_start


# ============================================================
# LIMITER
# ============================================================

def _now_ms() -> int:
    return int(time.time() * 1000)


class RateLimiter:
    def __init__(self, store: RateLimitStore, clock: Callable[[], int] = _now_ms):
        self.store = store
        self.clock = clock

    def check(
        self,
        action: str,
        identifier: str,
        config: Optional[RateLimitConfig] = None,
    ) -> RateLimitResult:
        """
        Count one request of `identifier` against `action`.

        config defaults to the named preset for the action.
        """
        config = config or get_rate_limit_config(action)
        now = self.clock()

        try:
            count, window_start = self.store.hit(f"{action}:{identifier}", now, config.window_ms)
        except RedisError as e:
            logger.error(f"Rate limit check failed for {action}: {e}")
            # fail open
            return RateLimitResult(
                success=True,
                remaining=config.max_requests,
                reset_at_ms=now + config.window_ms,
            )

        reset_at = window_start + config.window_ms

        if count > config.max_requests:
            return RateLimitResult(success=False, remaining=0, reset_at_ms=reset_at)

        return RateLimitResult(
            success=True,
            remaining=config.max_requests - count,
            reset_at_ms=reset_at,
        )


def build_store(backend: str) -> RateLimitStore:
    if backend == "redis":
        redis = get_redis()
        if redis is None:
            raise RuntimeError("RATE_LIMIT_BACKEND=redis requires REDIS_URL")
        return RedisRateLimitStore(redis)
    if backend == "memory":
        return InMemoryRateLimitStore(settings.rate_limit_sweep_interval_ms)
    raise RuntimeError(f"Unknown RATE_LIMIT_BACKEND: {backend}")


@lru_cache
def get_rate_limiter() -> RateLimiter:
    """Process-wide limiter, created on first use and never torn down."""
    logger.info(f"Rate limiter backend: {settings.rate_limit_backend}")
    return RateLimiter(build_store(settings.rate_limit_backend))
