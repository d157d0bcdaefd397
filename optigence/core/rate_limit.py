"""
Rate limiting - sliding-window request log per client fingerprint.

Each (policy, fingerprint) pair keeps the timestamps of its recent
requests. A request is allowed while fewer than `limit` timestamps fall
inside the last `window` seconds. Buckets live in a cachetools TTLCache,
so idle clients are evicted without a cleanup task.

Presets:
    ai       5 requests / 60 s   (LLM-backed endpoints)
    voice   10 requests / 60 s
    general 30 requests / 60 s
    admin   10 requests / 300 s
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from cachetools import TTLCache
from fastapi import Request

logger = logging.getLogger("optigence.core.rate_limit")


@dataclass(frozen=True)
class RateLimitPolicy:
    name: str
    limit: int
    window_seconds: int


RATE_LIMIT_PRESETS: Dict[str, RateLimitPolicy] = {
    "ai": RateLimitPolicy("ai", 5, 60),
    "voice": RateLimitPolicy("voice", 10, 60),
    "general": RateLimitPolicy("general", 30, 60),
    "admin": RateLimitPolicy("admin", 10, 300),
}

USER_AGENT_PREFIX = 50


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after: int = 0

    def headers(self) -> Dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(math.ceil(self.reset_at)),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after)
        return headers


def client_fingerprint(request: Request) -> str:
    """Client IP plus the first 50 characters of the user agent."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    else:
        ip = request.headers.get("x-real-ip") or (request.client.host if request.client else "unknown")
    user_agent = request.headers.get("user-agent") or "unknown"
    return f"{ip}:{user_agent[:USER_AGENT_PREFIX]}"


class RateLimiterStore:
    """
    Usage:
        store = RateLimiterStore()
        decision = store.check("1.2.3.4:curl/8.0", RATE_LIMIT_PRESETS["ai"])
        if not decision.allowed:
            ...

    timer is injectable so tests can move the clock.
    """

    def __init__(
        self,
        maxsize: int = 10000,
        timer: Callable[[], float] = time.time,
    ):
        self._timer = timer
        longest_window = max(policy.window_seconds for policy in RATE_LIMIT_PRESETS.values())
        self._buckets: TTLCache = TTLCache(maxsize=maxsize, ttl=longest_window * 2, timer=timer)

    def check(self, key: str, policy: RateLimitPolicy) -> RateLimitDecision:
        """Record the request if allowed; rejected requests are not recorded."""
        now = self._timer()
        bucket_key = f"{policy.name}:{key}"
        window_start = now - policy.window_seconds

        timestamps: List[float] = [ts for ts in self._buckets.get(bucket_key, []) if ts > window_start]

        if len(timestamps) >= policy.limit:
            reset_at = timestamps[0] + policy.window_seconds
            self._buckets[bucket_key] = timestamps
            logger.info(f"Rate limit hit for {bucket_key} ({policy.limit}/{policy.window_seconds}s)")
            return RateLimitDecision(
                allowed=False,
                limit=policy.limit,
                remaining=0,
                reset_at=reset_at,
                retry_after=math.ceil(reset_at - now),
            )

        timestamps.append(now)
        self._buckets[bucket_key] = timestamps
        return RateLimitDecision(
            allowed=True,
            limit=policy.limit,
            remaining=policy.limit - len(timestamps),
            reset_at=timestamps[0] + policy.window_seconds,
        )

    def reset(self, key: Optional[str] = None) -> None:
        if key is None:
            self._buckets.clear()
            return
        for bucket_key in [k for k in self._buckets.keys() if k.endswith(f":{key}")]:
            self._buckets.pop(bucket_key, None)

    def __len__(self) -> int:
        return len(self._buckets)
