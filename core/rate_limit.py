import threading
import time
from collections import deque
from dataclasses import dataclass


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float


class SlidingWindowRateLimiter:
    """In-process sliding window limiter keyed by ``namespace:key``."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._hits: dict[str, deque] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def check(self, key: str, namespace: str, limit: int, window_seconds: float) -> RateLimitResult:
        bucket_key = f"{namespace}:{key}"
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= window_seconds:
                self._sweep(now - window_seconds)
                self._last_sweep = now
            hits = self._hits.setdefault(bucket_key, deque())
            while hits and hits[0] <= now - window_seconds:
                hits.popleft()
            if len(hits) >= limit:
                return RateLimitResult(False, 0, hits[0] + window_seconds)
            hits.append(now)
            return RateLimitResult(True, limit - len(hits), hits[0] + window_seconds)

    def _sweep(self, cutoff: float) -> None:
        """Drop buckets whose newest hit is outside the window. Caller holds the lock."""
        stale = [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for k in stale:
            del self._hits[k]

    def bucket_count(self) -> int:
        with self._lock:
            return len(self._hits)


rate_limiter = SlidingWindowRateLimiter()


def get_rate_limiter() -> SlidingWindowRateLimiter:
    return rate_limiter


def client_ip(request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
