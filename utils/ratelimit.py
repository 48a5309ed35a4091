"""
In-memory sliding-window rate limiter keyed by client address.
State is per process; a multi-worker deployment needs a shared store.
"""
from collections import deque
from threading import Lock
from time import monotonic


class RateLimiter:
    def __init__(self, limit: int, window: float = 900):
        self.limit = limit
        self.window = window
        self.hits = {}
        self._last_sweep = None
        self._lock = Lock()

    def allow(self, key: str, now: float | None = None) -> bool:
        now = monotonic() if now is None else now
        with self._lock:
            if self._last_sweep is None or now - self._last_sweep >= self.window:
                self._sweep(now)
            q = self.hits.get(key)
            if q is not None:
                self._expire(q, now)
            else:
                q = self.hits[key] = deque()
            if len(q) >= self.limit:
                return False
            q.append(now)
            return True

    def _expire(self, q: deque, now: float):
        while q and now - q[0] >= self.window:
            q.popleft()

    def _sweep(self, now: float):
        # at most once per window; forgets clients with no hits left in it
        for key in list(self.hits):
            self._expire(self.hits[key], now)
            if not self.hits[key]:
                del self.hits[key]
        self._last_sweep = now

    def reset(self):
        with self._lock:
            self.hits.clear()
            self._last_sweep = None
