from __future__ import annotations

import secrets
import time
from collections import OrderedDict, deque
from dataclasses import dataclass, field
from threading import Lock


def pin_matches(candidate: str | None, secret: str) -> bool:
    if candidate is None:
        return False
    return secrets.compare_digest(candidate.encode("utf-8"), secret.encode("utf-8"))


@dataclass(slots=True)
class SlidingWindowRateLimiter:
    """In-memory sliding window counter of failed pin attempts per client.

    A key is over budget once it has `limit` events within `window_s`. At most
    `max_keys` keys are tracked; the least recently used one is dropped first.
    """

    limit: int
    window_s: float
    max_keys: int = 10_000
    _events: "OrderedDict[str, deque[float]]" = field(default_factory=OrderedDict)
    _lock: Lock = field(default_factory=Lock)

    def _live(self, key: str, now: float) -> deque[float] | None:
        q = self._events.get(key)
        if q is not None:
            while q and q[0] <= now - self.window_s:
                q.popleft()
        return q

    def allow(self, key: str, now: float | None = None) -> bool:
        """Record one event for `key`; False if the key was already over budget."""
        key = key or "unknown"
        now = time.time() if now is None else now
        with self._lock:
            q = self._live(key, now)
            if q is None:
                if self.max_keys > 0 and len(self._events) >= self.max_keys:
                    self._events.popitem(last=False)
                q = self._events[key] = deque()
            else:
                self._events.move_to_end(key)
            if len(q) >= self.limit:
                return False
            q.append(now)
            return True

    def peek(self, key: str, now: float | None = None) -> bool:
        """True if `key` still has budget left. Records nothing."""
        now = time.time() if now is None else now
        with self._lock:
            q = self._live(key or "unknown", now)
            return q is None or len(q) < self.limit
