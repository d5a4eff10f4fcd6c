"""
Sliding-window rate limiting, keyed per user or per client address.

Process-local and advisory: counters live in memory and reset when the process
restarts. A limiter tracks at most `max_users` keys; when full, the key seen
least recently is dropped first.
"""

from __future__ import annotations

import time
from collections import OrderedDict, deque
from collections.abc import Callable
from dataclasses import dataclass, field

from gameplan.commons.exceptions import BaseServiceTooManyRequestsException


class UserRateLimitExceededException(BaseServiceTooManyRequestsException):
    code = "USER_RATE_LIMIT_EXCEEDED"


class ClientRateLimitExceededException(BaseServiceTooManyRequestsException):
    code = "RATE_LIMIT_EXCEEDED"


@dataclass
class UserRateLimiter:
    exceeded = UserRateLimitExceededException
    exceeded_message = "Too many requests from this user"

    max_requests: int
    window_s: float
    max_users: int = 10_000
    clock: Callable[[], float] = time.monotonic
    _hits: OrderedDict[str, deque[float]] = field(
        default_factory=OrderedDict, init=False, repr=False
    )
    _last_sweep: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        self._last_sweep = self.clock()

    def hit(self, key: str) -> int:
        """Record one request for `key` and return how many remain in the window."""
        now = self.clock()
        if now - self._last_sweep >= self.window_s:
            self.sweep()
        hits = self._hits.get(key)
        if hits is None:
            hits = deque()
            self._hits[key] = hits
            while len(self._hits) > self.max_users:
                self._hits.popitem(last=False)
        else:
            self._hits.move_to_end(key)
        self._prune(hits, now)

        if len(hits) >= self.max_requests:
            raise self.exceeded(
                self.exceeded_message,
                {"limit": self.max_requests, "windowSeconds": self.window_s},
            )
        hits.append(now)
        return self.max_requests - len(hits)

    def sweep(self) -> int:
        """Drop users with no requests inside the window. Returns how many were dropped."""
        now = self.clock()
        self._last_sweep = now
        idle = []
        for user_id, hits in self._hits.items():
            self._prune(hits, now)
            if not hits:
                idle.append(user_id)
        for user_id in idle:
            del self._hits[user_id]
        return len(idle)

    def reset(self) -> None:
        self._hits.clear()

    def tracked_users(self) -> int:
        return len(self._hits)

    def _prune(self, hits: deque[float], now: float) -> None:
        window_start = now - self.window_s
        while hits and hits[0] <= window_start:
            hits.popleft()


class ClientRateLimiter(UserRateLimiter):
    """Same window keyed by client address, for routes served before login."""

    exceeded = ClientRateLimitExceededException
    exceeded_message = "Too many requests from this IP, please try again later."
