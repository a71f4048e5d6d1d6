"""
Per-key attempt limiting.

The counter store is an injected object rather than module state: the app
keeps one on ``app.state`` and routes receive it through ``get_rate_limiter``,
so tests (or a shared backend) can swap it out.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Protocol

from fastapi import HTTPException, Request, status


class KeyedCounter(Protocol):
    def hit(self, key: str, window_seconds: float) -> int:
        """Count one attempt for ``key`` and return the total in the current window."""

    def reset(self, key: str) -> None: ...


@dataclass
class _Window:
    count: int
    reset_at: float


class InMemoryCounter:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, window_seconds: float) -> int:
        now = self._clock()
        with self._lock:
            w = self._windows.get(key)
            if w is None or now > w.reset_at:
                w = _Window(count=0, reset_at=now + window_seconds)
                self._windows[key] = w
            w.count += 1
            return w.count

    def reset(self, key: str) -> None:
        with self._lock:
            self._windows.pop(key, None)


class RateLimiter:
    def __init__(self, counter: KeyedCounter, *, max_attempts: int, window_seconds: float, enabled: bool = True):
        self.counter = counter
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.enabled = enabled

    def allow(self, key: str) -> bool:
        if not self.enabled:
            return True
        return self.counter.hit(key, self.window_seconds) <= self.max_attempts

    def check(self, key: str) -> None:
        if not self.allow(key):
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many attempts. Try again later.",
                headers={"Retry-After": str(int(self.window_seconds))},
            )


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter
