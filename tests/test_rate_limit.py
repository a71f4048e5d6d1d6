from __future__ import annotations

import pytest
from fastapi import HTTPException

from parkboard.core.rate_limit import InMemoryCounter, RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_allows_up_to_max_attempts():
    limiter = RateLimiter(InMemoryCounter(), max_attempts=3, window_seconds=60)
    assert [limiter.allow("k") for _ in range(4)] == [True, True, True, False]


def test_keys_are_independent():
    limiter = RateLimiter(InMemoryCounter(), max_attempts=1, window_seconds=60)
    assert limiter.allow("a")
    assert limiter.allow("b")
    assert not limiter.allow("a")


def test_window_resets_after_expiry():
    clock = FakeClock()
    limiter = RateLimiter(InMemoryCounter(clock=clock), max_attempts=1, window_seconds=60)
    assert limiter.allow("k")
    assert not limiter.allow("k")

    clock.now = 61
    assert limiter.allow("k")


def test_reset_forgets_key():
    counter = InMemoryCounter()
    limiter = RateLimiter(counter, max_attempts=1, window_seconds=60)
    limiter.allow("k")
    counter.reset("k")
    assert limiter.allow("k")


def test_disabled_limiter_always_allows():
    limiter = RateLimiter(InMemoryCounter(), max_attempts=0, window_seconds=60, enabled=False)
    assert limiter.allow("k")


def test_check_raises_429():
    limiter = RateLimiter(InMemoryCounter(), max_attempts=0, window_seconds=30)
    with pytest.raises(HTTPException) as exc:
        limiter.check("k")
    assert exc.value.status_code == 429
    assert exc.value.headers["Retry-After"] == "30"
