# tests/test_rate_limiter.py
"""Tests for the fixed-window rate limiter."""
from __future__ import annotations

import threading

import pytest

from conftest import FakeClock
from services.rate_limiter import RateLimiter


@pytest.fixture
def limiter(clock: FakeClock) -> RateLimiter:
    return RateLimiter(clock=clock)


def test_first_request_allowed(limiter, clock):
    result = limiter.check("10.0.0.1")
    assert result.allowed
    assert result.remaining == 19
    assert result.reset_at == clock.now + 60


def test_nth_request_reports_remaining(limiter):
    for n in range(1, 21):
        result = limiter.check("10.0.0.2")
        assert result.allowed
        assert result.remaining == 20 - n


def test_twenty_first_request_blocked(limiter, clock):
    for _ in range(20):
        limiter.check("10.0.0.3")
    result = limiter.check("10.0.0.3")
    assert not result.allowed
    assert result.remaining == 0
    assert result.reset_at > clock.now


def test_blocked_requests_do_not_extend_window(limiter, clock):
    first = limiter.check("10.0.0.4")
    for _ in range(30):
        clock.advance(1)
        blocked = limiter.check("10.0.0.4")
    assert not blocked.allowed
    assert blocked.reset_at == first.reset_at


def test_window_rolls_over(limiter, clock):
    for _ in range(20):
        limiter.check("10.0.0.5")
    assert not limiter.check("10.0.0.5").allowed

    clock.advance(60.001)
    result = limiter.check("10.0.0.5")
    assert result.allowed
    assert result.remaining == 19


def test_reset_instant_counts_as_expired(limiter, clock):
    first = limiter.check("10.0.0.6")
    for _ in range(19):
        limiter.check("10.0.0.6")
    clock.now = first.reset_at
    result = limiter.check("10.0.0.6")
    assert result.allowed
    assert result.remaining == 19
    assert result.reset_at == first.reset_at + 60


def test_identifiers_are_independent(limiter):
    for _ in range(20):
        limiter.check("ip1")
    assert not limiter.check("ip1").allowed

    result = limiter.check("ip2")
    assert result.allowed
    assert result.remaining == 19


def test_retry_after(limiter, clock):
    for _ in range(21):
        result = limiter.check("10.0.0.7")
    clock.advance(15)
    assert result.retry_after(clock.now) == pytest.approx(45)
    clock.advance(100)
    assert result.retry_after(clock.now) == 0


def test_custom_capacity_and_window(clock):
    limiter = RateLimiter(max_requests=2, window_seconds=5, clock=clock)
    assert limiter.check("k").remaining == 1
    assert limiter.check("k").remaining == 0
    assert not limiter.check("k").allowed
    clock.advance(5)
    assert limiter.check("k").allowed


@pytest.mark.parametrize("kwargs", [{"max_requests": 0}, {"window_seconds": 0}])
def test_rejects_bad_parameters(kwargs):
    with pytest.raises(ValueError):
        RateLimiter(**kwargs)


def test_expired_entries_evicted_past_threshold(clock):
    limiter = RateLimiter(sweep_threshold=10, clock=clock)
    for i in range(11):
        limiter.check(f"old-{i}")
    assert len(limiter) == 11

    clock.advance(61)
    limiter.check("fresh")
    assert len(limiter) == 1


def test_live_entries_survive_sweep(clock):
    limiter = RateLimiter(sweep_threshold=4, clock=clock)
    for i in range(4):
        limiter.check(f"old-{i}")
    clock.advance(30)
    limiter.check("live")
    assert len(limiter) == 5

    clock.advance(31)
    limiter.check("trigger")
    assert len(limiter) == 2
    assert limiter.check("live").remaining == 18


def test_no_sweep_below_threshold(clock):
    limiter = RateLimiter(sweep_threshold=100, clock=clock)
    for i in range(5):
        limiter.check(f"k{i}")
    clock.advance(120)
    limiter.check("k0")
    assert len(limiter) == 5


def test_reset_clears_table(limiter):
    limiter.check("a")
    limiter.check("b")
    limiter.reset()
    assert len(limiter) == 0


def test_concurrent_checks_never_exceed_capacity(clock):
    limiter = RateLimiter(max_requests=20, clock=clock)
    results = []
    lock = threading.Lock()

    def worker():
        for _ in range(10):
            r = limiter.check("shared")
            with lock:
                results.append(r)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    allowed = [r for r in results if r.allowed]
    assert len(allowed) == 20
    assert sorted(r.remaining for r in allowed) == list(range(20))
