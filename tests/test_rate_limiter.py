"""Tests for the fixed-window rate limiter."""

import threading

import pytest

from pixilator.safety.rate_limiter import RateLimiter


def test_admits_up_to_max_then_rejects(rate_limiter):
    results = [rate_limiter.admit("1.2.3.4") for _ in range(10)]
    assert results == [True] * 10
    assert rate_limiter.admit("1.2.3.4") is False


def test_rejection_does_not_change_count(rate_limiter):
    for _ in range(12):
        rate_limiter.admit("1.2.3.4")
    assert rate_limiter.entry("1.2.3.4").count == 10


def test_window_reset_admits_and_restarts_count(rate_limiter, clock):
    for _ in range(11):
        rate_limiter.admit("client")
    reset_at = rate_limiter.entry("client").window_reset_at

    clock.now = reset_at
    assert rate_limiter.admit("client") is True

    entry = rate_limiter.entry("client")
    assert entry.count == 1
    assert entry.window_reset_at == reset_at + 3600


def test_still_limited_just_before_reset(rate_limiter, clock):
    for _ in range(10):
        rate_limiter.admit("client")
    clock.advance(3599.5)
    assert rate_limiter.admit("client") is False


def test_keys_are_independent(rate_limiter):
    for _ in range(10):
        rate_limiter.admit("a")
    assert rate_limiter.admit("a") is False
    assert rate_limiter.admit("b") is True
    assert rate_limiter.entry("b").count == 1


def test_entry_for_unknown_key_is_none(rate_limiter):
    assert rate_limiter.entry("never-seen") is None


def test_reset_clears_all_entries(rate_limiter):
    for _ in range(10):
        rate_limiter.admit("a")
    rate_limiter.reset()
    assert rate_limiter.entry("a") is None
    assert rate_limiter.admit("a") is True


def test_concurrent_admissions_have_no_lost_updates():
    limiter = RateLimiter(max_requests=50, window_seconds=3600)
    admitted = []
    lock = threading.Lock()
    barrier = threading.Barrier(20)

    def worker():
        barrier.wait()
        for _ in range(10):
            ok = limiter.admit("shared")
            with lock:
                admitted.append(ok)

    threads = [threading.Thread(target=worker) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert admitted.count(True) == 50
    assert admitted.count(False) == 150
    assert limiter.entry("shared").count == 50


@pytest.mark.parametrize("kwargs", [{"max_requests": 0}, {"window_seconds": 0}])
def test_invalid_configuration(kwargs):
    with pytest.raises(ValueError):
        RateLimiter(**kwargs)
