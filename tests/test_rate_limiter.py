try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from proposal_analyzer.services import SlidingWindowRateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_allows_cap_then_denies_with_retry_after():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(max_requests=10, window_seconds=900, clock=clock)

    decisions = [limiter.hit("203.0.113.7") for _ in range(10)]
    clock.now += 60
    denied = limiter.hit("203.0.113.7")

    assert all(decision.allowed for decision in decisions)
    assert decisions[-1].remaining == 0
    assert denied.allowed is False
    assert denied.retry_after_seconds == 840


def test_window_expiry_frees_capacity():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(max_requests=2, window_seconds=900, clock=clock)
    limiter.hit("client")
    clock.now += 600
    limiter.hit("client")
    assert limiter.hit("client").allowed is False

    clock.now += 300

    decision = limiter.hit("client")
    assert decision.allowed is True
    assert decision.remaining == 0


def test_denied_requests_do_not_extend_the_window():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=10, clock=clock)
    limiter.hit("client")
    for _ in range(5):
        clock.now += 1
        assert limiter.hit("client").allowed is False

    clock.now += 5

    assert limiter.hit("client").allowed is True


def test_clients_are_limited_independently():
    limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=900, clock=FakeClock())

    assert limiter.hit("198.51.100.1").allowed
    assert not limiter.hit("198.51.100.1").allowed
    assert limiter.hit("198.51.100.2").allowed

    limiter.reset()
    assert limiter.hit("198.51.100.1").allowed


def test_rejects_non_positive_cap():
    with pytest.raises(ValueError):
        SlidingWindowRateLimiter(max_requests=0)
