from shared.helper.RateLimiter import RateLimiter
from tests.fakes import FakeClock


def test_fixed_window():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=2, window_seconds=60, clock=clock)

    assert limiter.is_allowed("a")
    assert limiter.is_allowed("a")
    assert not limiter.is_allowed("a")
    assert limiter.is_allowed("b")

    clock.advance(61)
    assert limiter.is_allowed("a")


def test_reset():
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
    assert limiter.is_allowed("a")
    assert not limiter.is_allowed("a")
    limiter.reset()
    assert limiter.is_allowed("a")


def test_expired_records_are_pruned():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=clock)
    for ip in ("a", "b", "c"):
        limiter.is_allowed(ip)
    assert limiter.tracked_keys() == 3

    clock.advance(61)
    assert limiter.is_allowed("d")
    assert limiter.tracked_keys() == 1
