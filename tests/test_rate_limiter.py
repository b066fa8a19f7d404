"""Tests for the login rate limiter."""

from portal.services.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestRateLimiter:

    def test_blocks_after_limit(self):
        limiter = RateLimiter(requests_per_minute=2, clock=FakeClock())

        assert limiter.is_allowed("login:1.2.3.4")
        assert limiter.is_allowed("login:1.2.3.4")
        assert not limiter.is_allowed("login:1.2.3.4")
        assert limiter.is_allowed("login:5.6.7.8")

    def test_window_slides(self):
        clock = FakeClock()
        limiter = RateLimiter(requests_per_minute=1, clock=clock)

        assert limiter.is_allowed("login:1.2.3.4")
        clock.now += 61
        assert limiter.is_allowed("login:1.2.3.4")

    def test_idle_clients_are_forgotten(self):
        clock = FakeClock()
        limiter = RateLimiter(clock=clock)
        for i in range(50):
            limiter.is_allowed(f"login:10.0.0.{i}")
        assert len(limiter) == 50

        clock.now += 120
        limiter.is_allowed("login:192.168.0.1")

        assert len(limiter) == 1
