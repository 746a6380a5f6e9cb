from core.rate_limit import SlidingWindowRateLimiter


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_allows_up_to_limit_then_denies():
    limiter = SlidingWindowRateLimiter(clock=FakeClock())
    results = [limiter.check("ip", "analytics", 3, 60).allowed for _ in range(4)]
    assert results == [True, True, True, False]


def test_window_slides():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(clock=clock)
    limiter.check("ip", "analytics", 2, 60)
    clock.now = 30
    limiter.check("ip", "analytics", 2, 60)
    assert not limiter.check("ip", "analytics", 2, 60).allowed
    clock.now = 61
    verdict = limiter.check("ip", "analytics", 2, 60)
    assert verdict.allowed
    assert verdict.remaining == 0


def test_namespaces_are_independent():
    limiter = SlidingWindowRateLimiter(clock=FakeClock())
    assert limiter.check("ip", "analytics", 1, 60).allowed
    assert limiter.check("ip", "register", 1, 60).allowed
    assert not limiter.check("ip", "analytics", 1, 60).allowed


def test_idle_buckets_are_reclaimed():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(clock=clock)
    for i in range(5000):
        limiter.check(f"10.0.{i // 256}.{i % 256}", "analytics", 5, 60)
    assert limiter.bucket_count() == 5000
    clock.now = 10_000
    assert limiter.check("192.0.2.1", "analytics", 5, 60).allowed
    assert limiter.bucket_count() == 1


def test_active_buckets_survive_a_sweep():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(clock=clock)
    limiter.check("old", "analytics", 2, 60)
    clock.now = 50
    limiter.check("busy", "analytics", 2, 60)
    clock.now = 70
    limiter.check("busy", "analytics", 2, 60)
    assert limiter.bucket_count() == 1
    assert not limiter.check("busy", "analytics", 2, 60).allowed
