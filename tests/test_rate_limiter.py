from __future__ import annotations

from qrlink.rate_limiter import RateLimiter, RateLimitResult, rate_limit_headers


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_allows_up_to_limit_then_blocks() -> None:
    limiter = RateLimiter(clock=FakeClock())
    results = [limiter.check("client", limit=3, window_seconds=60) for _ in range(4)]

    assert [r.success for r in results] == [True, True, True, False]
    assert [r.remaining for r in results] == [2, 1, 0, 0]
    assert {r.reset_at for r in results} == {1060.0}


def test_window_resets_after_expiry() -> None:
    clock = FakeClock()
    limiter = RateLimiter(clock=clock)
    for _ in range(2):
        limiter.check("client", limit=2, window_seconds=10)
    assert not limiter.check("client", limit=2, window_seconds=10).success

    clock.now += 10.5
    result = limiter.check("client", limit=2, window_seconds=10)
    assert result.success
    assert result.remaining == 1


def test_identifiers_and_buckets_are_independent() -> None:
    limiter = RateLimiter(clock=FakeClock())
    for _ in range(10):
        assert limiter.check_qr_create("a").success
    assert not limiter.check_qr_create("a").success
    assert limiter.check_qr_create("b").success
    assert limiter.check_export("a").success
    assert limiter.check_api("a").remaining == 59
    assert limiter.check_redirect("a").remaining == 999
    assert limiter.check_url_validate("a").remaining == 29


def test_sweep_drops_expired_windows() -> None:
    clock = FakeClock()
    limiter = RateLimiter(clock=clock)
    limiter.check("old", limit=5, window_seconds=10)
    clock.now += 5
    limiter.check("new", limit=5, window_seconds=10)
    assert len(limiter) == 2

    clock.now += 6
    assert limiter.sweep() == 1
    assert len(limiter) == 1
    assert limiter.sweep() == 0


def test_background_sweeper_starts_and_stops() -> None:
    limiter = RateLimiter(sweep_interval=0.01)
    limiter.start()
    limiter.start()
    limiter.stop(timeout=1)
    assert limiter._thread is None


def test_headers_for_blocked_request() -> None:
    blocked = RateLimitResult(success=False, remaining=0, reset_at=1060.2)
    headers = rate_limit_headers(blocked, now=1000.0)
    assert headers == {
        "X-RateLimit-Remaining": "0",
        "X-RateLimit-Reset": "1061",
        "Retry-After": "61",
    }

    allowed = RateLimitResult(success=True, remaining=4, reset_at=1060.0)
    assert "Retry-After" not in rate_limit_headers(allowed, now=1000.0)


def test_check_prunes_expired_windows_without_sweeper_thread() -> None:
    clock = FakeClock()
    limiter = RateLimiter(clock=clock, sweep_interval=60)
    for client in ("a", "b", "c"):
        limiter.check(client, limit=5, window_seconds=30)
    assert len(limiter) == 3

    clock.now += 45
    limiter.check("d", limit=5, window_seconds=30)
    # the sweep interval has not passed yet
    assert len(limiter) == 4

    clock.now += 20
    limiter.check("e", limit=5, window_seconds=30)
    assert len(limiter) == 2
    assert limiter._thread is None
