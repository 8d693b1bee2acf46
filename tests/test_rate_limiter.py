# =============================================================================
# tests/test_rate_limiter.py - Rate Limiting Tests
# =============================================================================

import redis

from lib.rate_limiter import MemoryRateLimitBackend, RateLimiter, RateLimitResult


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class BrokenBackend:
    def hit(self, key, limit, window_ms) -> RateLimitResult:
        raise redis.ConnectionError("connection refused")

    def reset(self) -> None:
        pass


class TestMemoryBackend:
    """Tests for the fixed-window memory backend."""

    def test_allows_up_to_limit(self):
        backend = MemoryRateLimitBackend(clock=FakeClock())

        results = [backend.hit("k", 3, 60_000) for _ in range(3)]

        assert all(r.allowed for r in results)
        assert [r.remaining for r in results] == [2, 1, 0]

    def test_blocks_over_limit_with_retry_after(self):
        clock = FakeClock()
        backend = MemoryRateLimitBackend(clock=clock)
        for _ in range(3):
            backend.hit("k", 3, 60_000)

        clock.now += 10
        blocked = backend.hit("k", 3, 60_000)

        assert blocked.allowed is False
        assert blocked.retry_after_ms == 50_000

    def test_window_resets(self):
        clock = FakeClock()
        backend = MemoryRateLimitBackend(clock=clock)
        for _ in range(4):
            backend.hit("k", 3, 60_000)

        clock.now += 60

        assert backend.hit("k", 3, 60_000).allowed is True

    def test_keys_are_independent(self):
        backend = MemoryRateLimitBackend(clock=FakeClock())
        backend.hit("a", 1, 60_000)

        assert backend.hit("b", 1, 60_000).allowed is True
        assert backend.hit("a", 1, 60_000).allowed is False


class TestRateLimiter:
    """Tests for the limiter facade."""

    def test_fails_open_when_store_unreachable(self):
        limiter = RateLimiter(BrokenBackend())

        result = limiter.check("bucket", "1.2.3.4", 5, 60_000)

        assert result.allowed is True


class TestRateLimitDependency:
    """The dependency answers 429 with retry_after_ms and a Retry-After header."""

    def test_forgot_password_limited(self, client):
        for _ in range(5):
            response = client.post("/api/v1/auth/forgot-password", json={"email": "x@example.com"})
            assert response.status_code == 200

        response = client.post("/api/v1/auth/forgot-password", json={"email": "x@example.com"})

        assert response.status_code == 429
        body = response.json()["error"]
        assert body["code"] == "RATE_LIMITED"
        assert body["details"]["retry_after_ms"] > 0
        assert "Retry-After" in response.headers
