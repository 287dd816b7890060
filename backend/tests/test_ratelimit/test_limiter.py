"""Unit tests for the fixed-window rate limiter."""

from datetime import datetime, timezone

from app.ratelimit.limiter import InMemoryRateLimitStore, RateLimiter, RateLimitPolicy

POLICY = RateLimitPolicy(name="test", max_requests=3, window_seconds=3600)


class TestRateLimiter:
    """Counting, denial, and window reset."""

    def test_first_request_allowed(self, rate_limiter: RateLimiter):
        decision = rate_limiter.check("key:a", POLICY)
        assert decision.allowed
        assert decision.limit == 3
        assert decision.remaining == 2

    def test_denies_after_limit(self, rate_limiter: RateLimiter):
        decisions = [rate_limiter.check("key:a", POLICY) for _ in range(4)]
        assert [d.allowed for d in decisions] == [True, True, True, False]
        assert decisions[-1].remaining == 0

    def test_identities_are_counted_separately(self, rate_limiter: RateLimiter):
        for _ in range(3):
            rate_limiter.check("key:a", POLICY)
        assert rate_limiter.check("ip:10.0.0.1", POLICY).allowed
        assert not rate_limiter.check("key:a", POLICY).allowed

    def test_window_resets_after_elapsing(self, rate_limiter: RateLimiter, clock):
        for _ in range(4):
            rate_limiter.check("key:a", POLICY)

        clock.advance(3601)
        decision = rate_limiter.check("key:a", POLICY)
        assert decision.allowed
        assert decision.remaining == 2

    def test_window_does_not_reset_at_exact_boundary(self, rate_limiter: RateLimiter, clock):
        for _ in range(3):
            rate_limiter.check("key:a", POLICY)

        clock.advance(3600)
        assert not rate_limiter.check("key:a", POLICY).allowed

    def test_reset_time_is_window_end(self, rate_limiter: RateLimiter, clock):
        start = clock.now
        clock.advance(100)
        decision = rate_limiter.check("key:a", POLICY)
        expected = datetime.fromtimestamp(start + 100 + 3600, tz=timezone.utc)
        assert decision.reset_at == expected

        # Later requests in the same window keep the original reset time
        clock.advance(500)
        assert rate_limiter.check("key:a", POLICY).reset_at == expected

    def test_headers(self, rate_limiter: RateLimiter):
        headers = rate_limiter.check("key:a", POLICY).headers()
        assert headers["X-RateLimit-Limit"] == "3"
        assert headers["X-RateLimit-Remaining"] == "2"
        assert datetime.fromisoformat(headers["X-RateLimit-Reset"]).tzinfo is not None

    def test_limiters_do_not_share_state(self, clock):
        first = RateLimiter(InMemoryRateLimitStore(), clock=clock)
        second = RateLimiter(InMemoryRateLimitStore(), clock=clock)
        for _ in range(3):
            first.check("key:a", POLICY)
        assert second.check("key:a", POLICY).remaining == 2


class TestInMemoryRateLimitStore:
    def test_hit_and_get(self):
        store = InMemoryRateLimitStore()
        store.hit("key:a", 10.0, 60)
        state = store.hit("key:a", 20.0, 60)
        assert state.count == 2
        assert state.window_start == 10.0
        assert store.get("key:a") == state

    def test_clear(self):
        store = InMemoryRateLimitStore()
        store.hit("key:a", 10.0, 60)
        store.clear()
        assert store.get("key:a") is None

    def test_expired_counters_are_pruned(self):
        store = InMemoryRateLimitStore()
        for i in range(100):
            store.hit(f"ip:10.0.0.{i}", 10.0, 60)
        store.hit("ip:10.0.1.1", 80.0, 60)
        assert store.get("ip:10.0.0.1") is None
        assert store.get("ip:10.0.1.1").count == 1

    def test_live_counters_survive_pruning(self):
        store = InMemoryRateLimitStore()
        store.hit("key:old", 0.0, 60)
        store.hit("key:live", 50.0, 60)
        store.hit("key:other", 70.0, 60)
        assert store.get("key:old") is None
        assert store.get("key:live").count == 1
