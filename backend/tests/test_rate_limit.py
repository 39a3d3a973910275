from quizlink.core.rate_limit import MemoryRateLimiter, RedisRateLimiter


def test_memory_limiter_fixed_window():
    limiter = MemoryRateLimiter(limit=2, window_seconds=60)
    assert limiter.allow("k") is True
    assert limiter.allow("k") is True
    assert limiter.allow("k") is False
    assert limiter.allow("other") is True
    assert 0 < limiter.retry_after("k") <= 60

    limiter.reset()
    assert limiter.allow("k") is True


def test_memory_limiter_drops_expired_windows():
    now = [1000.0]
    limiter = MemoryRateLimiter(limit=1, window_seconds=60, clock=lambda: now[0])
    for i in range(50):
        assert limiter.allow(f"ip-{i}") is True
    assert len(limiter._windows) == 50

    now[0] += 61
    assert limiter.allow("late") is True
    assert list(limiter._windows) == ["late"]


def test_redis_limiter_fixed_window(mem_redis):
    limiter = RedisRateLimiter(mem_redis, limit=2, window_seconds=60)
    assert limiter.allow("rl:test:k") is True
    assert limiter.allow("rl:test:k") is True
    assert limiter.allow("rl:test:k") is False
    assert 0 < limiter.retry_after("rl:test:k") <= 60


class _BrokenRedis:
    def incr(self, key):
        raise ConnectionError("redis down")


def test_redis_limiter_fails_open():
    limiter = RedisRateLimiter(_BrokenRedis(), limit=1, window_seconds=60)
    assert limiter.allow("k") is True
    assert limiter.allow("k") is True


def test_public_endpoints_are_rate_limited(client):
    statuses = [client.get("/public/quiz/no-such-quiz").status_code for _ in range(31)]
    assert statuses[:30] == [404] * 30
    assert statuses[30] == 429

    r = client.get("/public/quiz/no-such-quiz")
    assert r.status_code == 429
    assert r.json()["error_code"] == "rate_limited"
    assert int(r.headers["Retry-After"]) > 0
