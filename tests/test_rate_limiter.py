from chicktrack.infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter


def test_memory_rate_limiter_allows_then_blocks():
    rl = InMemoryRateLimiter()
    key = "otp-resend:1"
    assert rl.allow(key, max_requests=2, window_seconds=60) is True
    assert rl.allow(key, max_requests=2, window_seconds=60) is True
    assert rl.allow(key, max_requests=2, window_seconds=60) is False
    assert rl.allow("otp-resend:2", max_requests=2, window_seconds=60) is True


def test_memory_rate_limiter_window_slides(monkeypatch):
    from chicktrack.infrastructure.rate_limit import memory_rate_limiter as mod

    now = [1000.0]
    monkeypatch.setattr(mod.time, "time", lambda: now[0])
    rl = InMemoryRateLimiter()
    assert rl.allow("k", 1, 30) is True
    assert rl.allow("k", 1, 30) is False
    now[0] += 31
    assert rl.allow("k", 1, 30) is True


def test_memory_rate_limiter_reset_reopens_key():
    rl = InMemoryRateLimiter()
    assert rl.allow("k", 1, 30) is True
    assert rl.allow("k", 1, 30) is False
    rl.reset("k")
    assert rl.allow("k", 1, 30) is True


def test_redis_rate_limiter_with_fake(monkeypatch):
    class FakePipe:
        def __init__(self, client):
            self.client = client
            self.ops = []

        def set(self, k, v, ex=None, nx=False):
            self.ops.append(("set", k, v, ex, nx))
            return self

        def incr(self, k, n):
            self.ops.append(("incr", k, n))
            return self

        def expire(self, *args, **kwargs):
            raise AssertionError("EXPIRE NX needs Redis 7; the limiter must not use it")

        def execute(self):
            results = []
            for op in self.ops:
                if op[0] == "set":
                    if op[4] and op[1] in self.client.store:
                        results.append(None)
                        continue
                    self.client.store[op[1]] = op[2]
                    self.client.ttls[op[1]] = op[3]
                    results.append(True)
                else:
                    self.client.store[op[1]] = self.client.store.get(op[1], 0) + op[2]
                    results.append(self.client.store[op[1]])
            return results

    class FakeRedis:
        def __init__(self):
            self.store = {}
            self.ttls = {}

        @classmethod
        def from_url(cls, url):
            return cls()

        def pipeline(self):
            return FakePipe(self)

        def delete(self, k):
            self.store.pop(k, None)
            self.ttls.pop(k, None)

    from chicktrack.infrastructure.rate_limit import redis_rate_limiter as mod
    monkeypatch.setattr(mod.redis, "Redis", FakeRedis)

    rl = mod.RedisRateLimiter(url="redis://fake", prefix="chicktrack:")

    assert rl.allow("otp-resend:1", 2, 60) is True
    assert rl.allow("otp-resend:1", 2, 60) is True
    assert rl.allow("otp-resend:1", 2, 60) is False
    assert rl.client.ttls == {"chicktrack:otp-resend:1": 60}

    rl.reset("otp-resend:1")
    assert rl.allow("otp-resend:1", 2, 60) is True
