import redis

from ...application.ports.rate_limiter import RateLimiter


class RedisRateLimiter(RateLimiter):
    def __init__(self, url: str, prefix: str = "rl:") -> None:
        self.client = redis.Redis.from_url(url)
        self.prefix = prefix

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        rk = f"{self.prefix}{key}"
        # Fixed window: SET NX opens it with its expiry, INCR counts into it.
        # Works on Redis servers older than 7 (no EXPIRE NX needed).
        pipe = self.client.pipeline()
        pipe.set(rk, 0, ex=window_seconds, nx=True)
        pipe.incr(rk, 1)
        _, count = pipe.execute()
        return int(count) <= int(max_requests)

    def reset(self, key: str) -> None:
        self.client.delete(f"{self.prefix}{key}")
