"""
Moving window rate limiting shared by the collector API and its HTTP client.
"""
from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter

# Collector contract: 100 requests per 15 minutes per client
DEFAULT_MAX_REQUESTS = 100
DEFAULT_WINDOW_SECONDS = 15 * 60


class SlidingWindowRateLimiter:
    """
    Counts hits per key over a moving time window.
    Expired keys are dropped by the in-memory storage.
    """

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        namespace: str = "noise-pulse"
    ):
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = int(window_seconds)
        self.limit = RateLimitItemPerSecond(max_requests, self.window_seconds, namespace=namespace)
        self.storage = MemoryStorage()
        self._strategy = MovingWindowRateLimiter(self.storage)

    def allow(self, key: str) -> bool:
        """Registers a hit for key and returns False if it exceeds the limit."""
        return self._strategy.hit(self.limit, key)

    def remaining(self, key: str) -> int:
        return max(0, self._strategy.get_window_stats(self.limit, key)[1])

    def reset(self):
        self.storage.reset()
