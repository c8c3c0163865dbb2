"""Process-local fixed-window rate limiter keyed by caller (usually the client IP)."""

import time
from typing import Callable


class RateLimiter:
    """Counts requests per key inside a fixed window.

    The first request of a window starts it; later requests only increment the
    counter. Records are not shared between processes, and a race near the window
    boundary may undercount by one, which is tolerated.
    """

    def __init__(self, max_requests: int, window_seconds: float, clock: Callable[[], float] = time.time) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._records: dict[str, dict] = {}

    def is_allowed(self, key: str) -> bool:
        """Register one request for the key and report whether it is within the limit.

        Args:
            key (str): The caller identity (e.g. an IP address).

        Returns:
            bool: False once the key has used up its window allowance.
        """
        now = self._clock()
        record = self._records.get(key)
        if record is None or now - record["ts"] > self.window_seconds:
            self._prune(now)
            self._records[key] = {"count": 1, "ts": now}
            return True
        if record["count"] >= self.max_requests:
            return False
        record["count"] += 1
        return True

    def _prune(self, now: float) -> None:
        expired = [key for key, record in self._records.items() if now - record["ts"] > self.window_seconds]
        for key in expired:
            del self._records[key]

    def tracked_keys(self) -> int:
        return len(self._records)

    def reset(self) -> None:
        """Forget every record."""
        self._records.clear()
