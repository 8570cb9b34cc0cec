"""
Rate Limiter - Control chat request frequency per user.

Every chat request costs hosted-model tokens, so each authenticated user
gets a fixed number of chat requests per sliding one-minute window.

The limiter is in-process; a deployment with several workers gets one
window per worker.
"""
import math
import threading
from collections import deque
from datetime import datetime, timedelta
from typing import Deque, Dict, Optional, Tuple

from saaskit.core.logging_config import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    Sliding window rate limiter keyed by user id.

    Example:
        >>> limiter = RateLimiter(requests_per_minute=30)
        >>> limiter.is_allowed("user_2abc")
        (True, 29)
    """

    def __init__(
        self,
        requests_per_minute: int = 30,
        cleanup_interval_minutes: int = 5
    ):
        self.limit = requests_per_minute
        self.window = timedelta(minutes=1)
        self.cleanup_interval = timedelta(minutes=cleanup_interval_minutes)

        self._requests: Dict[str, Deque[datetime]] = {}
        self._lock = threading.RLock()
        self._last_cleanup = datetime.utcnow()

        logger.info(f"RateLimiter initialized: {requests_per_minute} requests/minute")

    def is_allowed(self, user_id: str, now: Optional[datetime] = None) -> Tuple[bool, int]:
        """
        Record a request for ``user_id`` if it fits in the window.

        Returns:
            Tuple of (is_allowed, remaining_requests)
        """
        now = now or datetime.utcnow()
        with self._lock:
            self._maybe_cleanup(now)

            hits = self._requests.setdefault(user_id, deque())
            self._evict(hits, now)

            if len(hits) >= self.limit:
                logger.warning(f"Rate limit exceeded for user={user_id}")
                return False, 0

            hits.append(now)
            return True, self.limit - len(hits)

    def retry_after(self, user_id: str, now: Optional[datetime] = None) -> int:
        """Seconds until the oldest request in the window expires (at least 1)."""
        now = now or datetime.utcnow()
        with self._lock:
            hits = self._requests.get(user_id)
            if not hits:
                return 1
            reset_at = hits[0] + self.window
            return max(1, math.ceil((reset_at - now).total_seconds()))

    def reset(self) -> None:
        with self._lock:
            self._requests.clear()

    def _evict(self, hits: Deque[datetime], now: datetime) -> None:
        cutoff = now - self.window
        while hits and hits[0] <= cutoff:
            hits.popleft()

    def _maybe_cleanup(self, now: datetime) -> None:
        """Drop users with no requests in the current window."""
        if now - self._last_cleanup < self.cleanup_interval:
            return

        for user_id in list(self._requests.keys()):
            hits = self._requests[user_id]
            self._evict(hits, now)
            if not hits:
                del self._requests[user_id]

        self._last_cleanup = now
        logger.debug(f"Rate limiter cleanup: {len(self._requests)} active users")


_rate_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """Get or create the global rate limiter."""
    global _rate_limiter
    if _rate_limiter is None:
        from saaskit.core.config import get_settings
        _rate_limiter = RateLimiter(
            requests_per_minute=get_settings().rate_limit_per_minute
        )
    return _rate_limiter


def reset_rate_limiter() -> None:
    """Discard the global limiter (used by tests)."""
    global _rate_limiter
    _rate_limiter = None
