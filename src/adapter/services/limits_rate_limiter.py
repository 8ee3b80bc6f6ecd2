import logging
import math

from limits import RateLimitItemPerSecond
from limits.aio.storage import Storage
from limits.aio.strategies import FixedWindowRateLimiter
from limits.errors import StorageError

from src.app.services.rate_limiter import IRateLimiter, RateLimitDecision, RateLimiterUnavailable

logger = logging.getLogger(__name__)


class LimitsRateLimiter(IRateLimiter):
    """
    Fixed-window limiter on top of the limits library.

    The storage decides where counters live: memory:// for local
    development and tests, async+redis:// when workers share state.
    Storages must be created with wrap_exceptions=True so backend errors
    surface as StorageError.
    """

    def __init__(
        self,
        storage: Storage,
        max_attempts: int,
        window_seconds: int,
        namespace: str = "pin-reset",
    ):
        self.storage = storage
        self.limiter = FixedWindowRateLimiter(storage)
        self.item = RateLimitItemPerSecond(max_attempts, window_seconds, namespace=namespace)

    async def check(self, identity: str) -> RateLimitDecision:
        key = self.key_for(identity)
        try:
            allowed = await self.limiter.test(self.item, key)
            stats = await self.limiter.get_window_stats(self.item, key)
        except StorageError as e:
            logger.error(f"Rate limiter check failed: {e}")
            raise RateLimiterUnavailable(str(e)) from e

        return RateLimitDecision(allowed=allowed, reset_at=math.ceil(stats.reset_time))

    async def record(self, identity: str) -> None:
        try:
            await self.limiter.hit(self.item, self.key_for(identity))
        except StorageError as e:
            logger.error(f"Rate limiter record failed: {e}")
            raise RateLimiterUnavailable(str(e)) from e
