import math
from abc import ABC, abstractmethod
from dataclasses import dataclass


class RateLimiterUnavailable(Exception):
    """Raised when the limiter's backing store cannot be reached"""


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    reset_at: int  # Unix timestamp (seconds) when the current window rolls over


def retry_after_minutes(reset_at: int, now: float) -> int:
    """Whole minutes until reset_at, rounded up"""
    return max(0, math.ceil((reset_at - now) / 60))


class IRateLimiter(ABC):
    """
    Per-identity attempt limiter - application layer.

    check() is side-effect-free and must be called before any expensive
    work. record() is called only after the guarded action fully succeeds,
    so failed attempts do not consume quota.
    """

    @staticmethod
    def key_for(identity: str) -> str:
        return identity.strip().lower()

    @abstractmethod
    async def check(self, identity: str) -> RateLimitDecision:
        """Return whether another attempt is allowed in the current window"""
        pass

    @abstractmethod
    async def record(self, identity: str) -> None:
        """Atomically count one completed attempt against the identity"""
        pass
