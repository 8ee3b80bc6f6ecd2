import logging
from datetime import UTC, datetime

from libs.result import Result, Return
from src.app.services.rate_limiter import IRateLimiter, RateLimiterUnavailable, retry_after_minutes
from .errors import RATE_LIMITER_UNAVAILABLE, rate_limited

logger = logging.getLogger(__name__)


async def check_rate_limit(rate_limiter: IRateLimiter, identity: str, now: datetime) -> Result[None]:
    """RATE_LIMITED (with retry-after) when identity has used up its window"""
    try:
        decision = await rate_limiter.check(identity)
    except RateLimiterUnavailable:
        return Return.err(RATE_LIMITER_UNAVAILABLE)

    if not decision.allowed:
        retry_after = retry_after_minutes(decision.reset_at, now.replace(tzinfo=UTC).timestamp())
        logger.warning(f"PIN reset rate limit hit, retry after {retry_after} min")
        return Return.err(rate_limited(retry_after, decision.reset_at))

    return Return.ok(None)


async def record_attempt(rate_limiter: IRateLimiter, identity: str) -> None:
    """
    Count a completed attempt.

    Runs after the guarded action already took effect, so a limiter outage
    here is logged rather than reported as a failed request.
    """
    try:
        await rate_limiter.record(identity)
    except RateLimiterUnavailable:
        logger.error("Could not record PIN reset attempt; limiter unavailable")
