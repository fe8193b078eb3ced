import logging
from redis.asyncio import Redis
from redis.exceptions import RedisError

from leadintake.config import IMPORT_RATE_LIMIT, IMPORT_RATE_WINDOW_SECONDS
from leadintake.services.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)


async def enforce_rate_limit(
    redis: Redis,
    identifier: str,
    limit: int = IMPORT_RATE_LIMIT,
    window: int = IMPORT_RATE_WINDOW_SECONDS,
) -> int:
    """
    Fixed-window counter: INCR a per-identifier key and start its expiry on
    the first hit. Raises RateLimitExceeded once the count passes `limit`.
    If Redis is unreachable the request is let through.
    """
    key = f"rate_limit:{identifier}"
    try:
        current = await redis.incr(key)
        if current == 1:
            await redis.expire(key, window)
    except RedisError as e:
        logger.warning("Rate limit check skipped for %s: %s", identifier, e)
        return 0

    if current > limit:
        raise RateLimitExceeded("Too many requests")
    return current
