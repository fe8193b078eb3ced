"""Tests for the Redis fixed-window rate limiter."""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from leadintake.services.exceptions import RateLimitExceeded
from leadintake.services.rate_limit import enforce_rate_limit


@pytest.mark.asyncio
async def test_first_hit_starts_window(redis_mock):
    count = await enforce_rate_limit(redis_mock, "import:abc", limit=10, window=60)

    assert count == 1
    redis_mock.incr.assert_awaited_once_with("rate_limit:import:abc")
    redis_mock.expire.assert_awaited_once_with("rate_limit:import:abc", 60)


@pytest.mark.asyncio
async def test_later_hits_keep_window(redis_mock):
    redis_mock.incr.return_value = 10

    assert await enforce_rate_limit(redis_mock, "import:abc", limit=10, window=60) == 10
    redis_mock.expire.assert_not_awaited()


@pytest.mark.asyncio
async def test_over_limit_raises(redis_mock):
    redis_mock.incr.return_value = 11

    with pytest.raises(RateLimitExceeded, match="Too many requests"):
        await enforce_rate_limit(redis_mock, "import:abc", limit=10, window=60)


@pytest.mark.asyncio
async def test_redis_down_lets_request_through():
    redis = AsyncMock()
    redis.incr.side_effect = RedisConnectionError("connection refused")

    assert await enforce_rate_limit(redis, "import:abc") == 0
