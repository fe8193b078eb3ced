# leadintake/db/redis_client.py
import redis.asyncio as redis

from leadintake.config import REDIS_URL

# Create a Redis client instance
redis_client = redis.from_url(REDIS_URL, decode_responses=True)

async def get_redis():
    """
    Dependency to provide Redis client in FastAPI endpoints
    Usage: `redis: redis.Redis = Depends(get_redis)`
    """
    try:
        yield redis_client
    finally:
        pass  # client persists for the app lifetime
