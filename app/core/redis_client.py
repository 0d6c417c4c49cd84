import logging
from typing import Optional

import redis.asyncio as redis
from fastapi import Request
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


async def get_redis(request: Request) -> redis.Redis:
    """Get Redis client"""
    return request.app.state.redis


async def init_redis(url: str) -> redis.Redis:
    """Initialize Redis connection"""
    client = redis.from_url(url, decode_responses=True)

    # Test connection; only refresh and logout depend on Redis
    try:
        await client.ping()
        logger.info("Redis connection established")
    except RedisError as e:
        logger.warning("Redis connection failed: %s", e)
    return client


def refresh_token_key(user_id: int) -> str:
    return f"refresh_token:{user_id}"


async def store_refresh_token(client: redis.Redis, user_id: int, token: str, ttl_seconds: int) -> None:
    await client.setex(refresh_token_key(user_id), ttl_seconds, token)


async def get_refresh_token(client: redis.Redis, user_id: int) -> Optional[str]:
    return await client.get(refresh_token_key(user_id))


async def revoke_tokens(client: redis.Redis, user_id: int) -> None:
    await client.delete(refresh_token_key(user_id))
