"""
Redis client construction.
Separated from business logic for clean architecture.
"""

import redis.asyncio as redis

from onboard.core.config import Settings


def create_redis(settings: Settings) -> redis.Redis:
    """Build an async Redis client; connections are opened lazily."""
    return redis.from_url(
        settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
        health_check_interval=30,
    )
