"""Business logic services."""

from maji.services.redis_service import RedisService

__all__ = [
    "RedisService",
]
