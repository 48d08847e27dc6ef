"""Redis service for OTP storage, distributed locks and the notification outbox."""

import json
import uuid
from typing import Any

from redis.asyncio import Redis

NOTIFICATION_OUTBOX_KEY = "notifications:outbox"


class RedisService:
    """Service class for Redis operations."""

    # Lua script for safe lock release (only delete own lock)
    RELEASE_LOCK_SCRIPT = """
    if redis.call("GET", KEYS[1]) == ARGV[1] then
        return redis.call("DEL", KEYS[1])
    else
        return 0
    end
    """

    def __init__(self, redis: Redis):
        """Initialize Redis service with a Redis client.

        Args:
            redis: Async Redis client instance
        """
        self.redis = redis
        self._release_lock_script = None

    async def _get_release_lock_script(self):
        """Get or register the release lock Lua script."""
        if self._release_lock_script is None:
            self._release_lock_script = self.redis.register_script(self.RELEASE_LOCK_SCRIPT)
        return self._release_lock_script

    # ==================== OTP Operations ====================

    async def store_otp(self, phone: str, code_hash: str, ttl: int) -> None:
        """Store a hashed OTP and reset its attempt counter.

        Key pattern: otp:{phone}, otp:attempts:{phone}

        Args:
            phone: Normalized phone number
            code_hash: Hash of the OTP code
            ttl: Expiry in seconds
        """
        await self.redis.set(f"otp:{phone}", code_hash, ex=ttl)
        await self.redis.set(f"otp:attempts:{phone}", 0, ex=ttl)

    async def get_otp(self, phone: str) -> str | None:
        return await self.redis.get(f"otp:{phone}")

    async def get_otp_attempts(self, phone: str) -> int:
        value = await self.redis.get(f"otp:attempts:{phone}")
        return int(value) if value else 0

    async def increment_otp_attempts(self, phone: str) -> int:
        """Count one failed verification attempt.

        Returns:
            Number of failed attempts so far
        """
        return await self.redis.incr(f"otp:attempts:{phone}")

    async def delete_otp(self, phone: str) -> None:
        await self.redis.delete(f"otp:{phone}", f"otp:attempts:{phone}")

    # ==================== Distributed Lock Operations ====================

    async def acquire_lock(
        self, name: str, owner_id: str | None = None, ttl: int = 5
    ) -> tuple[bool, str]:
        """Acquire a named distributed lock.

        Key pattern: lock:{name}
        Uses SET NX EX for atomic lock acquisition.

        Args:
            name: Lock name, e.g. ``report:LEAK``
            owner_id: Unique identifier for lock owner (auto-generated if None)
            ttl: Lock timeout in seconds

        Returns:
            Tuple of (success, owner_id)
        """
        key = f"lock:{name}"
        if owner_id is None:
            owner_id = str(uuid.uuid4())

        acquired = await self.redis.set(key, owner_id, nx=True, ex=ttl)
        return (bool(acquired), owner_id)

    async def release_lock(self, name: str, owner_id: str) -> bool:
        """Release a distributed lock (only if owner matches).

        Args:
            name: Lock name passed to acquire_lock
            owner_id: The owner_id returned from acquire_lock

        Returns:
            True if lock was released, False if not owner or not locked
        """
        key = f"lock:{name}"
        script = await self._get_release_lock_script()
        result = await script(keys=[key], args=[owner_id])
        return int(result) == 1

    # ==================== Notification Outbox ====================

    async def push_notification(self, payload: dict[str, Any]) -> int:
        """Append a notification to the outbox list consumed by the sender.

        Returns:
            Outbox length after the push
        """
        return await self.redis.lpush(NOTIFICATION_OUTBOX_KEY, json.dumps(payload, default=str))
