"""Tests for RedisService key layout and lock handling."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from maji.services.redis_service import NOTIFICATION_OUTBOX_KEY, RedisService


class TestOtpKeys:
    @pytest.mark.asyncio
    async def test_store_otp_sets_code_and_counter(self, mock_redis):
        service = RedisService(mock_redis)

        await service.store_otp("+23276123456", "abc", 300)

        mock_redis.set.assert_any_await("otp:+23276123456", "abc", ex=300)
        mock_redis.set.assert_any_await("otp:attempts:+23276123456", 0, ex=300)

    @pytest.mark.asyncio
    async def test_attempts_default_to_zero(self, mock_redis):
        service = RedisService(mock_redis)
        assert await service.get_otp_attempts("+23276123456") == 0

        mock_redis.get.return_value = "2"
        assert await service.get_otp_attempts("+23276123456") == 2

    @pytest.mark.asyncio
    async def test_delete_removes_both_keys(self, mock_redis):
        service = RedisService(mock_redis)
        await service.delete_otp("+23276123456")
        mock_redis.delete.assert_awaited_once_with(
            "otp:+23276123456", "otp:attempts:+23276123456"
        )


class TestLocks:
    @pytest.mark.asyncio
    async def test_acquire_uses_set_nx(self, mock_redis):
        service = RedisService(mock_redis)

        acquired, owner_id = await service.acquire_lock("report:LEAK", ttl=10)

        assert acquired is True
        assert owner_id
        mock_redis.set.assert_awaited_once_with("lock:report:LEAK", owner_id, nx=True, ex=10)

    @pytest.mark.asyncio
    async def test_acquire_taken(self, mock_redis):
        mock_redis.set.return_value = None
        service = RedisService(mock_redis)

        acquired, owner_id = await service.acquire_lock("report:LEAK", owner_id="me")

        assert acquired is False
        assert owner_id == "me"

    @pytest.mark.asyncio
    async def test_release_only_own_lock(self, mock_redis):
        script = AsyncMock(return_value=0)
        mock_redis.register_script = MagicMock(return_value=script)
        service = RedisService(mock_redis)

        released = await service.release_lock("report:LEAK", "not-me")

        assert released is False
        script.assert_awaited_once_with(keys=["lock:report:LEAK"], args=["not-me"])

    @pytest.mark.asyncio
    async def test_script_registered_once(self, mock_redis):
        service = RedisService(mock_redis)
        await service.release_lock("a", "x")
        await service.release_lock("b", "x")
        mock_redis.register_script.assert_called_once()


class TestOutbox:
    @pytest.mark.asyncio
    async def test_push_notification_serializes(self, mock_redis):
        service = RedisService(mock_redis)

        await service.push_notification({"kind": "ALERT", "data": {"eta": None}})

        key, raw = mock_redis.lpush.await_args.args
        assert key == NOTIFICATION_OUTBOX_KEY
        assert json.loads(raw) == {"kind": "ALERT", "data": {"eta": None}}
