"""Fire-and-forget notification dispatch.

Notifications are pushed onto a Redis outbox for an external SMS/push sender.
They are only dispatched after the triggering change has been committed, and
a failed push is logged without affecting that change.
"""

import asyncio
import logging
from typing import Any
from uuid import UUID

from maji.models.base import utcnow
from maji.models.enums import NotificationKind
from maji.services.redis_service import RedisService

logger = logging.getLogger(__name__)

# Strong references to in-flight dispatch tasks
_pending_tasks: set[asyncio.Task] = set()


class NotificationService:
    """Service class for outgoing notifications."""

    def __init__(self, redis_service: RedisService):
        self.redis_service = redis_service

    async def send(
        self,
        kind: NotificationKind,
        data: dict[str, Any],
        recipient_id: UUID | None = None,
        zone_id: UUID | None = None,
    ) -> bool:
        """Push one notification to the outbox.

        Returns:
            True if queued, False if the push failed
        """
        payload = {
            "kind": kind.value,
            "recipient_id": str(recipient_id) if recipient_id else None,
            "zone_id": str(zone_id) if zone_id else None,
            "data": data,
            "created_at": utcnow().isoformat(),
        }
        try:
            await self.redis_service.push_notification(payload)
        except Exception as e:
            logger.error(f"Failed to queue {kind.value} notification: {e}")
            return False
        return True

    def dispatch(
        self, recipient_id: UUID, kind: NotificationKind, data: dict[str, Any]
    ) -> asyncio.Task:
        """Schedule a notification to a single user without awaiting it."""
        return self._schedule(self.send(kind, data, recipient_id=recipient_id))

    def broadcast_zone(
        self, zone_id: UUID, kind: NotificationKind, data: dict[str, Any]
    ) -> asyncio.Task:
        """Schedule a notification to every user subscribed to a zone."""
        return self._schedule(self.send(kind, data, zone_id=zone_id))

    @staticmethod
    def _schedule(coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        _pending_tasks.add(task)
        task.add_done_callback(_pending_tasks.discard)
        return task
