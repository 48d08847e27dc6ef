"""User service for the current user's profile."""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from maji.core.errors import NotFound
from maji.models.alert import Alert
from maji.models.order import Order
from maji.models.report import Report
from maji.models.user import User
from maji.models.zone import Zone

logger = logging.getLogger(__name__)


class UserService:
    """Service class for user operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: UUID) -> User:
        """Get a user with their primary zone loaded.

        Raises:
            NotFound: User does not exist
        """
        result = await self.db.execute(
            select(User)
            .options(selectinload(User.primary_zone))
            .where(User.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFound("user")
        return user

    async def get_stats(self, user_id: UUID) -> dict[str, int]:
        """Orders placed, reports filed and alerts posted by a user."""
        orders = await self.db.execute(
            select(func.count(Order.order_id)).where(Order.customer_id == user_id)
        )
        reports = await self.db.execute(
            select(func.count(Report.report_id)).where(Report.user_id == user_id)
        )
        alerts = await self.db.execute(
            select(func.count(Alert.alert_id)).where(Alert.scout_id == user_id)
        )
        return {
            "orders_count": orders.scalar_one(),
            "reports_count": reports.scalar_one(),
            "alerts_count": alerts.scalar_one(),
        }

    async def get_profile(self, user_id: UUID) -> tuple[User, dict[str, int]]:
        user = await self.get_by_id(user_id)
        return user, await self.get_stats(user_id)

    async def update_profile(
        self,
        user_id: UUID,
        name: str | None = None,
        primary_zone_id: UUID | None = None,
    ) -> User:
        """Update name and primary zone; None leaves a field unchanged.

        Raises:
            NotFound: User or zone does not exist
        """
        user = await self.get_by_id(user_id)

        if primary_zone_id is not None:
            result = await self.db.execute(select(Zone).where(Zone.zone_id == primary_zone_id))
            if result.scalar_one_or_none() is None:
                raise NotFound("zone")
            user.primary_zone_id = primary_zone_id
        if name is not None:
            user.name = name
        await self.db.commit()

        logger.info(f"User {user.user_id} updated profile")
        return await self.get_by_id(user_id)
