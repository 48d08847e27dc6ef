"""Zone service for zone listings and per-zone supply status."""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from maji.core.errors import NotFound
from maji.models.alert import Alert
from maji.models.base import utcnow
from maji.models.enums import AlertStatus, AlertType
from maji.models.user import User
from maji.models.vendor import Vendor, vendor_zones
from maji.models.zone import Zone
from maji.services.vendor_service import VendorListing, VendorService

logger = logging.getLogger(__name__)

SUPPLY_ALERT_TYPES = (AlertType.WATER_ACTIVE, AlertType.WATER_ENDED)
RECENT_ZONE_ALERTS = 5


class ZoneService:
    """Service class for zone operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_zone(self, zone_id: UUID) -> Zone:
        result = await self.db.execute(select(Zone).where(Zone.zone_id == zone_id))
        zone = result.scalar_one_or_none()
        if zone is None:
            raise NotFound("zone")
        return zone

    async def _zone_stats(self, zone_ids: list[UUID]) -> dict[UUID, dict[str, int]]:
        """Residents, delivering vendors and active alerts per zone."""
        stats = {
            zone_id: {"users_count": 0, "vendors_count": 0, "active_alerts": 0}
            for zone_id in zone_ids
        }
        if not zone_ids:
            return stats

        users = await self.db.execute(
            select(User.primary_zone_id, func.count(User.user_id))
            .where(User.primary_zone_id.in_(zone_ids))
            .group_by(User.primary_zone_id)
        )
        for zone_id, count in users.all():
            stats[zone_id]["users_count"] = count

        vendors = await self.db.execute(
            select(vendor_zones.c.zone_id, func.count(Vendor.vendor_id))
            .join(Vendor, Vendor.vendor_id == vendor_zones.c.vendor_id)
            .where(
                vendor_zones.c.zone_id.in_(zone_ids),
                Vendor.is_active.is_(True),
                Vendor.is_verified.is_(True),
            )
            .group_by(vendor_zones.c.zone_id)
        )
        for zone_id, count in vendors.all():
            stats[zone_id]["vendors_count"] = count

        alerts = await self.db.execute(
            select(Alert.zone_id, func.count(Alert.alert_id))
            .where(Alert.zone_id.in_(zone_ids), Alert.status == AlertStatus.ACTIVE)
            .group_by(Alert.zone_id)
        )
        for zone_id, count in alerts.all():
            stats[zone_id]["active_alerts"] = count

        return stats

    async def list_zones(
        self, search: str | None = None, skip: int = 0, limit: int = 50
    ) -> tuple[list[tuple[Zone, dict[str, int]]], int]:
        """List zones by name with their stats.

        Args:
            search: Case-insensitive substring of the zone name
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Tuple of ([(zone, stats)], total count)
        """
        filters = []
        if search:
            filters.append(Zone.name.ilike(f"%{search}%"))

        count_result = await self.db.execute(select(func.count(Zone.zone_id)).where(*filters))
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(Zone).where(*filters).order_by(Zone.name.asc()).offset(skip).limit(limit)
        )
        zones = list(result.scalars().all())
        stats = await self._zone_stats([z.zone_id for z in zones])
        return [(zone, stats[zone.zone_id]) for zone in zones], total

    async def get_zone(self, zone_id: UUID) -> tuple[Zone, dict[str, Any], dict[str, int]]:
        """Get a zone with its current supply status.

        Supply status comes from alerts: the zone has water if its latest
        WATER_ACTIVE/WATER_ENDED alert is WATER_ACTIVE, and the next expected
        supply is the earliest future eta of an active WATER_COMING alert.

        Returns:
            Tuple of (zone, supply status, stats)

        Raises:
            NotFound: Zone does not exist
        """
        zone = await self._get_zone(zone_id)

        last_result = await self.db.execute(
            select(Alert)
            .where(Alert.zone_id == zone_id, Alert.type.in_(SUPPLY_ALERT_TYPES))
            .order_by(Alert.created_at.desc())
            .limit(1)
        )
        last_supply = last_result.scalar_one_or_none()

        upcoming_result = await self.db.execute(
            select(Alert)
            .where(
                Alert.zone_id == zone_id,
                Alert.type == AlertType.WATER_COMING,
                Alert.status == AlertStatus.ACTIVE,
                Alert.eta > utcnow(),
            )
            .order_by(Alert.eta.asc())
            .limit(1)
        )
        upcoming = upcoming_result.scalar_one_or_none()

        active_result = await self.db.execute(
            select(Alert)
            .where(Alert.zone_id == zone_id, Alert.status == AlertStatus.ACTIVE)
            .order_by(Alert.created_at.desc())
            .limit(RECENT_ZONE_ALERTS)
        )

        status = {
            "has_water": last_supply is not None and last_supply.type == AlertType.WATER_ACTIVE,
            "last_supply": last_supply.created_at if last_supply else None,
            "next_expected": upcoming.eta if upcoming else None,
            "active_alerts": list(active_result.scalars().all()),
        }
        stats = await self._zone_stats([zone.zone_id])
        return zone, status, stats[zone.zone_id]

    async def list_zone_vendors(
        self, zone_id: UUID, skip: int = 0, limit: int = 20
    ) -> tuple[list[VendorListing], int]:
        """Vendors delivering to a zone, best rated first.

        Raises:
            NotFound: Zone does not exist
        """
        await self._get_zone(zone_id)
        return await VendorService(self.db).list_vendors(zone_id=zone_id, skip=skip, limit=limit)
