"""Zone schemas for request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from maji.schemas.alert import AlertResponse


class ZoneStats(BaseModel):
    users_count: int
    vendors_count: int
    active_alerts: int


class ZoneResponse(BaseModel):
    """Schema for zone list entries."""

    zone_id: UUID
    name: str
    slug: str
    stats: ZoneStats


class ZoneListResponse(BaseModel):
    zones: list[ZoneResponse]
    total: int


class SupplyStatus(BaseModel):
    """Current supply picture for a zone, derived from its alerts."""

    has_water: bool
    last_supply: datetime | None = None
    next_expected: datetime | None = None
    active_alerts: list[AlertResponse]


class ZoneDetailResponse(BaseModel):
    zone_id: UUID
    name: str
    slug: str
    current_status: SupplyStatus
    stats: ZoneStats
