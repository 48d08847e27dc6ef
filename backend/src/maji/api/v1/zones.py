"""Zone API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query

from maji.api.deps import ZoneServiceDep
from maji.api.v1.vendors import listing_response
from maji.schemas.alert import AlertResponse
from maji.schemas.vendor import VendorListResponse
from maji.schemas.zone import (
    SupplyStatus,
    ZoneDetailResponse,
    ZoneListResponse,
    ZoneResponse,
    ZoneStats,
)

router = APIRouter()


@router.get("", response_model=ZoneListResponse)
async def list_zones(
    zone_service: ZoneServiceDep,
    search: str | None = Query(None, max_length=100),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
):
    """List zones by name with resident, vendor and alert counts."""
    zones, total = await zone_service.list_zones(search=search, skip=skip, limit=limit)
    return ZoneListResponse(
        zones=[
            ZoneResponse(zone_id=z.zone_id, name=z.name, slug=z.slug, stats=ZoneStats(**stats))
            for z, stats in zones
        ],
        total=total,
    )


@router.get("/{zone_id}", response_model=ZoneDetailResponse)
async def get_zone(zone_id: UUID, zone_service: ZoneServiceDep):
    """Get a zone with its current water supply status."""
    zone, supply, stats = await zone_service.get_zone(zone_id)
    return ZoneDetailResponse(
        zone_id=zone.zone_id,
        name=zone.name,
        slug=zone.slug,
        current_status=SupplyStatus(
            has_water=supply["has_water"],
            last_supply=supply["last_supply"],
            next_expected=supply["next_expected"],
            active_alerts=[AlertResponse.model_validate(a) for a in supply["active_alerts"]],
        ),
        stats=ZoneStats(**stats),
    )


@router.get("/{zone_id}/vendors", response_model=VendorListResponse)
async def list_zone_vendors(
    zone_id: UUID,
    zone_service: ZoneServiceDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
):
    """Vendors delivering to a zone, best rated first."""
    listings, total = await zone_service.list_zone_vendors(zone_id, skip=skip, limit=limit)
    return listing_response(listings, total)
