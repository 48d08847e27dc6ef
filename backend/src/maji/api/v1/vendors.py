"""Vendor marketplace API endpoints."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, Response, status

from maji.api.deps import CurrentUser, VendorServiceDep
from maji.schemas.vendor import (
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    ReviewSummary,
    VendorCreate,
    VendorDetailResponse,
    VendorListItem,
    VendorListResponse,
    VendorResponse,
    VendorSort,
    VendorUpdate,
)
from maji.services.vendor_service import VendorListing

router = APIRouter()


def listing_response(listings: list[VendorListing], total: int) -> VendorListResponse:
    return VendorListResponse(
        vendors=[
            VendorListItem(
                **VendorResponse.model_validate(item.vendor).model_dump(),
                distance=item.distance,
                products=[ProductResponse.model_validate(p) for p in item.products],
            )
            for item in listings
        ],
        total=total,
    )


@router.get("", response_model=VendorListResponse)
async def list_vendors(
    vendor_service: VendorServiceDep,
    zone_id: UUID | None = None,
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
    radius: float = Query(5000, ge=100, le=50000),
    min_rating: float | None = Query(None, ge=0, le=5),
    sort: VendorSort = "rating",
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
):
    """Find active, verified vendors.

    Passing both lat and lng limits results to the radius (meters) and
    reports each vendor's distance.
    """
    if (lat is None) != (lng is None):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="lat and lng must be given together",
        )
    near = (lng, lat) if lat is not None else None
    listings, total = await vendor_service.list_vendors(
        zone_id=zone_id,
        min_rating=min_rating,
        near=near,
        radius_meters=radius,
        sort=sort,
        skip=skip,
        limit=limit,
    )
    return listing_response(listings, total)


@router.get("/{vendor_id}", response_model=VendorDetailResponse)
async def get_vendor(vendor_id: UUID, vendor_service: VendorServiceDep):
    """Get a vendor with its catalog and reviews."""
    vendor, reviews = await vendor_service.get_vendor(vendor_id)
    return VendorDetailResponse(
        **VendorResponse.model_validate(vendor).model_dump(),
        delivery_zone_ids=[z.zone_id for z in vendor.delivery_zones],
        products=[ProductResponse.model_validate(p) for p in vendor.products],
        reviews=ReviewSummary(**reviews),
    )


@router.post("", response_model=VendorResponse, status_code=status.HTTP_201_CREATED)
async def register_vendor(
    body: VendorCreate, current_user: CurrentUser, vendor_service: VendorServiceDep
):
    """Register the current user as a vendor.

    The profile stays hidden from search until an admin verifies it.

    Raises:
        400: User already has a vendor profile, or invalid phone
        404: Delivery zone not found
    """
    return await vendor_service.register_vendor(
        current_user,
        business_name=body.business_name,
        phone=body.phone,
        location=body.location.as_tuple(),
        delivery_zone_ids=body.delivery_zones,
        description=body.description,
        address=body.address,
        delivery_fee=body.delivery_fee,
        min_order=body.min_order,
    )


@router.patch("/{vendor_id}", response_model=VendorResponse)
async def update_vendor(
    vendor_id: UUID,
    body: VendorUpdate,
    current_user: CurrentUser,
    vendor_service: VendorServiceDep,
):
    """Update a vendor profile (owner or admin)."""
    changes = body.model_dump(exclude_unset=True, exclude={"location"})
    if body.location is not None:
        changes["location"] = body.location.as_tuple()
    return await vendor_service.update_vendor(vendor_id, current_user, changes)


@router.post(
    "/{vendor_id}/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_product(
    vendor_id: UUID,
    body: ProductCreate,
    current_user: CurrentUser,
    vendor_service: VendorServiceDep,
):
    """Add a product to the vendor's catalog (owner or admin)."""
    return await vendor_service.add_product(vendor_id, current_user, **body.model_dump())


@router.patch("/{vendor_id}/products/{product_id}", response_model=ProductResponse)
async def update_product(
    vendor_id: UUID,
    product_id: UUID,
    body: ProductUpdate,
    current_user: CurrentUser,
    vendor_service: VendorServiceDep,
):
    return await vendor_service.update_product(
        vendor_id, product_id, current_user, body.model_dump(exclude_unset=True)
    )


@router.delete("/{vendor_id}/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    vendor_id: UUID,
    product_id: UUID,
    current_user: CurrentUser,
    vendor_service: VendorServiceDep,
):
    """Remove a product; products on past orders are retired instead."""
    await vendor_service.delete_product(vendor_id, product_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
