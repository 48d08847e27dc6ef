"""Vendor and product schemas for request/response validation."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from maji.schemas.common import GeoPoint


class ProductCreate(BaseModel):
    """Schema for product creation request."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=500)
    unit: str = Field(..., min_length=1, max_length=50)
    price: int = Field(..., ge=1)  # Leones
    is_available: bool = True


class ProductUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=500)
    unit: str | None = Field(None, min_length=1, max_length=50)
    price: int | None = Field(None, ge=1)
    is_available: bool | None = None


class ProductResponse(BaseModel):
    """Schema for product response."""

    product_id: UUID
    vendor_id: UUID
    name: str
    description: str | None = None
    unit: str
    price: int
    is_available: bool

    model_config = {"from_attributes": True}


class VendorCreate(BaseModel):
    """Schema for vendor registration request."""

    business_name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    phone: str = Field(..., min_length=8, max_length=20)
    location: GeoPoint
    address: str | None = Field(None, max_length=500)
    delivery_zones: list[UUID] = Field(..., min_length=1)
    delivery_fee: int = Field(0, ge=0)
    min_order: int = Field(0, ge=0)


class VendorUpdate(BaseModel):
    business_name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    phone: str | None = Field(None, min_length=8, max_length=20)
    location: GeoPoint | None = None
    address: str | None = Field(None, max_length=500)
    delivery_zones: list[UUID] | None = Field(None, min_length=1)
    delivery_fee: int | None = Field(None, ge=0)
    min_order: int | None = Field(None, ge=0)


class VendorResponse(BaseModel):
    """Schema for vendor response."""

    vendor_id: UUID
    business_name: str
    description: str | None = None
    phone: str
    address: str | None = None
    longitude: float | None = None
    latitude: float | None = None
    delivery_fee: int
    min_order: int
    rating: float
    rating_count: int
    is_verified: bool
    is_active: bool

    model_config = {"from_attributes": True}


class VendorListItem(VendorResponse):
    """Vendor with its available products and distance from the searcher."""

    distance: int | None = None  # meters
    products: list[ProductResponse]


class VendorListResponse(BaseModel):
    vendors: list[VendorListItem]
    total: int


class ReviewResponse(BaseModel):
    rating_id: UUID
    score: int
    comment: str | None = None
    reviewer_name: str | None = None
    created_at: datetime


class ReviewSummary(BaseModel):
    average: float
    count: int
    distribution: dict[int, int]
    recent: list[ReviewResponse]


class VendorDetailResponse(VendorResponse):
    """Schema for vendor detail response."""

    delivery_zone_ids: list[UUID]
    products: list[ProductResponse]
    reviews: ReviewSummary


VendorSort = Literal["rating", "distance", "price"]
