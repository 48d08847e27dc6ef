"""Order schemas for request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from maji.models.enums import EscrowStatus, OrderStatus, PaymentProvider, TransactionStatus
from maji.schemas.common import GeoPoint


class OrderItemCreate(BaseModel):
    """Requested order line."""

    product_id: UUID
    quantity: int = Field(..., ge=1)


class OrderCreate(BaseModel):
    """Schema for order creation request."""

    vendor_id: UUID
    items: list[OrderItemCreate] = Field(..., min_length=1)
    delivery_address: str = Field(..., min_length=1, max_length=500)
    delivery_location: GeoPoint | None = None
    delivery_notes: str | None = Field(None, max_length=500)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderCancel(BaseModel):
    reason: str | None = Field(None, max_length=500)


class OrderItemResponse(BaseModel):
    item_id: UUID
    product_id: UUID
    quantity: int
    unit_price: int
    total_price: int

    model_config = {"from_attributes": True}


class TransactionSummary(BaseModel):
    transaction_id: UUID
    provider: PaymentProvider
    status: TransactionStatus
    escrow_status: EscrowStatus

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    """Schema for order response."""

    order_id: UUID
    order_number: str
    customer_id: UUID
    vendor_id: UUID
    status: OrderStatus
    subtotal: int
    delivery_fee: int
    platform_fee: int
    total_amount: int
    delivery_address: str
    delivery_notes: str | None = None
    delivery_longitude: float | None = None
    delivery_latitude: float | None = None
    items: list[OrderItemResponse] = []
    transaction: TransactionSummary | None = None
    accepted_at: datetime | None = None
    delivered_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancel_reason: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class TimelineEntry(BaseModel):
    status: OrderStatus
    timestamp: datetime


class OrderDetailResponse(OrderResponse):
    """Order with its status timeline."""

    timeline: list[TimelineEntry]


class OrderListResponse(BaseModel):
    """Schema for order list response."""

    orders: list[OrderResponse]
    total: int


class RatingCreate(BaseModel):
    """Schema for rating a completed order."""

    score: int = Field(..., ge=1, le=5)
    quality_score: int | None = Field(None, ge=1, le=5)
    service_score: int | None = Field(None, ge=1, le=5)
    comment: str | None = Field(None, max_length=500)


class RatingResponse(BaseModel):
    rating_id: UUID
    order_id: UUID
    vendor_id: UUID
    score: int
    quality_score: int | None = None
    service_score: int | None = None
    comment: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
