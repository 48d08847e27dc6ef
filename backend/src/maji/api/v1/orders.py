"""Order API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from maji.api.deps import AdminUser, CurrentUser, OrderServiceDep
from maji.models.enums import OrderStatus
from maji.schemas.order import (
    OrderCancel,
    OrderCreate,
    OrderDetailResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
    RatingCreate,
    RatingResponse,
)

router = APIRouter()


@router.get("", response_model=OrderListResponse)
async def list_orders(
    current_user: CurrentUser,
    order_service: OrderServiceDep,
    status_filter: OrderStatus | None = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
):
    """Get current user's orders (vendors see orders placed with them)."""
    orders, total = await order_service.list_orders(
        current_user, status=status_filter, skip=skip, limit=limit
    )
    return OrderListResponse(
        orders=[OrderResponse.model_validate(o) for o in orders],
        total=total,
    )


@router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(order_id: UUID, current_user: CurrentUser, order_service: OrderServiceDep):
    """Get order details with status timeline.

    Visible to the customer, the vendor owner and admins.
    """
    order, timeline = await order_service.get_order(order_id, current_user)
    return OrderDetailResponse(
        **OrderResponse.model_validate(order).model_dump(),
        timeline=timeline,
    )


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    body: OrderCreate, current_user: CurrentUser, order_service: OrderServiceDep
):
    """Place an order with a vendor.

    Raises:
        400: Vendor unavailable, product unavailable or minimum order not met
        404: Vendor or product not found
    """
    order = await order_service.create_order(
        customer=current_user,
        vendor_id=body.vendor_id,
        items=body.items,
        delivery_address=body.delivery_address,
        delivery_notes=body.delivery_notes,
        delivery_location=body.delivery_location.as_tuple() if body.delivery_location else None,
    )
    return order


@router.post("/{order_id}/accept", response_model=OrderResponse)
async def accept_order(order_id: UUID, current_user: CurrentUser, order_service: OrderServiceDep):
    """Vendor accepts a pending order; it then awaits payment."""
    return await order_service.accept_order(order_id, current_user)


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: UUID,
    body: OrderStatusUpdate,
    current_user: CurrentUser,
    order_service: OrderServiceDep,
):
    """Vendor (or admin) moves an order along its lifecycle."""
    return await order_service.update_status(order_id, current_user, body.status)


@router.post("/{order_id}/confirm-delivery", response_model=OrderResponse)
async def confirm_delivery(
    order_id: UUID, current_user: CurrentUser, order_service: OrderServiceDep
):
    """Customer confirms delivery; escrowed payment is released to the vendor."""
    return await order_service.confirm_delivery(order_id, current_user)


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: UUID,
    current_user: CurrentUser,
    order_service: OrderServiceDep,
    body: OrderCancel | None = None,
):
    """Cancel an order that has not left the vendor yet."""
    reason = body.reason if body else None
    return await order_service.cancel_order(order_id, current_user, reason)


@router.post("/{order_id}/refund", response_model=OrderResponse)
async def refund_order(order_id: UUID, admin_user: AdminUser, order_service: OrderServiceDep):
    """Mark a cancelled, refunded order as REFUNDED (admin only)."""
    return await order_service.refund_order(order_id, admin_user)


@router.post(
    "/{order_id}/rate", response_model=RatingResponse, status_code=status.HTTP_201_CREATED
)
async def rate_order(
    order_id: UUID,
    body: RatingCreate,
    current_user: CurrentUser,
    order_service: OrderServiceDep,
):
    """Rate a completed order."""
    return await order_service.rate_order(
        order_id,
        current_user,
        score=body.score,
        quality_score=body.quality_score,
        service_score=body.service_score,
        comment=body.comment,
    )
