"""Order service for order lifecycle operations."""

import logging
import secrets
from typing import Any, Iterable
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from maji.core.config import settings
from maji.core.errors import AlreadyRated, Forbidden, InvalidTransition, NotFound
from maji.middleware.metrics import record_order_transition
from maji.models.base import utcnow
from maji.models.enums import NotificationKind, OrderStatus, UserRole
from maji.models.order import Order, OrderItem
from maji.models.product import Product
from maji.models.rating import Rating
from maji.models.user import User
from maji.models.vendor import Vendor
from maji.services import order_state
from maji.services.notification_service import NotificationService
from maji.services.pricing import LineRequest, price_order
from maji.services.scoring import running_mean

logger = logging.getLogger(__name__)

# Targets that only their own operation may reach: confirm_delivery,
# the payment callback and refund_order.
RESERVED_TARGETS = {
    OrderStatus.COMPLETED: "Only the customer can complete an order by confirming delivery",
    OrderStatus.PAID: "Orders are marked paid by the payment provider",
    OrderStatus.REFUNDED: "Refunds are issued by an admin",
}


def generate_order_number() -> str:
    """Generate an order number like MJ-2026-4F1A2B."""
    return f"MJ-{utcnow().year}-{secrets.token_hex(3).upper()}"


class OrderService:
    """Service class for order operations."""

    def __init__(self, db: AsyncSession, notifier: NotificationService):
        self.db = db
        self.notifier = notifier

    # ==================== Loading ====================

    async def _get_order(self, order_id: UUID, for_update: bool = False) -> Order:
        """Load an order with its vendor, items, transaction and rating.

        Args:
            order_id: Order UUID
            for_update: Lock the order row (SELECT ... FOR UPDATE)

        Raises:
            NotFound: Order does not exist
        """
        stmt = (
            select(Order)
            .options(
                selectinload(Order.vendor),
                selectinload(Order.items),
                selectinload(Order.transaction),
                selectinload(Order.rating),
            )
            .where(Order.order_id == order_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        order = result.scalar_one_or_none()
        if order is None:
            raise NotFound("order")
        return order

    @staticmethod
    def _is_vendor_owner(order: Order, actor: User) -> bool:
        return order.vendor.user_id == actor.user_id

    def _can_view(self, order: Order, actor: User) -> bool:
        return (
            order.customer_id == actor.user_id
            or self._is_vendor_owner(order, actor)
            or actor.is_admin
        )

    async def _commit_transition(self, order: Order, previous: OrderStatus) -> None:
        await self.db.commit()
        record_order_transition(order.status.value)
        logger.info(
            f"Order {order.order_number}: {previous.value} -> {order.status.value}"
        )

    def _notify(self, recipient_id: UUID, order: Order, **extra: Any) -> None:
        data = {
            "order_id": str(order.order_id),
            "order_number": order.order_number,
            "status": order.status.value,
            **extra,
        }
        self.notifier.dispatch(recipient_id, NotificationKind.ORDER_UPDATE, data)

    # ==================== Creation ====================

    async def create_order(
        self,
        customer: User,
        vendor_id: UUID,
        items: Iterable[LineRequest],
        delivery_address: str,
        delivery_notes: str | None = None,
        delivery_location: tuple[float, float] | None = None,
    ) -> Order:
        """Price and store a new PENDING order.

        Args:
            customer: Ordering user
            vendor_id: Vendor UUID
            items: Requested line items (product_id, quantity)
            delivery_address: Free-form delivery address
            delivery_notes: Optional notes for the vendor
            delivery_location: Optional (longitude, latitude)

        Returns:
            Created order with items loaded
        """
        result = await self.db.execute(
            select(Vendor).where(Vendor.vendor_id == vendor_id)
        )
        vendor = result.scalar_one_or_none()
        if vendor is None:
            raise NotFound("vendor")

        items = list(items)
        product_ids = {item.product_id for item in items}
        result = await self.db.execute(
            select(Product).where(
                Product.vendor_id == vendor_id,
                Product.product_id.in_(product_ids),
            )
        )
        products = result.scalars().all()

        priced = price_order(vendor, products, items)

        longitude, latitude = delivery_location if delivery_location else (None, None)
        order = Order(
            order_number=generate_order_number(),
            customer_id=customer.user_id,
            vendor_id=vendor.vendor_id,
            delivery_address=delivery_address,
            delivery_notes=delivery_notes,
            delivery_longitude=longitude,
            delivery_latitude=latitude,
            subtotal=priced.subtotal,
            delivery_fee=priced.delivery_fee,
            platform_fee=priced.platform_fee,
            total_amount=priced.total,
            status=OrderStatus.PENDING,
            items=[
                OrderItem(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    total_price=line.total_price,
                )
                for line in priced.items
            ],
        )
        self.db.add(order)
        await self.db.commit()

        logger.info(
            f"Order {order.order_number} created for vendor {vendor.vendor_id}, "
            f"total {order.total_amount}"
        )
        record_order_transition(OrderStatus.PENDING.value)

        order = await self._get_order(order.order_id)
        self._notify(vendor.user_id, order, event="new_order")
        return order

    # ==================== Queries ====================

    async def list_orders(
        self,
        actor: User,
        status: OrderStatus | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[Order], int]:
        """List orders visible to a user.

        Vendors see orders placed with the vendors they own, everyone else
        sees the orders they placed.

        Returns:
            Tuple of (orders list, total count)
        """
        if actor.role == UserRole.VENDOR:
            owned = select(Vendor.vendor_id).where(Vendor.user_id == actor.user_id)
            condition = Order.vendor_id.in_(owned)
        else:
            condition = Order.customer_id == actor.user_id

        filters = [condition]
        if status is not None:
            filters.append(Order.status == status)

        count_result = await self.db.execute(
            select(func.count(Order.order_id)).where(*filters)
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(Order)
            .options(selectinload(Order.items), selectinload(Order.transaction))
            .where(*filters)
            .order_by(Order.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        orders = list(result.scalars().all())

        return orders, total

    async def get_order(
        self, order_id: UUID, actor: User
    ) -> tuple[Order, list[dict[str, Any]]]:
        """Get an order with its status timeline.

        Raises:
            NotFound: Order does not exist
            Forbidden: Actor is not the customer, vendor owner or an admin
        """
        order = await self._get_order(order_id)
        if not self._can_view(order, actor):
            raise Forbidden("Access denied")
        return order, order_state.status_timeline(order)

    # ==================== Transitions ====================

    async def accept_order(self, order_id: UUID, actor: User) -> Order:
        order = await self._get_order(order_id, for_update=True)
        if not self._is_vendor_owner(order, actor) and not actor.is_admin:
            raise Forbidden("Only the vendor can accept the order")

        previous = order.status
        order_state.accept(order)
        await self._commit_transition(order, previous)

        self._notify(order.customer_id, order)
        return order

    async def update_status(
        self, order_id: UUID, actor: User, requested: OrderStatus
    ) -> Order:
        """Move an order to the requested status.

        Args:
            order_id: Order UUID
            actor: Vendor owner or admin
            requested: Target status

        Raises:
            NotFound: Order does not exist
            Forbidden: Actor is not the vendor owner or an admin, or the
                target is COMPLETED, PAID or REFUNDED
            InvalidTransition: Target not allowed from the current status
        """
        order = await self._get_order(order_id, for_update=True)
        if not self._is_vendor_owner(order, actor) and not actor.is_admin:
            raise Forbidden("Only the vendor can update order status")
        if requested in RESERVED_TARGETS:
            logger.warning(
                f"User {actor.user_id} tried to set order {order.order_number} to {requested.value}"
            )
            raise Forbidden(RESERVED_TARGETS[requested])

        previous = order.status
        order_state.update_status(order, requested)
        await self._commit_transition(order, previous)

        self._notify(order.customer_id, order)
        return order

    async def confirm_delivery(self, order_id: UUID, actor: User) -> Order:
        """Customer confirms delivery, completing the order and releasing escrow."""
        order = await self._get_order(order_id, for_update=True)
        if order.customer_id != actor.user_id:
            raise Forbidden("Only the customer can confirm delivery")

        previous = order.status
        order_state.complete(order)
        await self._commit_transition(order, previous)

        self._notify(order.vendor.user_id, order, event="delivery_confirmed")
        return order

    async def cancel_order(
        self, order_id: UUID, actor: User, reason: str | None = None
    ) -> Order:
        """Cancel an order, refunding a completed payment in the same commit."""
        order = await self._get_order(order_id, for_update=True)
        is_customer = order.customer_id == actor.user_id
        if not is_customer and not self._is_vendor_owner(order, actor) and not actor.is_admin:
            raise Forbidden("Access denied")

        previous = order.status
        order_state.cancel(order, reason)
        await self._commit_transition(order, previous)

        other_party = order.vendor.user_id if is_customer else order.customer_id
        self._notify(other_party, order, reason=reason)
        return order

    async def refund_order(self, order_id: UUID, actor: User) -> Order:
        if not actor.is_admin:
            raise Forbidden("Admin privileges required")
        order = await self._get_order(order_id, for_update=True)

        previous = order.status
        order_state.refund(order)
        await self._commit_transition(order, previous)

        self._notify(order.customer_id, order)
        return order

    # ==================== Rating ====================

    async def rate_order(
        self,
        order_id: UUID,
        actor: User,
        score: int,
        quality_score: int | None = None,
        service_score: int | None = None,
        comment: str | None = None,
    ) -> Rating:
        """Rate a completed order.

        Updates the vendor's rating mean and awards the rater reputation in the
        same commit.

        Raises:
            Forbidden: Actor is not the customer
            InvalidTransition: Order is not COMPLETED
            AlreadyRated: Order already has a rating
        """
        order = await self._get_order(order_id, for_update=True)
        if order.customer_id != actor.user_id:
            raise Forbidden("Only the customer can rate the order")
        if order.status != OrderStatus.COMPLETED:
            raise InvalidTransition("order", order.status.value, "RATED")
        if order.rating is not None:
            raise AlreadyRated()

        result = await self.db.execute(
            select(Vendor).where(Vendor.vendor_id == order.vendor_id).with_for_update()
        )
        vendor = result.scalar_one()

        rating = Rating(
            order_id=order.order_id,
            user_id=actor.user_id,
            vendor_id=vendor.vendor_id,
            score=score,
            quality_score=quality_score,
            service_score=service_score,
            comment=comment,
        )
        self.db.add(rating)

        vendor.rating = running_mean(vendor.rating, vendor.rating_count, score)
        vendor.rating_count += 1

        await self.db.execute(
            update(User)
            .where(User.user_id == actor.user_id)
            .values(reputation=User.reputation + settings.REPUTATION_RATING_POINTS)
        )

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise AlreadyRated()

        logger.info(f"Order {order.order_number} rated {score} for vendor {vendor.vendor_id}")
        return rating
