"""Order and order item models for marketplace purchases."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import CheckConstraint, DateTime, Enum, Float, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from maji.core.database import Base
from maji.models.base import TimestampMixin
from maji.models.enums import OrderStatus

if TYPE_CHECKING:
    from maji.models.product import Product
    from maji.models.rating import Rating
    from maji.models.transaction import Transaction
    from maji.models.user import User
    from maji.models.vendor import Vendor


class Order(Base, TimestampMixin):
    """Order placed by a customer with a single vendor."""

    __tablename__ = "orders"

    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    order_number: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
    )
    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.user_id"),
        nullable=False,
    )
    vendor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vendors.vendor_id"),
        nullable=False,
    )
    delivery_address: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    delivery_notes: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )
    delivery_longitude: Mapped[float | None] = mapped_column(
        Float,
        nullable=True,
    )
    delivery_latitude: Mapped[float | None] = mapped_column(
        Float,
        nullable=True,
    )
    subtotal: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    delivery_fee: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    platform_fee: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    total_amount: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, native_enum=False, length=20),
        nullable=False,
        default=OrderStatus.PENDING,
    )
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    cancel_reason: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    # Relationships
    customer: Mapped["User"] = relationship("User", back_populates="orders")
    vendor: Mapped["Vendor"] = relationship("Vendor", back_populates="orders")
    items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan"
    )
    transaction: Mapped["Transaction | None"] = relationship(
        "Transaction", back_populates="order", uselist=False
    )
    rating: Mapped["Rating | None"] = relationship(
        "Rating", back_populates="order", uselist=False
    )

    __table_args__ = (
        CheckConstraint("subtotal >= 0", name="chk_order_subtotal_positive"),
        CheckConstraint(
            "total_amount = subtotal + delivery_fee + platform_fee",
            name="chk_order_total",
        ),
        Index("idx_orders_customer_created", "customer_id", "created_at"),
        Index("idx_orders_vendor_created", "vendor_id", "created_at"),
        Index("idx_orders_status", "status"),
    )


class OrderItem(Base):
    """Order line with the unit price snapshotted at creation."""

    __tablename__ = "order_items"

    item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("orders.order_id"),
        nullable=False,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.product_id"),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    unit_price: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    total_price: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    order: Mapped["Order"] = relationship("Order", back_populates="items")
    product: Mapped["Product"] = relationship("Product")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="chk_order_item_quantity_positive"),
        Index("idx_order_items_order", "order_id"),
    )
