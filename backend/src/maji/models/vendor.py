"""Vendor model for the water marketplace."""

import uuid
from typing import TYPE_CHECKING, List

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from maji.core.database import Base
from maji.models.base import TimestampMixin

if TYPE_CHECKING:
    from maji.models.order import Order
    from maji.models.product import Product
    from maji.models.user import User
    from maji.models.zone import Zone

# Zones a vendor delivers to
vendor_zones = Table(
    "vendor_zones",
    Base.metadata,
    Column("vendor_id", Uuid, ForeignKey("vendors.vendor_id", ondelete="CASCADE"), primary_key=True),
    Column("zone_id", Uuid, ForeignKey("zones.zone_id", ondelete="CASCADE"), primary_key=True),
)


class Vendor(Base, TimestampMixin):
    """Vendor selling water products for delivery."""

    __tablename__ = "vendors"

    vendor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.user_id"),
        nullable=False,
    )
    business_name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    phone: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )
    is_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    delivery_fee: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    min_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    rating: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
    )
    rating_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    # Relationships
    owner: Mapped["User"] = relationship("User", back_populates="vendors")
    products: Mapped[List["Product"]] = relationship("Product", back_populates="vendor")
    orders: Mapped[List["Order"]] = relationship("Order", back_populates="vendor")
    delivery_zones: Mapped[List["Zone"]] = relationship(
        "Zone", secondary=vendor_zones, back_populates="vendors"
    )

    __table_args__ = (
        CheckConstraint("delivery_fee >= 0", name="chk_vendor_delivery_fee_positive"),
        CheckConstraint("min_order >= 0", name="chk_vendor_min_order_positive"),
        Index("idx_vendors_user", "user_id"),
    )
