"""Product model for vendor catalogs."""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from maji.core.database import Base
from maji.models.base import TimestampMixin

if TYPE_CHECKING:
    from maji.models.vendor import Vendor


class Product(Base, TimestampMixin):
    """Product listed in a vendor's catalog, priced in Leones."""

    __tablename__ = "products"

    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    vendor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vendors.vendor_id"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    unit: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    price: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    is_available: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    # Relationships
    vendor: Mapped["Vendor"] = relationship("Vendor", back_populates="products")

    __table_args__ = (
        CheckConstraint("price > 0", name="chk_product_price_positive"),
        Index("idx_products_vendor", "vendor_id"),
    )
