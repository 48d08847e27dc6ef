"""Rating model for completed orders."""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from maji.core.database import Base
from maji.models.base import TimestampMixin

if TYPE_CHECKING:
    from maji.models.order import Order
    from maji.models.user import User


class Rating(Base, TimestampMixin):
    """Customer rating of a vendor, at most one per order."""

    __tablename__ = "ratings"

    rating_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("orders.order_id"),
        unique=True,
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.user_id"),
        nullable=False,
    )
    vendor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vendors.vendor_id"),
        nullable=False,
    )
    score: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    quality_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    service_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    comment: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    order: Mapped["Order"] = relationship("Order", back_populates="rating")
    user: Mapped["User"] = relationship("User")

    __table_args__ = (
        CheckConstraint("score BETWEEN 1 AND 5", name="chk_rating_score_range"),
        Index("idx_ratings_vendor", "vendor_id"),
    )
