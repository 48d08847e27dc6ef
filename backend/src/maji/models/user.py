"""User model for platform members."""

import uuid
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, CheckConstraint, Enum, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from maji.core.database import Base
from maji.models.base import TimestampMixin
from maji.models.enums import UserRole

if TYPE_CHECKING:
    from maji.models.alert import Alert
    from maji.models.order import Order
    from maji.models.report import Report
    from maji.models.vendor import Vendor
    from maji.models.zone import Zone


class User(Base, TimestampMixin):
    """User model identified by phone number."""

    __tablename__ = "users"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    phone: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
    )
    name: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, length=20),
        nullable=False,
        default=UserRole.CITIZEN,
    )
    reputation: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    is_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )
    primary_zone_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("zones.zone_id"),
        nullable=True,
    )

    # Relationships
    orders: Mapped[List["Order"]] = relationship("Order", back_populates="customer")
    alerts: Mapped[List["Alert"]] = relationship("Alert", back_populates="scout")
    reports: Mapped[List["Report"]] = relationship(
        "Report", back_populates="reporter", foreign_keys="Report.user_id"
    )
    vendors: Mapped[List["Vendor"]] = relationship("Vendor", back_populates="owner")
    primary_zone: Mapped[Optional["Zone"]] = relationship("Zone")

    __table_args__ = (
        CheckConstraint("reputation >= 0", name="chk_user_reputation_positive"),
        Index("idx_users_role", "role"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
