"""Report model for citizen infrastructure reports."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, DateTime, Enum, Float, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from maji.core.database import Base
from maji.models.base import TimestampMixin
from maji.models.enums import ReportStatus, ReportType

if TYPE_CHECKING:
    from maji.models.user import User


class Report(Base, TimestampMixin):
    """Infrastructure report eligible for a bounty once resolved."""

    __tablename__ = "reports"

    report_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.user_id"),
        nullable=False,
    )
    type: Mapped[ReportType] = mapped_column(
        Enum(ReportType, native_enum=False, length=20),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    address: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )
    longitude: Mapped[float] = mapped_column(
        Float,
        nullable=False,
    )
    latitude: Mapped[float] = mapped_column(
        Float,
        nullable=False,
    )
    status: Mapped[ReportStatus] = mapped_column(
        Enum(ReportStatus, native_enum=False, length=20),
        nullable=False,
        default=ReportStatus.PENDING,
    )
    bounty_amount: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    bounty_paid: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    bounty_paid_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    verified_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )
    # Earliest open report of the same incident, if this one corroborates it
    corroborates_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("reports.report_id"),
        nullable=True,
    )
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    resolved_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.user_id"),
        nullable=True,
    )
    resolution: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    reporter: Mapped["User"] = relationship(
        "User", back_populates="reports", foreign_keys=[user_id]
    )

    __table_args__ = (
        CheckConstraint("bounty_amount >= 0", name="chk_report_bounty_positive"),
        CheckConstraint("verified_count >= 1", name="chk_report_verified_count_positive"),
        Index("idx_reports_type_status_created", "type", "status", "created_at"),
        Index("idx_reports_user_created", "user_id", "created_at"),
    )
