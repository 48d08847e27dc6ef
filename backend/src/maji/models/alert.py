"""Alert model for scout-posted water supply alerts."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from maji.core.database import Base
from maji.models.base import TimestampMixin
from maji.models.enums import AlertStatus, AlertType

if TYPE_CHECKING:
    from maji.models.user import User
    from maji.models.zone import Zone


class Alert(Base, TimestampMixin):
    """Water supply alert scoped to a zone."""

    __tablename__ = "alerts"

    alert_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    zone_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("zones.zone_id"),
        nullable=False,
    )
    scout_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.user_id"),
        nullable=False,
    )
    type: Mapped[AlertType] = mapped_column(
        Enum(AlertType, native_enum=False, length=30),
        nullable=False,
    )
    message: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )
    eta: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    confidence: Mapped[float] = mapped_column(
        Float,
        nullable=False,
    )
    is_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    feedback_score: Mapped[float | None] = mapped_column(
        Float,
        nullable=True,
    )
    feedback_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    status: Mapped[AlertStatus] = mapped_column(
        Enum(AlertStatus, native_enum=False, length=20),
        nullable=False,
        default=AlertStatus.ACTIVE,
    )

    # Relationships
    zone: Mapped["Zone"] = relationship("Zone", back_populates="alerts")
    scout: Mapped["User"] = relationship("User", back_populates="alerts")
    feedback: Mapped[List["AlertFeedback"]] = relationship("AlertFeedback", back_populates="alert")

    __table_args__ = (
        CheckConstraint("confidence >= 0 AND confidence <= 1", name="chk_alert_confidence_range"),
        CheckConstraint("feedback_count >= 0", name="chk_alert_feedback_count_positive"),
        Index("idx_alerts_zone_status_created", "zone_id", "status", "created_at"),
    )


class AlertFeedback(Base, TimestampMixin):
    """One user's accuracy vote on an alert, with what actually happened."""

    __tablename__ = "alert_feedback"

    feedback_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    alert_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("alerts.alert_id"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.user_id"),
        nullable=False,
    )
    accurate: Mapped[bool] = mapped_column(Boolean, nullable=False)
    actual_start_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    actual_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    comment: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    alert: Mapped["Alert"] = relationship("Alert", back_populates="feedback")

    __table_args__ = (
        UniqueConstraint("alert_id", "user_id", name="uq_alert_feedback_user"),
        CheckConstraint(
            "actual_duration IS NULL OR actual_duration > 0",
            name="chk_alert_feedback_duration_positive",
        ),
    )
