"""Alert schemas for request/response validation."""

from datetime import datetime, timezone
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from maji.models.enums import AlertStatus, AlertType


def to_naive_utc(v: datetime | None) -> datetime | None:
    """Timestamps are stored as naive UTC."""
    if v is not None and v.tzinfo is not None:
        return v.astimezone(timezone.utc).replace(tzinfo=None)
    return v


class AlertCreate(BaseModel):
    """Schema for alert creation request."""

    zone_id: UUID
    type: AlertType
    message: str | None = Field(None, max_length=500)
    eta: datetime | None = None
    duration: int | None = Field(None, ge=1, le=1440)  # minutes, max 24 hours

    @field_validator("eta")
    @classmethod
    def eta_to_naive_utc(cls, v: datetime | None) -> datetime | None:
        return to_naive_utc(v)


class AlertFeedbackCreate(BaseModel):
    """Schema for an accuracy vote on an alert."""

    accurate: bool
    actual_start_time: datetime | None = None
    actual_duration: int | None = Field(None, ge=1, le=1440)  # minutes
    comment: str | None = Field(None, max_length=500)

    @field_validator("actual_start_time")
    @classmethod
    def start_to_naive_utc(cls, v: datetime | None) -> datetime | None:
        return to_naive_utc(v)


class ZoneSummary(BaseModel):
    zone_id: UUID
    name: str
    slug: str

    model_config = {"from_attributes": True}


class ScoutSummary(BaseModel):
    user_id: UUID
    name: str | None = None
    reputation: int

    model_config = {"from_attributes": True}


class AlertResponse(BaseModel):
    """Schema for alert response."""

    alert_id: UUID
    zone_id: UUID
    scout_id: UUID
    type: AlertType
    message: str | None = None
    eta: datetime | None = None
    duration: int | None = None
    expires_at: datetime | None = None
    confidence: float
    is_verified: bool
    feedback_score: float | None = None
    feedback_count: int
    status: AlertStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class AlertDetailResponse(AlertResponse):
    zone: ZoneSummary
    scout: ScoutSummary


class AlertCreatedResponse(AlertResponse):
    points_earned: int


class AlertFeedbackResponse(BaseModel):
    feedback_score: float
    feedback_count: int
    is_verified: bool


class AlertListResponse(BaseModel):
    """Schema for alert list response."""

    alerts: list[AlertDetailResponse]
    total: int
