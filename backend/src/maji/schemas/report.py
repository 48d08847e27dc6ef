"""Report schemas for request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from maji.models.enums import ReportStatus, ReportType
from maji.schemas.common import GeoPoint


class ReportCreate(BaseModel):
    """Schema for report submission."""

    type: ReportType
    description: str | None = Field(None, max_length=1000)
    location: GeoPoint
    address: str | None = Field(None, max_length=500)


class ReportStatusUpdate(BaseModel):
    status: ReportStatus
    resolution: str | None = Field(None, max_length=500)


class ReportResponse(BaseModel):
    """Schema for report response."""

    report_id: UUID
    user_id: UUID
    type: ReportType
    description: str | None = None
    address: str | None = None
    longitude: float
    latitude: float
    status: ReportStatus
    bounty_amount: int
    bounty_paid: bool
    bounty_paid_at: datetime | None = None
    verified_count: int
    corroborates_id: UUID | None = None
    resolved_at: datetime | None = None
    resolution: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ReportCreatedResponse(ReportResponse):
    potential_bounty: int
    message: str


class ReportStats(BaseModel):
    total: int
    verified: int
    bounty_earned: int


class ReportListResponse(BaseModel):
    reports: list[ReportResponse]
    total: int


class MyReportsResponse(ReportListResponse):
    stats: ReportStats
