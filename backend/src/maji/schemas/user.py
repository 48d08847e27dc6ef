"""Auth and user schemas for request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from maji.models.enums import UserRole
from maji.schemas.alert import ZoneSummary


class OtpRequest(BaseModel):
    """Schema for OTP request."""

    phone: str = Field(..., min_length=8, max_length=20)


class OtpRequestResponse(BaseModel):
    message: str = "OTP sent"
    expires_in: int


class OtpVerify(BaseModel):
    """Schema for OTP verification request."""

    phone: str = Field(..., min_length=8, max_length=20)
    code: str = Field(..., min_length=4, max_length=8, pattern=r"^\d+$")


class UserResponse(BaseModel):
    """Schema for user response."""

    user_id: UUID
    phone: str
    name: str | None = None
    role: UserRole
    reputation: int
    is_verified: bool
    primary_zone_id: UUID | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    """Schema for login token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    is_new_user: bool = False
    user: UserResponse


class UserUpdate(BaseModel):
    """Schema for profile update request."""

    name: str | None = Field(None, min_length=1, max_length=100)
    primary_zone_id: UUID | None = None


class UserStats(BaseModel):
    orders_count: int
    reports_count: int
    alerts_count: int


class UserProfileResponse(UserResponse):
    """Current user's profile with activity counts."""

    primary_zone: ZoneSummary | None = None
    stats: UserStats
