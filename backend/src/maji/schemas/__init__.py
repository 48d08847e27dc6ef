"""Pydantic schemas for request/response validation."""

from maji.schemas.alert import AlertCreate, AlertFeedbackCreate, AlertResponse
from maji.schemas.common import ErrorResponse, GeoPoint
from maji.schemas.order import OrderCreate, OrderDetailResponse, OrderResponse, RatingCreate
from maji.schemas.payment import PaymentInitiate, PaymentStatusResponse, PaymentWebhook
from maji.schemas.report import ReportCreate, ReportResponse, ReportStatusUpdate
from maji.schemas.user import (
    OtpRequest,
    OtpVerify,
    TokenResponse,
    UserProfileResponse,
    UserResponse,
    UserUpdate,
)
from maji.schemas.vendor import (
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    VendorCreate,
    VendorDetailResponse,
    VendorListResponse,
    VendorResponse,
    VendorUpdate,
)
from maji.schemas.zone import ZoneDetailResponse, ZoneListResponse, ZoneResponse

__all__ = [
    "GeoPoint",
    "ErrorResponse",
    "OtpRequest",
    "OtpVerify",
    "TokenResponse",
    "UserResponse",
    "UserUpdate",
    "UserProfileResponse",
    "ZoneResponse",
    "ZoneListResponse",
    "ZoneDetailResponse",
    "VendorCreate",
    "VendorUpdate",
    "VendorResponse",
    "VendorListResponse",
    "VendorDetailResponse",
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "OrderCreate",
    "OrderResponse",
    "OrderDetailResponse",
    "RatingCreate",
    "PaymentInitiate",
    "PaymentStatusResponse",
    "PaymentWebhook",
    "AlertCreate",
    "AlertFeedbackCreate",
    "AlertResponse",
    "ReportCreate",
    "ReportResponse",
    "ReportStatusUpdate",
]
