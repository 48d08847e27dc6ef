"""Typed application errors.

Every error carries a stable code and an HTTP status so the API layer can
map it to a response without inspecting messages. Services raise these only
before any state has been mutated.
"""

from typing import Any


class MajiError(Exception):
    """Base class for all application errors."""

    code: str = "E0002"
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, details: Any = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return error


# ==================== Auth ====================


class InvalidPhone(MajiError):
    code = "E1001"
    status_code = 400
    message = "Invalid phone number format"


class InvalidOtp(MajiError):
    code = "E1002"
    status_code = 400
    message = "Invalid or expired OTP"


class OtpExpired(MajiError):
    code = "E1003"
    status_code = 400
    message = "OTP has expired"


class OtpMaxAttempts(MajiError):
    code = "E1004"
    status_code = 429
    message = "Maximum OTP attempts exceeded"


class Forbidden(MajiError):
    code = "E1006"
    status_code = 403
    message = "Access denied"

    def __init__(self, reason: str = "Access denied"):
        super().__init__(reason)
        self.reason = reason


# ==================== Lookup ====================

_NOT_FOUND_CODES = {
    "user": "E2001",
    "zone": "E3001",
    "vendor": "E4001",
    "product": "E4004",
    "order": "E5001",
    "transaction": "E6005",
    "alert": "E7001",
    "report": "E8001",
}


class NotFound(MajiError):
    status_code = 404

    def __init__(self, entity: str):
        self.entity = entity
        self.code = _NOT_FOUND_CODES.get(entity, "E9001")
        super().__init__(f"{entity.capitalize()} not found")


# ==================== Marketplace ====================


class VendorUnavailable(MajiError):
    code = "E4002"
    status_code = 400
    message = "Vendor is not active"


class ProductNotFound(MajiError):
    code = "E4004"
    status_code = 404
    message = "Product not found"


class ProductUnavailable(MajiError):
    code = "E4005"
    status_code = 400
    message = "Product is not available"


class MinimumOrderNotMet(MajiError):
    code = "E5005"
    status_code = 400

    def __init__(self, min_order: int):
        self.min_order = min_order
        super().__init__(
            f"Minimum order amount is {min_order} Leones",
            details={"min_order": min_order},
        )


class InvalidTransition(MajiError):
    code = "E5002"
    status_code = 400

    def __init__(self, entity: str, current: str, requested: str):
        self.entity = entity
        self.current = current
        self.requested = requested
        super().__init__(
            f"Invalid {entity} status transition: {current} -> {requested}",
            details={"entity": entity, "current": current, "requested": requested},
        )


class VendorAlreadyRegistered(MajiError):
    code = "E0001"
    status_code = 400
    message = "User already has a vendor profile"


class AlreadyRated(MajiError):
    code = "E5006"
    status_code = 409
    message = "Order already rated"


class PaymentAlreadyInitiated(MajiError):
    code = "E6002"
    status_code = 409
    message = "Payment already initiated"


# ==================== Alerts & reports ====================


class ScoutNotVerified(MajiError):
    code = "E7002"
    status_code = 403
    message = "Only verified scouts can post alerts"


class AlreadyVoted(MajiError):
    code = "E7004"
    status_code = 409
    message = "You have already given feedback on this alert"


class DuplicateReport(MajiError):
    code = "E8002"
    status_code = 409
    message = "You have already submitted a similar report for this location"


# ==================== General ====================


class ResourceBusy(MajiError):
    code = "E0004"
    status_code = 503
    message = "Resource is busy, please retry"
