"""Status and type enumerations shared by models, schemas and services."""

import enum


class UserRole(str, enum.Enum):
    CITIZEN = "CITIZEN"
    SCOUT = "SCOUT"
    VENDOR = "VENDOR"
    BUSINESS = "BUSINESS"
    ADMIN = "ADMIN"


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    PAYMENT_PENDING = "PAYMENT_PENDING"
    PAID = "PAID"
    PREPARING = "PREPARING"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class PaymentProvider(str, enum.Enum):
    ORANGE_MONEY = "ORANGE_MONEY"
    AFRICELL_MONEY = "AFRICELL_MONEY"
    CASH = "CASH"


class TransactionStatus(str, enum.Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class EscrowStatus(str, enum.Enum):
    NONE = "NONE"
    HELD = "HELD"
    RELEASED = "RELEASED"
    REFUNDED = "REFUNDED"


class AlertType(str, enum.Enum):
    WATER_COMING = "WATER_COMING"
    WATER_ACTIVE = "WATER_ACTIVE"
    WATER_ENDED = "WATER_ENDED"
    SHORTAGE_WARNING = "SHORTAGE_WARNING"
    FLOOD_WARNING = "FLOOD_WARNING"
    TANKER_AVAILABLE = "TANKER_AVAILABLE"


class AlertStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"
    VERIFIED = "VERIFIED"


class ReportType(str, enum.Enum):
    LEAK = "LEAK"
    BURST_PIPE = "BURST_PIPE"
    CONTAMINATION = "CONTAMINATION"
    BLOCKED_DRAIN = "BLOCKED_DRAIN"
    FLOOD = "FLOOD"
    BROKEN_TAP = "BROKEN_TAP"
    OTHER = "OTHER"


class ReportStatus(str, enum.Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    FORWARDED = "FORWARDED"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    REJECTED = "REJECTED"


class NotificationKind(str, enum.Enum):
    ALERT = "ALERT"
    ORDER_UPDATE = "ORDER_UPDATE"
    PAYMENT = "PAYMENT"
    REPORT_UPDATE = "REPORT_UPDATE"
    BOUNTY = "BOUNTY"
