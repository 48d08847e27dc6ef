"""SQLAlchemy ORM models."""

from maji.models.alert import Alert, AlertFeedback
from maji.models.base import TimestampMixin
from maji.models.order import Order, OrderItem
from maji.models.product import Product
from maji.models.rating import Rating
from maji.models.report import Report
from maji.models.transaction import Transaction
from maji.models.user import User
from maji.models.vendor import Vendor
from maji.models.zone import Zone

__all__ = [
    "TimestampMixin",
    "User",
    "Zone",
    "Vendor",
    "Product",
    "Order",
    "OrderItem",
    "Transaction",
    "Rating",
    "Alert",
    "AlertFeedback",
    "Report",
]
