"""API v1 routers."""

from maji.api.v1 import alerts, auth, orders, payments, reports, users, vendors, zones

__all__ = ["alerts", "auth", "orders", "payments", "reports", "users", "vendors", "zones"]
