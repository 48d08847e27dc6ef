"""Tests for request validation and error serialization."""

from datetime import datetime
from uuid import uuid4

import pytest
from pydantic import ValidationError

from maji.core.errors import InvalidTransition, MinimumOrderNotMet, NotFound
from maji.schemas.alert import AlertCreate, AlertFeedbackCreate
from maji.schemas.payment import PaymentWebhook


class TestAlertCreate:
    def test_aware_eta_becomes_naive_utc(self):
        alert = AlertCreate(
            zone_id=uuid4(), type="WATER_COMING", eta="2026-10-19T07:00:00+01:00"
        )
        assert alert.eta == datetime(2026, 10, 19, 6, 0, 0)

    def test_duration_bounds(self):
        with pytest.raises(ValidationError):
            AlertCreate(zone_id=uuid4(), type="WATER_COMING", duration=0)
        with pytest.raises(ValidationError):
            AlertCreate(zone_id=uuid4(), type="WATER_COMING", duration=1441)


class TestAlertFeedbackCreate:
    def test_actual_start_becomes_naive_utc(self):
        feedback = AlertFeedbackCreate(
            accurate=False, actual_start_time="2026-10-19T09:30:00+01:00", actual_duration=40
        )
        assert feedback.actual_start_time == datetime(2026, 10, 19, 8, 30, 0)

    def test_actual_duration_must_be_positive(self):
        with pytest.raises(ValidationError):
            AlertFeedbackCreate(accurate=True, actual_duration=0)


class TestPaymentWebhook:
    @pytest.mark.parametrize("status,expected", [("SUCCESS", True), ("success", True), ("FAILED", False)])
    def test_succeeded(self, status, expected):
        webhook = PaymentWebhook(status=status, order_id="MJ-2026-4F1A2B")
        assert webhook.succeeded is expected


class TestErrors:
    def test_not_found_codes(self):
        error = NotFound("order")
        assert error.status_code == 404
        assert error.to_dict() == {"code": "E5001", "message": "Order not found"}

    def test_transition_details(self):
        error = InvalidTransition("order", "PENDING", "PAID")
        body = error.to_dict()
        assert body["code"] == "E5002"
        assert body["details"] == {"entity": "order", "current": "PENDING", "requested": "PAID"}

    def test_minimum_order_details(self):
        assert MinimumOrderNotMet(10000).to_dict()["details"] == {"min_order": 10000}
