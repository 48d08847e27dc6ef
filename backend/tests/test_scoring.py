"""Tests for scoring utilities.

Confidence = 0.5 + 0.45 * min(reputation / 1000, 1), rounded to 2 decimals
Platform fee = clamp(round(subtotal * rate), min_fee, max_fee)
"""

import pytest

from maji.services.scoring import (
    calculate_confidence,
    calculate_distance,
    calculate_platform_fee,
    running_mean,
)


class TestConfidence:
    """Test cases for calculate_confidence."""

    def test_zero_reputation_gives_base(self):
        assert calculate_confidence(0) == 0.5

    def test_cap_reputation_gives_max(self):
        assert calculate_confidence(1000) == 0.95

    def test_above_cap_is_clamped(self):
        assert calculate_confidence(5000) == 0.95

    def test_mid_reputation(self):
        """0.5 + 0.45 * 0.45 = 0.7025, rounded to 0.70."""
        assert calculate_confidence(450) == 0.70

    def test_negative_reputation_treated_as_zero(self):
        assert calculate_confidence(-20) == 0.5

    def test_monotonic_in_reputation(self):
        values = [calculate_confidence(r) for r in range(0, 1201, 50)]
        assert values == sorted(values)
        assert all(0.5 <= v <= 0.95 for v in values)


class TestPlatformFee:
    """Test cases for calculate_platform_fee with explicit parameters."""

    @pytest.mark.parametrize(
        "subtotal,expected",
        [
            (0, 500),          # below minimum
            (5000, 500),       # 250 -> clamped up
            (20000, 1000),     # 5%
            (200000, 10000),
            (10_000_000, 50000),  # 500000 -> clamped down
        ],
    )
    def test_fee_is_clamped(self, subtotal, expected):
        fee = calculate_platform_fee(subtotal, rate=0.05, min_fee=500, max_fee=50000)
        assert fee == expected

    def test_defaults_come_from_settings(self):
        assert calculate_platform_fee(20000) == 1000

    def test_fee_is_monotonic(self):
        fees = [
            calculate_platform_fee(s, rate=0.05, min_fee=500, max_fee=50000)
            for s in range(0, 2_000_000, 7919)
        ]
        assert fees == sorted(fees)
        assert all(500 <= f <= 50000 for f in fees)


class TestRunningMean:
    def test_first_value(self):
        assert running_mean(None, 0, 4) == 4.0

    def test_folds_value(self):
        # mean of [5, 3] is 4, adding 1 gives 3
        assert running_mean(4.0, 2, 1) == pytest.approx(3.0)

    def test_zero_count_ignores_stale_mean(self):
        assert running_mean(2.5, 0, 1) == 1.0


class TestDistance:
    """Haversine distance between (longitude, latitude) points."""

    FREETOWN = (-13.2317, 8.4657)
    BO = (-11.7383, 7.9647)

    def test_identity(self):
        assert calculate_distance(self.FREETOWN, self.FREETOWN) == 0.0

    def test_symmetry(self):
        forward = calculate_distance(self.FREETOWN, self.BO)
        backward = calculate_distance(self.BO, self.FREETOWN)
        assert forward == pytest.approx(backward)

    def test_known_distance(self):
        """Freetown to Bo is roughly 174 km as the crow flies."""
        distance = calculate_distance(self.FREETOWN, self.BO)
        assert 165_000 < distance < 185_000

    def test_small_offset(self):
        """0.0009 degrees of latitude is about 100 m."""
        lng, lat = self.FREETOWN
        distance = calculate_distance((lng, lat), (lng, lat + 0.0009))
        assert 99 < distance < 101

    def test_antipodal_points_do_not_fail(self):
        distance = calculate_distance((0.0, 0.0), (180.0, 0.0))
        assert distance == pytest.approx(3.14159265 * 6371e3, rel=1e-6)
