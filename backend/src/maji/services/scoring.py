"""Scoring utilities shared by alerts, orders and reports.

All functions here are pure so they can be unit tested without a database.
"""

import math

from maji.core.config import settings

# Reputation at which a scout reaches maximum confidence
REPUTATION_CAP = 1000
CONFIDENCE_BASE = 0.5
CONFIDENCE_MAX_BONUS = 0.45

EARTH_RADIUS_METERS = 6371e3


def calculate_confidence(reputation: int) -> float:
    """Calculate alert confidence from a scout's reputation.

    Formula: 0.5 + 0.45 * min(reputation / 1000, 1), rounded to 2 decimals.

    Args:
        reputation: Scout reputation points (non-negative)

    Returns:
        Confidence in [0.5, 0.95]
    """
    factor = min(max(reputation, 0) / REPUTATION_CAP, 1.0)
    return round(CONFIDENCE_BASE + factor * CONFIDENCE_MAX_BONUS, 2)


def calculate_platform_fee(
    subtotal: int,
    rate: float | None = None,
    min_fee: int | None = None,
    max_fee: int | None = None,
) -> int:
    """Calculate the platform fee for an order subtotal.

    Args:
        subtotal: Order subtotal in Leones
        rate: Fee rate, defaults to PLATFORM_FEE_RATE
        min_fee: Lower bound, defaults to PLATFORM_FEE_MIN
        max_fee: Upper bound, defaults to PLATFORM_FEE_MAX

    Returns:
        Fee in Leones, clamped to [min_fee, max_fee]
    """
    if rate is None:
        rate = settings.PLATFORM_FEE_RATE
    if min_fee is None:
        min_fee = settings.PLATFORM_FEE_MIN
    if max_fee is None:
        max_fee = settings.PLATFORM_FEE_MAX

    fee = round(subtotal * rate)
    return min(max(fee, min_fee), max_fee)


def running_mean(mean: float | None, count: int, value: float) -> float:
    """Fold one more value into a mean over ``count`` previous values."""
    if not count or mean is None:
        return float(value)
    return (mean * count + value) / (count + 1)


def calculate_distance(
    point1: tuple[float, float], point2: tuple[float, float]
) -> float:
    """Haversine distance between two (longitude, latitude) points.

    Args:
        point1: (longitude, latitude) in degrees
        point2: (longitude, latitude) in degrees

    Returns:
        Great-circle distance in meters
    """
    lng1, lat1 = point1
    lng2, lat2 = point2

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    a = min(a, 1.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c
