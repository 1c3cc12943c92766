"""Small numeric and time helpers used across the application layer."""

import math
from datetime import datetime, timedelta, timezone


def round_half_up(value: float) -> int:
    """Round .5 up for positive values, unlike Python's banker's rounding."""
    return int(math.floor(value + 0.5))


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def variance(values: list[float]) -> float:
    """Population variance; 0 for an empty list."""
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return sum((v - mean) ** 2 for v in values) / len(values)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(moment: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def days_after(moment: datetime, days: float) -> datetime:
    return moment + timedelta(days=days)
