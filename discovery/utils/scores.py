"""
Score and time helpers used across the scorers.
"""

import math
from datetime import date, datetime, timezone
from typing import Optional


def clamp01(value: float) -> float:
    """Clamp to [0, 1]; NaN becomes 0."""
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def hours_since(dt: datetime, now: datetime) -> float:
    """Hours elapsed since dt (never negative)."""
    delta = ensure_utc(now) - ensure_utc(dt)
    return max(0.0, delta.total_seconds() / 3600.0)


def age_on(date_of_birth: date, today: date) -> int:
    """Age in whole years, with month/day correction."""
    years = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        years -= 1
    return years


def age_bracket(age: Optional[int]) -> Optional[str]:
    """Coarse age bucket used for cohort and diversity comparisons."""
    if age is None:
        return None
    if age < 25:
        return "18-24"
    if age < 30:
        return "25-29"
    if age < 35:
        return "30-34"
    if age < 40:
        return "35-39"
    if age < 50:
        return "40-49"
    return "50+"


def exponential_decay(hours: float, half_life_hours: float) -> float:
    """0.5 ** (hours / half_life); 1.0 at zero elapsed time."""
    return 0.5 ** (hours / half_life_hours)
