"""
Protein tracker utility functions
"""

from __future__ import annotations
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple


# Time helpers

def utcnow() -> datetime:
    """Naive UTC timestamp; all DateTime columns store naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today() -> date:
    return utcnow().date()


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse YYYY-MM-DD (or a full ISO timestamp) into a date. Raises ValueError."""
    if value is None or value == "":
        return None
    value = value.strip()
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return to_naive_utc(datetime.fromisoformat(value.replace("Z", "+00:00"))).date()


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """[start, end) datetimes covering a calendar day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


# Nutrition helpers

NUTRIENT_KEYS = ("calories", "protein", "carbs", "fat", "fiber", "sugar", "sodium")


def empty_nutrition() -> Dict[str, float]:
    return {key: 0.0 for key in NUTRIENT_KEYS}


def add_nutrition(total: Dict[str, float], data: Optional[Mapping[str, Any]]) -> Dict[str, float]:
    """Accumulate a NutritionData mapping into total; missing or non-numeric keys count as 0."""
    if not data:
        return total
    for key in NUTRIENT_KEYS:
        value = data.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            total[key] = total.get(key, 0.0) + float(value)
    return total


def round_nutrition(data: Mapping[str, float], ndigits: int = 2) -> Dict[str, float]:
    return {key: round(float(data.get(key, 0.0)), ndigits) for key in NUTRIENT_KEYS}
