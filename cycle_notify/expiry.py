from __future__ import annotations

import math
from datetime import date, datetime, timedelta

from .config import ALERT_WINDOW_MAX_DAYS, ALERT_WINDOW_MIN_DAYS
from .models import DurationUnit, ExpiryResult, Item
from .utils import add_months, start_of_day_utc

SECONDS_PER_DAY = 24 * 60 * 60


def compute_expiry_date(start: date, duration: int, unit: DurationUnit) -> date:
    if unit is DurationUnit.DAYS:
        return start + timedelta(days=duration)
    if unit is DurationUnit.MONTHS:
        return add_months(start, duration)
    if unit is DurationUnit.YEARS:
        return add_months(start, duration * 12)
    raise ValueError(f"Unsupported duration unit: {unit!r}")


def days_left(expiry_date: date, now: datetime) -> int:
    """Whole days until expiry, rounded up; the expiry date starts at 00:00 UTC."""
    delta = start_of_day_utc(expiry_date) - now
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def is_alert_worthy(left: int) -> bool:
    return ALERT_WINDOW_MIN_DAYS <= left <= ALERT_WINDOW_MAX_DAYS


def evaluate(item: Item, now: datetime) -> ExpiryResult:
    expiry_date = compute_expiry_date(item.start_date, item.duration, item.unit)
    return ExpiryResult(name=item.name, days_left=days_left(expiry_date, now), expiry_date=expiry_date)
