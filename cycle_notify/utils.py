from __future__ import annotations

from datetime import date, datetime, timedelta, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_start_date(value: str) -> date:
    """Parse the date part of a `YYYY-MM-DD` or ISO timestamp string."""
    normalized = value.strip()
    if "T" in normalized:
        normalized = normalized.split("T", 1)[0]
    try:
        return date.fromisoformat(normalized)
    except ValueError as exc:
        raise ValueError(f"Invalid date format: {value}") from exc


def add_months(start: date, months: int) -> date:
    """
    Add calendar months, carrying the day-of-month over.

    Days past the end of the target month roll into the following month
    instead of being clamped (Jan 31 + 1 month -> Mar 3 in a non-leap year).
    """
    total = start.month - 1 + months
    year = start.year + total // 12
    month = total % 12 + 1
    return date(year, month, 1) + timedelta(days=start.day - 1)


def start_of_day_utc(d: date) -> datetime:
    return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)


def format_local_date(d: date) -> str:
    return f"{d.year}/{d.month}/{d.day}"
