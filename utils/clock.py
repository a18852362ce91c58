"""
Date/time helpers for the appointment calendar.

All instants are naive datetimes expressed in the organization's local time
zone (``TIMEZONE`` config). Nothing here touches the database.
"""
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from flask import current_app, has_app_context

DEFAULT_TIMEZONE = "America/Sao_Paulo"

MONDAY, FRIDAY, SATURDAY = 0, 4, 5


def _config(key, default):
    if has_app_context():
        return current_app.config.get(key, default)
    return default


def now() -> datetime:
    tz = ZoneInfo(_config("TIMEZONE", DEFAULT_TIMEZONE))
    return datetime.now(tz).replace(tzinfo=None)


def today() -> date:
    return now().date()


def is_weekend(day: date) -> bool:
    return day.weekday() >= SATURDAY


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def slot_boundaries(day: date) -> list:
    """Every slot start for ``day`` within operating hours, weekends included."""
    opening = int(_config("OPENING_HOUR", 8))
    closing = int(_config("CLOSING_HOUR", 17))
    step = timedelta(minutes=int(_config("SLOT_MINUTES", 30)))

    current = datetime.combine(day, time(hour=opening))
    last = datetime.combine(day, time(hour=closing))
    out = []
    while current < last:
        out.append(current)
        current += step
    return out


def is_slot_boundary(instant: datetime) -> bool:
    return instant in slot_boundaries(instant.date())


def next_work_week(reference: date):
    """Monday 00:00 to Friday 23:59:59.999999 of the week after ``reference``."""
    days_to_monday = (MONDAY - reference.weekday()) % 7 or 7
    monday = reference + timedelta(days=days_to_monday)
    return start_of_day(monday), end_of_day(monday + timedelta(days=FRIDAY))


def previous_work_week(reference: date):
    """Monday 00:00 to Friday 23:59:59.999999 of the week before ``reference``."""
    monday = reference - timedelta(days=reference.weekday() + 7)
    return start_of_day(monday), end_of_day(monday + timedelta(days=FRIDAY))


def parse_day(value: str) -> date:
    # Expect "YYYY-MM-DD"
    return date.fromisoformat(value)


def parse_instant(value: str) -> datetime:
    # Expect ISO format like "2026-01-20T09:30:00"; offsets are converted to local time
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is not None:
        tz = ZoneInfo(_config("TIMEZONE", DEFAULT_TIMEZONE))
        dt = dt.astimezone(tz).replace(tzinfo=None)
    return dt
