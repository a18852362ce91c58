"""
Slot Calculator.

Availability is derived fresh from the bookings and block periods tables on
every call; nothing is cached between calls.
"""
from datetime import date, datetime

from models.block_period import BlockPeriod
from models.booking import Booking, SCHEDULED
from utils import clock


def _active_blocks(day_start: datetime, day_end: datetime, now: datetime) -> list:
    return (
        BlockPeriod.query
        .filter(BlockPeriod.end > now, BlockPeriod.start <= day_end, BlockPeriod.end > day_start)
        .all()
    )


def _taken_instants(day_start: datetime, day_end: datetime) -> set:
    rows = (
        Booking.query
        .with_entities(Booking.scheduled_at)
        .filter(
            Booking.status == SCHEDULED,
            Booking.scheduled_at >= day_start,
            Booking.scheduled_at <= day_end,
        )
        .all()
    )
    return {r.scheduled_at for r in rows}


def available_slots(day: date) -> list:
    """Bookable slot starts for ``day`` in ascending order."""
    if clock.is_weekend(day):
        return []

    now = clock.now()
    candidates = [c for c in clock.slot_boundaries(day) if c > now]
    if not candidates:
        return []

    day_start, day_end = clock.start_of_day(day), clock.end_of_day(day)
    blocks = _active_blocks(day_start, day_end, now)
    taken = _taken_instants(day_start, day_end)

    return [
        c for c in candidates
        if c not in taken and not any(b.covers(c) for b in blocks)
    ]


def is_available(instant: datetime) -> bool:
    return instant in available_slots(instant.date())
