# backend/timegrid/services/slots/grid.py
"""
Day grid generation.

Partitions the store's working hours into fixed-width windows for one date.
Used to seed an editable day schedule when none is stored yet.

Contains:
✓ open days of the store (closed weekday → empty grid)
✓ working hours [start, end)

Does NOT contain:
✗ Employee availability (see resolver)
✗ Bookings (see placement / resources)
"""

from collections.abc import Iterable
from datetime import date

from .config import minutes_to_time_str, time_str_to_minutes
from .types import ScheduleSlot, TimeRange


def store_weekday(target_date: date) -> int:
    """Weekday with 0 = Sunday .. 6 = Saturday."""
    return target_date.isoweekday() % 7


def is_open_day(target_date: date, open_days: Iterable[int]) -> bool:
    return store_weekday(target_date) in set(open_days)


def generate_grid(
    target_date: date,
    working_hours_start: str,
    working_hours_end: str,
    open_days: Iterable[int],
    granularity_minutes: int,
) -> list[TimeRange]:
    """
    Split working hours of target_date into granularity-wide windows.

    Returns:
        Ordered, contiguous, non-overlapping windows. A trailing partial
        window is dropped. Empty list when the store is closed that day.
    """
    if granularity_minutes <= 0:
        raise ValueError(f"granularity_minutes must be positive, got {granularity_minutes}")

    if not is_open_day(target_date, open_days):
        return []

    start_min = time_str_to_minutes(working_hours_start)
    end_min = time_str_to_minutes(working_hours_end)

    windows: list[TimeRange] = []
    t = start_min
    while t + granularity_minutes <= end_min:
        windows.append(TimeRange(t, t + granularity_minutes))
        t += granularity_minutes

    return windows


def default_day_slots(
    target_date: date,
    working_hours_start: str,
    working_hours_end: str,
    open_days: Iterable[int],
    granularity_minutes: int,
) -> list[ScheduleSlot]:
    """Seed slots for a new day schedule: the full grid, all available."""
    return [
        ScheduleSlot(
            start_time=minutes_to_time_str(window.start),
            end_time=minutes_to_time_str(window.end),
            is_available=True,
            booking_id=None,
        )
        for window in generate_grid(
            target_date,
            working_hours_start,
            working_hours_end,
            open_days,
            granularity_minutes,
        )
    ]
