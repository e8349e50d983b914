# backend/timegrid/services/slots/placement.py
"""
Slot placement inside an availability block.

Windows are exactly one service duration wide and placed back-to-back from
the block start: 09:00-09:30, 09:30-10:00, ... for a 30 minute service.
"""

from collections.abc import Iterable

from .types import TimeRange


def has_overlap(window: TimeRange, ranges: Iterable[TimeRange]) -> bool:
    return any(window.overlaps(r) for r in ranges)


def place(
    block: TimeRange,
    duration_minutes: int,
    unavailable_ranges: Iterable[TimeRange] = (),
) -> list[TimeRange]:
    """
    Enumerate windows of duration_minutes within block.

    A window is kept when it ends inside the block and does not overlap any
    unavailable range (touching boundaries are not an overlap).
    """
    if duration_minutes <= 0:
        raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")

    blocked = list(unavailable_ranges)
    windows: list[TimeRange] = []

    t = block.start
    while t + duration_minutes <= block.end:
        window = TimeRange(t, t + duration_minutes)
        if not has_overlap(window, blocked):
            windows.append(window)
        t += duration_minutes

    return windows
