# backend/timegrid/services/slots/resolver.py
"""
Schedule resolution.

Turns one employee's raw day schedule into:
- merged availability blocks (abutting available slots joined)
- unavailable ranges (booked/blocked slots, kept as-is)
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from .errors import ScheduleValidationError
from .types import ScheduleSlot, TimeRange


@dataclass
class ResolvedSchedule:
    available_blocks: list[TimeRange] = field(default_factory=list)
    unavailable_ranges: list[TimeRange] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.available_blocks


def parse_slots(raw_slots: Any) -> list[ScheduleSlot]:
    """
    Validate a stored slot list.

    Raises:
        ScheduleValidationError: the payload is not a list, or any record
            is missing startTime/endTime/isAvailable or has bad times.
    """
    if raw_slots is None:
        return []
    if not isinstance(raw_slots, list):
        raise ScheduleValidationError(
            f"Schedule slots must be a list, got {type(raw_slots).__name__}"
        )

    slots: list[ScheduleSlot] = []
    for index, raw in enumerate(raw_slots):
        if isinstance(raw, ScheduleSlot):
            slots.append(raw)
            continue
        try:
            slots.append(ScheduleSlot.model_validate(raw))
        except ValidationError as e:
            raise ScheduleValidationError(f"Invalid slot #{index}: {e.errors()[0]['msg']}") from e

    check_no_overlap(slots)
    return slots


def check_no_overlap(slots: Iterable[ScheduleSlot]) -> None:
    """Raise ScheduleValidationError when two slots of one day overlap."""
    ordered = sorted(slots, key=lambda s: s.time_range)
    for prev, cur in zip(ordered, ordered[1:]):
        if prev.time_range.overlaps(cur.time_range):
            raise ScheduleValidationError(
                f"Overlapping slots {prev.start_time}-{prev.end_time} "
                f"and {cur.start_time}-{cur.end_time}"
            )


def merge_available(slots: Iterable[ScheduleSlot]) -> list[TimeRange]:
    """Join available slots whose end equals the next start. Gaps break a block."""
    blocks: list[TimeRange] = []
    current: TimeRange | None = None

    for slot in sorted(slots, key=lambda s: s.time_range):
        rng = slot.time_range
        if current is None:
            current = rng
        elif current.end == rng.start:
            current = TimeRange(current.start, rng.end)
        else:
            blocks.append(current)
            current = rng

    if current is not None:
        blocks.append(current)

    return blocks


def resolve(raw_slots: Any) -> ResolvedSchedule:
    """
    Resolve a day schedule.

    A missing schedule or one without available slots resolves to an empty
    result; the employee then simply contributes nothing for that date.
    """
    slots = parse_slots(raw_slots)

    available = [s for s in slots if s.is_available]
    if not available:
        return ResolvedSchedule()

    unavailable = [s.time_range for s in slots if not s.is_available]

    return ResolvedSchedule(
        available_blocks=merge_available(available),
        unavailable_ranges=unavailable,
    )
