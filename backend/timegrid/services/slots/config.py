# backend/timegrid/services/slots/config.py
"""
Booking configuration for availability calculation.
"""

import re
from dataclasses import dataclass
from functools import lru_cache

from .errors import ScheduleValidationError


_TIME_RE = re.compile(r"^([01]\d|2[0-4]):([0-5]\d)$")

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for the availability engine.

    Attributes:
        max_horizon_days: Upper bound of the search window when the store
            does not limit its booking window
        default_booking_window_days: Window length used when a store limits
            the window but has no explicit length
        grid_step_minutes: Granularity of seeded day grids (15/30/60)
    """
    max_horizon_days: int = 365
    default_booking_window_days: int = 30
    grid_step_minutes: int = 30  # 15 / 30 / 60

    def __post_init__(self):
        """Validate configuration."""
        if self.grid_step_minutes not in (15, 30, 60):
            raise ValueError(f"grid_step_minutes must be 15, 30, or 60, got {self.grid_step_minutes}")
        if self.max_horizon_days < 0:
            raise ValueError(f"max_horizon_days must be >= 0, got {self.max_horizon_days}")

    @property
    def slots_per_day(self) -> int:
        """
        Number of grid slots in a full day.

        - 15 min → 96 slots
        - 30 min → 48 slots
        - 60 min → 24 slots
        """
        return MINUTES_PER_DAY // self.grid_step_minutes


@lru_cache
def get_booking_config() -> BookingConfig:
    """Get booking configuration (singleton)."""
    return BookingConfig()


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight. "24:00" is allowed as a day end."""
    if not isinstance(value, str):
        raise ScheduleValidationError(f"Time must be a string, got {value!r}")
    match = _TIME_RE.match(value.strip())
    if not match:
        raise ScheduleValidationError(f"Invalid time {value!r}, expected HH:MM")
    minutes = int(match.group(1)) * 60 + int(match.group(2))
    if minutes > MINUTES_PER_DAY:
        raise ScheduleValidationError(f"Time {value!r} is past the end of the day")
    return minutes


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
