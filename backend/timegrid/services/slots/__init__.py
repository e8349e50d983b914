# backend/timegrid/services/slots/__init__.py
"""
Availability engine.

Grid:        working hours → fixed-width windows (seeds day schedules)
Resolver:    day schedule → availability blocks + unavailable ranges
Placement:   block + duration → back-to-back service windows
Aggregator:  employees × dates → grouped, filtered, capped candidate slots
Resources:   candidate slots → slots with a free resource unit
"""

from .config import BookingConfig, get_booking_config
from .errors import ScheduleValidationError, SlotsError
from .grid import generate_grid, default_day_slots
from .resolver import resolve
from .placement import place
from .resources import filter_by_resources
from .aggregator import compute_availability

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "SlotsError",
    "ScheduleValidationError",
    "generate_grid",
    "default_day_slots",
    "resolve",
    "place",
    "filter_by_resources",
    "compute_availability",
]
