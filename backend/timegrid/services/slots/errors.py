class SlotsError(Exception):
    """Base error of the availability engine."""


class ScheduleValidationError(SlotsError, ValueError):
    """A persisted day schedule does not match the slot schema."""


class NotFoundError(SlotsError):
    """A store, service or employee the request refers to does not exist."""
