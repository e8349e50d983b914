# backend/timegrid/services/slots/types.py
"""
Value types shared by the availability engine.

Times of day are minutes since local midnight; intervals are half-open.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator, model_validator

from .config import minutes_to_time_str, time_str_to_minutes


@dataclass(frozen=True, order=True)
class TimeRange:
    """Half-open time-of-day interval [start, end) in minutes."""
    start: int
    end: int

    def overlaps(self, other: "TimeRange") -> bool:
        return self.start < other.end and self.end > other.start

    @property
    def start_time(self) -> str:
        return minutes_to_time_str(self.start)

    @property
    def end_time(self) -> str:
        return minutes_to_time_str(self.end)

    @classmethod
    def from_strings(cls, start_time: str, end_time: str) -> "TimeRange":
        return cls(time_str_to_minutes(start_time), time_str_to_minutes(end_time))


class ScheduleSlot(BaseModel):
    """One stored slot of an employee's day schedule."""
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    is_available: StrictBool = Field(alias="isAvailable")
    booking_id: Optional[Union[str, int]] = Field(default=None, alias="bookingId")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("start_time", "end_time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        time_str_to_minutes(value)
        return value.strip()

    @model_validator(mode="after")
    def _check_order(self):
        if time_str_to_minutes(self.end_time) <= time_str_to_minutes(self.start_time):
            raise ValueError(f"endTime {self.end_time} must be after startTime {self.start_time}")
        return self

    @property
    def time_range(self) -> TimeRange:
        return TimeRange.from_strings(self.start_time, self.end_time)


@dataclass(frozen=True)
class EmployeeInfo:
    id: str
    name: str
    service_ids: frozenset[str] = frozenset()


@dataclass(frozen=True)
class ServiceInfo:
    id: str
    title: str
    duration: int
    resource_type_id: Optional[str] = None

    def __post_init__(self):
        if self.duration <= 0:
            raise ValueError(f"Service duration must be positive, got {self.duration}")


@dataclass(frozen=True)
class ResourceInfo:
    id: str
    name: str
    quantity: int
    resource_type_id: str

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError(f"Resource quantity must be at least 1, got {self.quantity}")


@dataclass(frozen=True)
class ResourceBookingInfo:
    resource_id: str
    date: date
    time_range: TimeRange


@dataclass(frozen=True)
class AvailabilityRules:
    """Store settings relevant to availability."""
    working_hours_start: str = "09:00"
    working_hours_end: str = "17:00"
    open_days: frozenset[int] = frozenset({1, 2, 3, 4, 5})  # 0 = Sunday
    use_resources: bool = False
    limit_booking_window: bool = False
    booking_window: int = 30
    limit_appointments: bool = False
    max_appointments_displayed: int = 10

    @staticmethod
    def parse_open_days(value: str | None) -> frozenset[int]:
        """Parse "1,2,3" into {1, 2, 3}; blanks are ignored."""
        if not value:
            return frozenset()
        days = set()
        for part in value.split(","):
            part = part.strip()
            if not part:
                continue
            day = int(part)
            if not 0 <= day <= 6:
                raise ValueError(f"Open day must be within 0..6, got {day}")
            days.add(day)
        return frozenset(days)


@dataclass(frozen=True)
class EmployeeRef:
    id: str
    name: str


@dataclass(frozen=True)
class AvailableResource:
    id: str
    name: str
    quantity: int
    available: int


@dataclass
class CandidateSlot:
    date: date
    start_time: str
    end_time: str
    employees: list[EmployeeRef] = field(default_factory=list)
    requires_resource: Optional[bool] = None
    available_resources: Optional[list[AvailableResource]] = None

    @property
    def time_range(self) -> TimeRange:
        return TimeRange.from_strings(self.start_time, self.end_time)


@dataclass
class AvailabilityResult:
    slots: list[CandidateSlot]
    total: int
    limit_applied: bool
    message: Optional[str] = None

    @property
    def displayed_count(self) -> int:
        return len(self.slots)
