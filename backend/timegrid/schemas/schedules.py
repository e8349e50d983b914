# backend/timegrid/schemas/schedules.py

from datetime import date
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator

from ..services.slots.resolver import check_no_overlap
from ..services.slots.types import ScheduleSlot


class ScheduleReplace(BaseModel):
    slots: list[ScheduleSlot]

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("slots")
    @classmethod
    def _no_overlap(cls, value: list[ScheduleSlot]) -> list[ScheduleSlot]:
        check_no_overlap(value)
        return value


class ScheduleSlotUpdate(BaseModel):
    is_available: Optional[StrictBool] = Field(default=None, alias="isAvailable")
    booking_id: Optional[Union[str, int]] = Field(default=None, alias="bookingId")

    model_config = ConfigDict(populate_by_name=True)


class ScheduleRead(BaseModel):
    id: str
    employee_id: str = Field(alias="employeeId")
    date: date
    slots: list[ScheduleSlot]

    model_config = ConfigDict(populate_by_name=True)
