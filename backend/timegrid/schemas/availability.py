# backend/timegrid/schemas/availability.py
"""
Pydantic schemas for the availabilities API.

Wire format is camelCase; Python attributes stay snake_case.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ServiceSummary(CamelModel):
    id: str
    title: str
    duration: int


class EmployeeRead(CamelModel):
    id: str
    name: str


class AvailableResourceRead(CamelModel):
    id: str
    name: str
    quantity: int
    available: int


class CandidateSlotRead(CamelModel):
    """One bookable window with everyone who can take it."""
    date: date
    start_time: str  # "HH:MM"
    end_time: str
    employees: list[EmployeeRead]
    requires_resource: Optional[bool] = None
    available_resources: Optional[list[AvailableResourceRead]] = None


class AvailabilityResponse(CamelModel):
    service: ServiceSummary
    use_resources: bool = False
    availabilities: list[CandidateSlotRead] = []
    total_availabilities: int = 0
    displayed_count: int = 0
    limit_applied: bool = False
    message: Optional[str] = None
