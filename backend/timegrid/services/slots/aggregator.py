# backend/timegrid/services/slots/aggregator.py
"""
Multi-employee / multi-day availability aggregation.

Pipeline for one service:
  eligible employees → date range → resolve + place per (employee, date)
  → group by (date, start, end) → resource filter → past filter → cap

Everything here is pure: inputs are plain values already loaded from
storage, `today` and `now` are passed in (store-local wall clock).
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any

from .config import BookingConfig, get_booking_config
from .errors import ScheduleValidationError
from .grid import is_open_day
from .placement import place
from .resolver import resolve
from .resources import filter_by_resources, resources_for_type
from .types import (
    AvailabilityResult,
    AvailabilityRules,
    CandidateSlot,
    EmployeeInfo,
    EmployeeRef,
    ResourceBookingInfo,
    ResourceInfo,
    ServiceInfo,
    TimeRange,
)

logger = logging.getLogger(__name__)

NO_EMPLOYEES_MESSAGE = "No employees available for this service"
CLOSED_DAY_MESSAGE = "Store is closed on the requested date"


@dataclass(frozen=True)
class EmployeeWindow:
    """One placed window for one employee, before grouping."""
    date: date
    window: TimeRange
    employee_id: str
    employee_name: str


# ── Inputs ───────────────────────────────────────────────────────────────


def eligible_employees(
    employees: Iterable[EmployeeInfo],
    service_id: str,
    employee_id: str | None = None,
) -> list[EmployeeInfo]:
    """Employees able to perform service_id, optionally narrowed to one employee."""
    pool = list(employees)
    if employee_id is not None:
        pool = [e for e in pool if e.id == str(employee_id)]
    return [e for e in pool if str(service_id) in e.service_ids]


def booking_date_range(
    rules: AvailabilityRules,
    today: date,
    requested_date: date | None = None,
    config: BookingConfig | None = None,
) -> tuple[date, date]:
    """
    Inclusive [start, end] of dates to search.

    start is always today. end is the requested date, else today + booking
    window when limited, else today + max horizon. A requested date never
    extends past the horizon. start > end means nothing to search.
    """
    config = config or get_booking_config()

    if rules.limit_booking_window:
        days = rules.booking_window or config.default_booking_window_days
    else:
        days = config.max_horizon_days
    horizon_end = today + timedelta(days=days)

    if requested_date is None:
        return today, horizon_end
    return today, min(requested_date, horizon_end)


def iter_dates(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        if current == date.max:
            return
        current += timedelta(days=1)


# ── Per employee / date ──────────────────────────────────────────────────


def employee_day_windows(
    employee: EmployeeInfo,
    target_date: date,
    raw_slots: Any,
    duration_minutes: int,
) -> list[EmployeeWindow]:
    """Resolve one day schedule and place service windows in every block."""
    try:
        resolved = resolve(raw_slots)
    except ScheduleValidationError as e:
        raise ScheduleValidationError(
            f"Malformed schedule for employee {employee.id} on {target_date.isoformat()}: {e}"
        ) from e

    if resolved.is_empty:
        return []

    logger.debug(
        "employee=%s date=%s blocks=%d unavailable=%d",
        employee.id,
        target_date.isoformat(),
        len(resolved.available_blocks),
        len(resolved.unavailable_ranges),
    )

    windows: list[EmployeeWindow] = []
    for block in resolved.available_blocks:
        for window in place(block, duration_minutes, resolved.unavailable_ranges):
            windows.append(EmployeeWindow(
                date=target_date,
                window=window,
                employee_id=employee.id,
                employee_name=employee.name,
            ))
    return windows


def collect_windows(
    service: ServiceInfo,
    employees: list[EmployeeInfo],
    schedules: Mapping[tuple[str, date], Any],
    start: date,
    end: date,
    open_days: Iterable[int],
) -> list[EmployeeWindow]:
    """
    Run resolve + place for every open date and every employee with a schedule.

    schedules maps (employee_id, date) → raw slot list. Missing keys mean the
    employee has no schedule that day and are skipped.
    """
    open_days = frozenset(open_days)
    windows: list[EmployeeWindow] = []

    for current in iter_dates(start, end):
        if not is_open_day(current, open_days):
            continue
        for employee in employees:
            raw_slots = schedules.get((employee.id, current))
            if raw_slots is None:
                continue
            windows.extend(employee_day_windows(employee, current, raw_slots, service.duration))

    return windows


# ── Grouping / filtering ─────────────────────────────────────────────────


def group_windows(windows: Iterable[EmployeeWindow]) -> list[CandidateSlot]:
    """Collapse windows with identical (date, start, end); sort by date then start."""
    grouped: dict[tuple[date, str, str], CandidateSlot] = {}

    for w in windows:
        key = (w.date, w.window.start_time, w.window.end_time)
        slot = grouped.get(key)
        if slot is None:
            slot = CandidateSlot(
                date=w.date,
                start_time=w.window.start_time,
                end_time=w.window.end_time,
            )
            grouped[key] = slot
        if any(e.id == w.employee_id for e in slot.employees):
            continue
        slot.employees.append(EmployeeRef(id=w.employee_id, name=w.employee_name))

    # Zero-padded "HH:MM" sorts correctly as a string
    return sorted(grouped.values(), key=lambda s: (s.date, s.start_time))


def drop_past(slots: Iterable[CandidateSlot], now: datetime) -> list[CandidateSlot]:
    """Keep slots starting strictly after now (store-local, naive)."""
    if now.tzinfo is not None:
        now = now.replace(tzinfo=None)

    result = []
    for slot in slots:
        hours, minutes = (int(p) for p in slot.start_time.split(":"))
        starts_at = datetime.combine(slot.date, time(0, 0)) + timedelta(hours=hours, minutes=minutes)
        if starts_at > now:
            result.append(slot)
    return result


def apply_limit(
    slots: list[CandidateSlot],
    rules: AvailabilityRules,
) -> tuple[list[CandidateSlot], bool]:
    """Truncate to max_appointments_displayed when the store limits results."""
    if rules.limit_appointments and rules.max_appointments_displayed:
        displayed = slots[:rules.max_appointments_displayed]
        return displayed, len(displayed) < len(slots)
    return slots, False


# ── Entry point ──────────────────────────────────────────────────────────


def compute_availability(
    service: ServiceInfo,
    employees: Iterable[EmployeeInfo],
    schedules: Mapping[tuple[str, date], Any],
    rules: AvailabilityRules,
    *,
    today: date,
    now: datetime,
    requested_date: date | None = None,
    employee_id: str | None = None,
    resources: Iterable[ResourceInfo] = (),
    resource_bookings: Iterable[ResourceBookingInfo] | None = None,
    config: BookingConfig | None = None,
) -> AvailabilityResult:
    """
    Compute bookable slots for a service.

    Returns:
        AvailabilityResult with displayed slots, the true total after the
        past filter, whether the display cap truncated anything, and an
        explanatory message for empty results that are not errors.
    """
    config = config or get_booking_config()

    qualified = eligible_employees(employees, service.id, employee_id)
    if not qualified:
        return AvailabilityResult(slots=[], total=0, limit_applied=False, message=NO_EMPLOYEES_MESSAGE)

    if requested_date is not None and not is_open_day(requested_date, rules.open_days):
        return AvailabilityResult(slots=[], total=0, limit_applied=False, message=CLOSED_DAY_MESSAGE)

    start, end = booking_date_range(rules, today, requested_date, config)

    windows = collect_windows(service, qualified, schedules, start, end, rules.open_days)
    slots = group_windows(windows)

    if rules.use_resources and service.resource_type_id is not None:
        pool = resources_for_type(resources, service.resource_type_id)
        slots = filter_by_resources(slots, pool, resource_bookings)

    future = drop_past(slots, now)
    displayed, limit_applied = apply_limit(future, rules)

    logger.debug(
        "service=%s windows=%d grouped=%d future=%d displayed=%d",
        service.id, len(windows), len(slots), len(future), len(displayed),
    )

    return AvailabilityResult(slots=displayed, total=len(future), limit_applied=limit_applied)
