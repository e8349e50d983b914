# backend/timegrid/services/slots/availability.py
"""
Service availability for the HTTP layer.

Loads everything the engine needs for one request through a single Session
(one transaction, one snapshot), converts ORM rows to engine values and runs
compute_availability.

Loads:
✓ store + settings (defaults when the store has none)
✓ active employees, the active service, active resources
✓ schedules of eligible employees in the date range
✓ pending/confirmed resource bookings in the date range
"""

import json
import logging
from dataclasses import asdict
from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.orm import Session

from ...config import settings as app_settings
from .aggregator import booking_date_range, compute_availability, eligible_employees
from .config import BookingConfig, get_booking_config
from .errors import NotFoundError
from .types import (
    AvailabilityRules,
    EmployeeInfo,
    ResourceBookingInfo,
    ResourceInfo,
    ServiceInfo,
    TimeRange,
)

logger = logging.getLogger(__name__)

ACTIVE_BOOKING_STATUSES = ("pending", "confirmed")


def calculate_service_availability(
    db: Session,
    shop: str,
    service_id: int,
    requested_date: date | None = None,
    employee_id: str | None = None,
    config: BookingConfig | None = None,
    now: datetime | None = None,
) -> dict:
    """
    Calculate available time slots for a service of a store.

    Raises:
        NotFoundError: unknown store or unknown/inactive service

    Returns:
        Dict for AvailabilityResponse.
    """
    config = config or get_booking_config()

    store = get_store(db, shop)
    if not store:
        raise NotFoundError("Store not found")

    service_row = _get_service(db, store.id, service_id)
    if not service_row:
        raise NotFoundError("Service not found")

    service = to_service_info(service_row)
    rules = rules_from_settings(store.settings)
    today, now = store_clock(store, now)

    employees = [to_employee_info(e) for e in _get_active_employees(db, store.id)]
    qualified = eligible_employees(employees, service.id, employee_id)

    start, end = booking_date_range(rules, today, requested_date, config)
    logger.info(
        "Availability request: shop=%s service=%s range=%s..%s limited=%s employees=%d",
        shop, service.id, start.isoformat(), end.isoformat(),
        rules.limit_booking_window, len(qualified),
    )

    schedules: dict[tuple[str, date], object] = {}
    if qualified and start <= end:
        rows = _get_schedules(db, [int(e.id) for e in qualified], start, end)
        for row in rows:
            schedules[(str(row.employee_id), row.date)] = row.slots
        logger.info(
            "Found schedules: total=%d employees_with_schedules=%d",
            len(rows), len({row.employee_id for row in rows}),
        )

    resources: list[ResourceInfo] = []
    resource_bookings: list[ResourceBookingInfo] | None = None
    if rules.use_resources and service.resource_type_id is not None and start <= end:
        resources = [
            to_resource_info(r)
            for r in _get_active_resources(db, store.id, int(service.resource_type_id))
        ]
        if resources:
            resource_bookings = [
                to_resource_booking_info(b)
                for b in _get_resource_bookings(db, [int(r.id) for r in resources], start, end)
            ]

    result = compute_availability(
        service,
        employees,
        schedules,
        rules,
        today=today,
        now=now,
        requested_date=requested_date,
        employee_id=employee_id,
        resources=resources,
        resource_bookings=resource_bookings,
        config=config,
    )

    logger.info(
        "Availability response: service=%s total=%d displayed=%d limit_applied=%s use_resources=%s",
        service.id, result.total, result.displayed_count, result.limit_applied, rules.use_resources,
    )

    return {
        "service": {
            "id": service.id,
            "title": service.title,
            "duration": service.duration,
        },
        "use_resources": rules.use_resources,
        "availabilities": [asdict(slot) for slot in result.slots],
        "total_availabilities": result.total,
        "displayed_count": result.displayed_count,
        "limit_applied": result.limit_applied,
        "message": result.message,
    }


# ── Row → engine value ───────────────────────────────────────────────────


def rules_from_settings(store_settings) -> AvailabilityRules:
    """Engine rules from a StoreSettings row; defaults when the row is missing."""
    if store_settings is None:
        return AvailabilityRules()

    return AvailabilityRules(
        working_hours_start=store_settings.working_hours_start,
        working_hours_end=store_settings.working_hours_end,
        open_days=AvailabilityRules.parse_open_days(store_settings.open_days),
        use_resources=bool(store_settings.use_resources),
        limit_booking_window=bool(store_settings.limit_booking_window),
        booking_window=store_settings.booking_window,
        limit_appointments=bool(store_settings.limit_appointments),
        max_appointments_displayed=store_settings.max_appointments_displayed,
    )


def store_timezone(store) -> ZoneInfo:
    name = store.timezone or app_settings.default_timezone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r for shop %s, using %s", name, store.shop, app_settings.default_timezone)
        return ZoneInfo(app_settings.default_timezone)


def store_clock(store, now: datetime | None = None) -> tuple[date, datetime]:
    """(today, now) on the store's wall clock, as naive local values."""
    tz = store_timezone(store)
    if now is None:
        local_now = datetime.now(tz)
    elif now.tzinfo is None:
        local_now = now.replace(tzinfo=tz)
    else:
        local_now = now.astimezone(tz)
    local_now = local_now.replace(tzinfo=None)
    return local_now.date(), local_now


def parse_service_ids(value) -> frozenset[str]:
    """Capability set from the JSON column (list, or a JSON-encoded list)."""
    if not value:
        return frozenset()
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            logger.warning("Malformed employee service_ids: %r", value)
            return frozenset()
    if not isinstance(value, list):
        return frozenset()
    return frozenset(str(v) for v in value)


def to_employee_info(row) -> EmployeeInfo:
    return EmployeeInfo(
        id=str(row.id),
        name=row.name,
        service_ids=parse_service_ids(row.service_ids),
    )


def to_service_info(row) -> ServiceInfo:
    return ServiceInfo(
        id=str(row.id),
        title=row.product_title,
        duration=row.duration,
        resource_type_id=str(row.resource_type_id) if row.resource_type_id is not None else None,
    )


def to_resource_info(row) -> ResourceInfo:
    return ResourceInfo(
        id=str(row.id),
        name=row.name,
        quantity=row.quantity,
        resource_type_id=str(row.resource_type_id),
    )


def to_resource_booking_info(row) -> ResourceBookingInfo:
    return ResourceBookingInfo(
        resource_id=str(row.resource_id),
        date=row.date,
        time_range=TimeRange.from_strings(row.start_time, row.end_time),
    )


# ── Database helpers ─────────────────────────────────────────────────────


def get_store(db: Session, shop: str):
    """Get active store by shop domain."""
    from ...models.generated import Stores
    return db.query(Stores).filter(
        Stores.shop == shop,
        Stores.is_active == 1,
    ).first()


def _get_service(db: Session, store_id: int, service_id: int):
    """Get active service of the store."""
    from ...models.generated import Services
    return db.query(Services).filter(
        Services.id == service_id,
        Services.store_id == store_id,
        Services.is_active == 1,
    ).first()


def _get_active_employees(db: Session, store_id: int) -> list:
    from ...models.generated import Employees
    return (
        db.query(Employees)
        .filter(
            Employees.store_id == store_id,
            Employees.is_active == 1,
        )
        .order_by(Employees.id)
        .all()
    )


def _get_active_resources(db: Session, store_id: int, resource_type_id: int) -> list:
    from ...models.generated import Resources
    return (
        db.query(Resources)
        .filter(
            Resources.store_id == store_id,
            Resources.resource_type_id == resource_type_id,
            Resources.is_active == 1,
        )
        .order_by(Resources.id)
        .all()
    )


def _get_schedules(db: Session, employee_ids: list[int], start: date, end: date) -> list:
    """Schedules of the given employees within [start, end]."""
    from ...models.generated import Schedules
    return (
        db.query(Schedules)
        .filter(
            Schedules.employee_id.in_(employee_ids),
            Schedules.date >= start,
            Schedules.date <= end,
        )
        .order_by(Schedules.date)
        .all()
    )


def _get_resource_bookings(db: Session, resource_ids: list[int], start: date, end: date) -> list:
    """Active bookings of the given resources within [start, end]."""
    from ...models.generated import ResourceBookings
    return (
        db.query(ResourceBookings)
        .filter(
            ResourceBookings.resource_id.in_(resource_ids),
            ResourceBookings.date >= start,
            ResourceBookings.date <= end,
            ResourceBookings.status.in_(ACTIVE_BOOKING_STATUSES),
        )
        .all()
    )
