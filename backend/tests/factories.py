# backend/tests/factories.py
"""Row builders for API tests."""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from timegrid.models.generated import (
    Employees,
    ResourceBookings,
    Resources,
    ResourceTypes,
    Schedules,
    Services,
    StoreSettings,
    Stores,
)

ALL_DAYS = "0,1,2,3,4,5,6"


def store_today(tz: str = "UTC") -> date:
    return datetime.now(ZoneInfo(tz)).date()


def days_ahead(n: int, tz: str = "UTC") -> date:
    return store_today(tz) + timedelta(days=n)


def slot(start: str, end: str, available: bool = True, booking_id=None) -> dict:
    return {"startTime": start, "endTime": end, "isAvailable": available, "bookingId": booking_id}


def create_store(db, shop, *, with_settings=True, **settings_kwargs):
    store = Stores(shop=shop, name="Demo", timezone="UTC")
    db.add(store)
    db.flush()
    if with_settings:
        values = {
            "working_hours_start": "09:00",
            "working_hours_end": "17:00",
            "open_days": ALL_DAYS,
            "use_resources": 0,
            "limit_booking_window": 0,
            "booking_window": 30,
            "limit_appointments": 0,
            "max_appointments_displayed": 10,
        }
        values.update(settings_kwargs)
        db.add(StoreSettings(store_id=store.id, **values))
    db.commit()
    db.refresh(store)
    return store


def create_service(db, store, *, duration=30, product_id="8444945268933", title="Haircut", **kwargs):
    service = Services(
        store_id=store.id,
        product_id=product_id,
        product_title=title,
        duration=duration,
        **kwargs,
    )
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


def create_employee(db, store, name, service_ids=(), is_active=1):
    employee = Employees(
        store_id=store.id,
        name=name,
        service_ids=[str(s) for s in service_ids],
        is_active=is_active,
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)
    return employee


def create_schedule(db, employee, day, slots):
    schedule = Schedules(employee_id=employee.id, date=day, slots=slots)
    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    return schedule


def create_resource(db, store, name, quantity=1, type_name="Room"):
    resource_type = ResourceTypes(store_id=store.id, name=type_name)
    db.add(resource_type)
    db.flush()
    resource = Resources(
        store_id=store.id,
        resource_type_id=resource_type.id,
        name=name,
        quantity=quantity,
    )
    db.add(resource)
    db.commit()
    db.refresh(resource)
    return resource


def create_resource_booking(db, resource, day, start, end, status="confirmed"):
    booking = ResourceBookings(
        resource_id=resource.id,
        date=day,
        start_time=start,
        end_time=end,
        status=status,
    )
    db.add(booking)
    db.commit()
    return booking
