# backend/timegrid/routers/schedules.py
# Operator only. One schedule per (employee, date); slots replaced wholesale.

import logging
from datetime import date

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import ShopContext, require_operator
from ..errors import ApiError
from ..models.generated import Employees as DBEmployees
from ..models.generated import Schedules as DBSchedules
from ..schemas.schedules import ScheduleRead, ScheduleReplace, ScheduleSlotUpdate
from ..services.slots import ScheduleValidationError, default_day_slots, get_booking_config
from ..services.slots.availability import get_store, rules_from_settings
from ..services.slots.resolver import parse_slots

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedules", tags=["schedules"])


def _get_employee(db: Session, shop: str, employee_id: int) -> DBEmployees:
    store = get_store(db, shop)
    if not store:
        raise ApiError(404, "Store not found")

    obj = db.get(DBEmployees, employee_id)
    if not obj or obj.store_id != store.id:
        raise ApiError(404, "Employee not found")
    return obj


def _find_schedule(db: Session, employee_id: int, day: date) -> DBSchedules | None:
    return (
        db.query(DBSchedules)
        .filter(
            DBSchedules.employee_id == employee_id,
            DBSchedules.date == day,
        )
        .first()
    )


def _to_read(obj: DBSchedules) -> ScheduleRead:
    try:
        slots = parse_slots(obj.slots)
    except ScheduleValidationError as e:
        logger.error("Malformed schedule %s: %s", obj.id, e)
        raise ApiError(500, "Internal server error", str(e)) from None
    return ScheduleRead(
        id=str(obj.id),
        employee_id=str(obj.employee_id),
        date=obj.date,
        slots=slots,
    )


def _dump_slots(slots) -> list[dict]:
    return [s.model_dump(by_alias=True) for s in slots]


@router.get("/{employee_id}/{day}", response_model=ScheduleRead)
def get_or_create_schedule(
    employee_id: int,
    day: date,
    ctx: ShopContext = Depends(require_operator),
    db: Session = Depends(get_db),
):
    """Stored schedule, or a new one seeded from the store's working-hours grid."""
    employee = _get_employee(db, ctx.shop, employee_id)

    obj = _find_schedule(db, employee.id, day)
    if obj:
        return _to_read(obj)

    rules = rules_from_settings(employee.store.settings)
    slots = default_day_slots(
        day,
        rules.working_hours_start,
        rules.working_hours_end,
        rules.open_days,
        get_booking_config().grid_step_minutes,
    )

    obj = DBSchedules(employee_id=employee.id, date=day, slots=_dump_slots(slots))
    db.add(obj)
    db.commit()
    db.refresh(obj)
    logger.info("Created schedule employee=%s date=%s slots=%d", employee.id, day, len(slots))
    return _to_read(obj)


@router.put("/{employee_id}/{day}", response_model=ScheduleRead)
def replace_schedule(
    employee_id: int,
    day: date,
    data: ScheduleReplace,
    ctx: ShopContext = Depends(require_operator),
    db: Session = Depends(get_db),
):
    employee = _get_employee(db, ctx.shop, employee_id)

    obj = _find_schedule(db, employee.id, day)
    if obj is None:
        obj = DBSchedules(employee_id=employee.id, date=day)
        db.add(obj)
    obj.slots = _dump_slots(data.slots)

    db.commit()
    db.refresh(obj)
    return _to_read(obj)


@router.patch("/{employee_id}/{day}/slots/{start_time}", response_model=ScheduleRead)
def update_schedule_slot(
    employee_id: int,
    day: date,
    start_time: str,
    data: ScheduleSlotUpdate,
    ctx: ShopContext = Depends(require_operator),
    db: Session = Depends(get_db),
):
    employee = _get_employee(db, ctx.shop, employee_id)

    obj = _find_schedule(db, employee.id, day)
    if not obj:
        raise ApiError(404, "Schedule not found")

    slots = _to_read(obj).slots
    index = next((i for i, s in enumerate(slots) if s.start_time == start_time), None)
    if index is None:
        raise ApiError(404, "Slot not found")

    updates = data.model_dump(exclude_unset=True)
    if updates.get("is_available", True) is None:
        updates.pop("is_available")
    slots[index] = slots[index].model_copy(update=updates)

    # Reassign so the JSON column is flagged as changed
    obj.slots = _dump_slots(slots)
    db.commit()
    db.refresh(obj)
    return _to_read(obj)


@router.delete("/{employee_id}/{day}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule(
    employee_id: int,
    day: date,
    ctx: ShopContext = Depends(require_operator),
    db: Session = Depends(get_db),
):
    employee = _get_employee(db, ctx.shop, employee_id)

    obj = _find_schedule(db, employee.id, day)
    if not obj:
        raise ApiError(404, "Schedule not found")

    db.delete(obj)
    db.commit()
