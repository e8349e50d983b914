# backend/timegrid/routers/availabilities.py
"""
Availabilities API endpoint.

GET /availabilities - Bookable slots of a service over the booking window

Security model:
- Operator requests: X-Admin-Token + X-Shop-Domain (trusted)
- Storefront requests: ?shop=<domain>, public read-only, CORS restricted
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import get_shop_context
from ..errors import ApiError
from ..schemas.availability import AvailabilityResponse
from ..services.slots import ScheduleValidationError, get_booking_config
from ..services.slots.availability import calculate_service_availability
from ..services.slots.errors import NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["availabilities"])


def _parse_id(value: str | None, name: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ApiError(400, f"Invalid {name}") from None


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ApiError(400, "Invalid date, expected YYYY-MM-DD") from None


@router.get(
    "/availabilities",
    response_model=AvailabilityResponse,
    response_model_exclude_none=True,
)
def get_availabilities(
    request: Request,
    service_id: str | None = Query(None, alias="serviceId"),
    target_date: str | None = Query(None, alias="date"),
    employee_id: str | None = Query(None, alias="employeeId"),
    db: Session = Depends(get_db),
):
    """Bookable slots of a service, grouped by time window."""
    logger.info(
        "GET /availabilities serviceId=%s date=%s employeeId=%s shop=%s origin=%s",
        service_id, target_date, employee_id,
        request.query_params.get("shop"), request.headers.get("Origin"),
    )

    if not service_id:
        raise ApiError(400, "serviceId is required")

    parsed_service_id = _parse_id(service_id, "serviceId")
    parsed_employee_id = _parse_id(employee_id, "employeeId")
    requested_date = _parse_date(target_date)

    ctx = get_shop_context(request)

    try:
        result = calculate_service_availability(
            db=db,
            shop=ctx.shop,
            service_id=parsed_service_id,
            requested_date=requested_date,
            employee_id=str(parsed_employee_id) if parsed_employee_id is not None else None,
            config=get_booking_config(),
        )
    except NotFoundError as e:
        raise ApiError(404, str(e)) from None
    except ScheduleValidationError as e:
        logger.error("Malformed schedule data for shop %s: %s", ctx.shop, e)
        raise ApiError(500, "Internal server error", str(e)) from None
    except Exception as e:
        logger.exception("Availability calculation failed for shop %s service %s", ctx.shop, service_id)
        raise ApiError(500, "Internal server error", str(e)) from None

    return AvailabilityResponse(**result)
