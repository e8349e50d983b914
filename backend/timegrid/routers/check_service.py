# backend/timegrid/routers/check_service.py
"""
GET /check-service - Is a store product configured as a bookable service?

Used by the storefront widget to decide whether to render a booking picker.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import get_shop_context
from ..errors import ApiError
from ..models.generated import Services as DBServices
from ..schemas.services import CheckServiceResponse
from ..services.slots.availability import get_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["services"])

PRODUCT_GID_PREFIX = "gid://shopify/Product/"


def product_id_candidates(product_id: str) -> list[str]:
    """Numeric id, raw value and gid form of a product id, deduplicated."""
    numeric = product_id.rsplit("/", 1)[-1] if product_id.startswith("gid://") else product_id
    candidates = [numeric, product_id, f"{PRODUCT_GID_PREFIX}{numeric}"]
    return list(dict.fromkeys(candidates))


@router.get(
    "/check-service",
    response_model=CheckServiceResponse,
    response_model_exclude_none=True,
)
def check_service(
    request: Request,
    product_id: str | None = Query(None, alias="productId"),
    db: Session = Depends(get_db),
):
    if not product_id:
        raise ApiError(400, "productId is required")

    ctx = get_shop_context(request)

    try:
        store = get_store(db, ctx.shop)
        if not store:
            return CheckServiceResponse(is_service=False)

        candidates = product_id_candidates(product_id.strip())
        service = (
            db.query(DBServices)
            .filter(
                DBServices.store_id == store.id,
                DBServices.is_active == 1,
                or_(*(DBServices.product_id == c for c in candidates)),
            )
            .order_by(DBServices.id)
            .first()
        )
    except Exception as e:
        logger.exception("check-service lookup failed for shop %s product %s", ctx.shop, product_id)
        raise ApiError(500, "Internal server error", str(e)) from None

    if not service:
        logger.info("check-service: product %s of %s is not a service", product_id, ctx.shop)
        return CheckServiceResponse(is_service=False)

    return CheckServiceResponse(
        is_service=True,
        service_id=str(service.id),
        duration=service.duration,
        title=service.product_title,
    )
