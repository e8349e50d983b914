# one JSON line per request: who asked (storefront / operator), for which shop and service, how long it took
# /health is not logged; nothing is written to the DB

import json
import logging
import time

from fastapi import Request

from ..utils.client_detect import SHOP_HEADER, detect_client_type

logger = logging.getLogger("timegrid.audit")

SKIP_PATHS = frozenset({"/health"})


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


async def audit_middleware(request: Request, call_next):
    if request.url.path in SKIP_PATHS:
        return await call_next(request)

    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = round((time.perf_counter() - started) * 1000, 1)

    params = request.query_params
    entry = {
        "ts": int(time.time()),
        "method": request.method,
        "path": request.url.path,
        "status": response.status_code,
        "client_type": detect_client_type(request),
        "shop": params.get("shop") or request.headers.get(SHOP_HEADER),
        "service_id": params.get("serviceId") or params.get("productId"),
        "origin": request.headers.get("Origin"),
        "ip": _client_ip(request),
        "duration_ms": elapsed_ms,
    }

    level = logging.WARNING if response.status_code >= 500 else logging.INFO
    logger.log(level, json.dumps(entry, ensure_ascii=False))

    return response
