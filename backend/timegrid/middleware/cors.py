# echoes storefront origins, "*" for everything else
# answers preflight itself: OPTIONS never reaches the routers

from fastapi import Request
from starlette.responses import Response

from ..config import settings

ALLOW_METHODS = "GET, OPTIONS"
ALLOW_HEADERS = "Content-Type"


def allowed_origin(origin: str | None) -> str:
    if origin and settings.shop_domain_suffix in origin:
        return origin
    return "*"


async def cors_middleware(request: Request, call_next):
    origin = allowed_origin(request.headers.get("Origin"))

    if request.method == "OPTIONS":
        return Response(
            status_code=204,
            headers={
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Methods": ALLOW_METHODS,
                "Access-Control-Allow-Headers": ALLOW_HEADERS,
            },
        )

    response = await call_next(request)
    response.headers["Access-Control-Allow-Origin"] = origin
    if origin != "*":
        response.headers["Vary"] = "Origin"
    return response
