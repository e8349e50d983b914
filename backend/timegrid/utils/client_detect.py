# operator = admin credentials present
# storefront = public request scoped by ?shop=
# public = everything else

from fastapi import Request

ADMIN_TOKEN_HEADER = "X-Admin-Token"
SHOP_HEADER = "X-Shop-Domain"


def detect_client_type(request: Request) -> str:
    """
    Classify the caller ONLY by where the request comes from.
    No validation here.
    """
    # 1. Storefront: the shop query parameter selects public read-only mode
    if request.query_params.get("shop"):
        return "storefront"

    # 2. Merchant admin
    if request.headers.get(ADMIN_TOKEN_HEADER):
        return "operator"

    return "public"
