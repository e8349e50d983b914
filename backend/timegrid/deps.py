# backend/timegrid/deps.py
"""
Request context: which store a request is for, and how it was authorized.

Two modes:
- storefront: ?shop=<domain> present, public read-only, domain suffix checked
- operator: X-Admin-Token matches the configured token, store from X-Shop-Domain
"""

import hmac
import logging
from dataclasses import dataclass

from fastapi import Request

from .config import settings
from .errors import ApiError
from .utils.client_detect import ADMIN_TOKEN_HEADER, SHOP_HEADER

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShopContext:
    shop: str
    is_operator: bool


def _is_valid_shop(shop: str) -> bool:
    suffix = settings.shop_domain_suffix
    return shop.endswith(suffix) and len(shop) > len(suffix)


def _authenticate_operator(request: Request) -> str:
    token = request.headers.get(ADMIN_TOKEN_HEADER)
    shop = request.headers.get(SHOP_HEADER)

    if not settings.admin_token or not token:
        raise ApiError(401, "Authentication required")
    if not hmac.compare_digest(token.encode(), settings.admin_token.encode()):
        logger.warning("Operator authentication failed for %s", request.url.path)
        raise ApiError(401, "Authentication required")
    if not shop or not _is_valid_shop(shop):
        raise ApiError(401, "Authentication required")

    return shop


def get_shop_context(request: Request) -> ShopContext:
    """Storefront mode when ?shop= is given, operator mode otherwise."""
    shop = request.query_params.get("shop")
    if shop:
        if not _is_valid_shop(shop):
            raise ApiError(400, "Invalid shop domain")
        return ShopContext(shop=shop, is_operator=False)

    return ShopContext(shop=_authenticate_operator(request), is_operator=True)


def require_operator(request: Request) -> ShopContext:
    """Operator-only endpoints ignore ?shop= and always require credentials."""
    return ShopContext(shop=_authenticate_operator(request), is_operator=True)
