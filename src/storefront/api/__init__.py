"""Storefront HTTP API package."""

from storefront.api.errors import register_error_handlers
from storefront.api.routes import order_router, product_router, user_router

__all__ = ["order_router", "product_router", "user_router", "register_error_handlers"]
