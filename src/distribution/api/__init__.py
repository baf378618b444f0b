"""Distribution domain API package."""

from distribution.api.routes import order_router, product_router, staff_router

__all__ = ["order_router", "product_router", "staff_router"]
