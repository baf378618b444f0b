"""Read-side helpers for products."""

from protean.utils.globals import current_domain

from distribution.stock.product import Product

_LOOKUP_LIMIT = 1000


def brand_names() -> list[str]:
    """Distinct non-empty brand names, sorted case-insensitively."""
    products = current_domain.repository_for(Product)._dao.query.limit(_LOOKUP_LIMIT).all().items
    brands = {product.brand_name for product in products if product.brand_name}
    return sorted(brands, key=str.lower)
