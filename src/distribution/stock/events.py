"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from distribution.domain import distribution


@distribution.event(part_of="Product")
class ProductCreated:
    """A product was added to the catalogue with an opening stock level."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    brand_name = String()
    dimension = String()
    stock_quantity = Integer(required=True)
    low_stock_threshold = Integer(required=True)
    stock_level = String(required=True)
    actor_id = Identifier()
    actor_name = String()
    actor_role = String()
    created_at = DateTime()


@distribution.event(part_of="Product")
class ProductUpdated:
    """Product details (and possibly its absolute stock quantity) were edited."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    brand_name = String()
    dimension = String()
    stock_quantity = Integer(required=True)
    low_stock_threshold = Integer(required=True)
    stock_level = String(required=True)
    actor_id = Identifier()
    actor_name = String()
    actor_role = String()
    updated_at = DateTime()


@distribution.event(part_of="Product")
class StockAdjusted:
    """Stock moved by a delta. The new quantity is clamped at zero."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    delta = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    low_stock_threshold = Integer(required=True)
    stock_level = String(required=True)
    reason = String()
    actor_id = Identifier()
    actor_name = String()
    actor_role = String()
    adjusted_at = DateTime()


@distribution.event(part_of="Product")
class ProductDeleted:
    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    actor_id = Identifier()
    actor_name = String()
    actor_role = String()
    deleted_at = DateTime()
