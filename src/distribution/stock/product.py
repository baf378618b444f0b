"""Product aggregate (CQRS): the single source of truth for available stock.

Each product carries one non-negative stock counter and a low-stock
threshold. Every movement goes through ``adjust_stock``, which clamps at zero
and reports the resulting stock level:

    out   quantity == 0
    low   0 < quantity <= threshold
    ok    quantity > threshold
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Integer, String

from distribution.domain import distribution
from distribution.stock.events import (
    ProductCreated,
    ProductDeleted,
    ProductUpdated,
    StockAdjusted,
)

DEFAULT_BRAND = "Generic"
DEFAULT_DIMENSION = "Standard"
DEFAULT_LOW_STOCK_THRESHOLD = 10


class StockLevel(Enum):
    OK = "ok"
    LOW = "low"
    OUT = "out"


def evaluate_stock_level(quantity: int, threshold: int) -> StockLevel:
    if quantity <= 0:
        return StockLevel.OUT
    if quantity <= threshold:
        return StockLevel.LOW
    return StockLevel.OK


@distribution.aggregate
class Product:
    name = String(required=True, max_length=255)
    brand_name = String(max_length=255, default=DEFAULT_BRAND)
    dimension = String(max_length=255, default=DEFAULT_DIMENSION)
    stock_quantity = Integer(default=0, min_value=0)
    low_stock_threshold = Integer(default=DEFAULT_LOW_STOCK_THRESHOLD, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(
        cls,
        name,
        actor,
        brand_name=None,
        dimension=None,
        stock_quantity=0,
        low_stock_threshold=DEFAULT_LOW_STOCK_THRESHOLD,
    ):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            brand_name=brand_name or DEFAULT_BRAND,
            dimension=dimension or DEFAULT_DIMENSION,
            stock_quantity=stock_quantity,
            low_stock_threshold=low_stock_threshold,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=str(product.id),
                name=product.name,
                brand_name=product.brand_name,
                dimension=product.dimension,
                stock_quantity=product.stock_quantity,
                low_stock_threshold=product.low_stock_threshold,
                stock_level=product.stock_level.value,
                actor_id=actor.id,
                actor_name=actor.name,
                actor_role=actor.role,
                created_at=now,
            )
        )
        return product

    @property
    def stock_level(self) -> StockLevel:
        return evaluate_stock_level(self.stock_quantity, self.low_stock_threshold)

    def update_details(self, actor, **changes):
        """Edit catalogue attributes. ``stock_quantity`` here is an absolute recount."""
        for field_name, value in changes.items():
            if value is not None:
                setattr(self, field_name, value)

        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            ProductUpdated(
                product_id=str(self.id),
                name=self.name,
                brand_name=self.brand_name,
                dimension=self.dimension,
                stock_quantity=self.stock_quantity,
                low_stock_threshold=self.low_stock_threshold,
                stock_level=self.stock_level.value,
                actor_id=actor.id,
                actor_name=actor.name,
                actor_role=actor.role,
                updated_at=now,
            )
        )

    def adjust_stock(self, delta, actor, reason=None):
        """Move stock by ``delta``; the result never drops below zero."""
        if not isinstance(delta, int) or isinstance(delta, bool):
            raise ValidationError({"delta": ["Stock adjustment must be a whole number"]})

        previous = self.stock_quantity
        self.stock_quantity = max(0, previous + delta)
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                name=self.name,
                delta=delta,
                previous_quantity=previous,
                new_quantity=self.stock_quantity,
                low_stock_threshold=self.low_stock_threshold,
                stock_level=self.stock_level.value,
                reason=reason,
                actor_id=actor.id,
                actor_name=actor.name,
                actor_role=actor.role,
                adjusted_at=now,
            )
        )

    def mark_deleted(self, actor):
        self.raise_(
            ProductDeleted(
                product_id=str(self.id),
                name=self.name,
                actor_id=actor.id,
                actor_name=actor.name,
                actor_role=actor.role,
                deleted_at=datetime.now(UTC),
            )
        )
