"""Stock ledger: every stock movement an order makes goes through here.

The ledger is a thin domain service over the Product repository. It keeps the
products it has loaded for the duration of one command so that several
movements against the same product inside one unit of work compose instead of
overwriting each other.

Each adjustment is a read-modify-write on a single Product. Protean's
optimistic ``_version`` check rejects a save made against a stale copy, so a
concurrent writer cannot silently lose an update; the losing command fails
and can be retried by the caller.
"""

from collections import OrderedDict

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from distribution.access.actor import SYSTEM_ACTOR
from distribution.stock.product import Product

logger = structlog.get_logger(__name__)


class StockLedger:
    def __init__(self, actor=SYSTEM_ACTOR):
        self.actor = actor
        self._repo = current_domain.repository_for(Product)
        self._loaded: dict[str, Product] = {}

    def product(self, product_id) -> Product:
        """Load a product, raising ObjectNotFoundError for unknown ids."""
        key = str(product_id)
        if key not in self._loaded:
            self._loaded[key] = self._repo.get(key)
        return self._loaded[key]

    def find(self, product_id) -> Product | None:
        try:
            return self.product(product_id)
        except ObjectNotFoundError:
            return None

    def adjust(self, product_id, delta, reason=None) -> Product:
        product = self.product(product_id)
        previous = product.stock_quantity
        product.adjust_stock(delta, actor=self.actor, reason=reason)
        self._repo.add(product)

        logger.info(
            "Stock adjusted",
            product_id=str(product.id),
            delta=delta,
            previous_quantity=previous,
            new_quantity=product.stock_quantity,
            stock_level=product.stock_level.value,
            reason=reason,
        )
        return product

    def debit(self, product_id, quantity, reason=None) -> Product:
        return self.adjust(product_id, -quantity, reason=reason)

    def restore(self, product_id, quantity, reason=None) -> Product:
        return self.adjust(product_id, quantity, reason=reason)

    def validate_availability(self, requirements, credits=None) -> list[str]:
        """Return one shortfall description per product that cannot cover its requirement.

        Args:
            requirements: iterable of ``(product_id, quantity, label)``; several
                entries for the same product are summed.
            credits: optional ``{product_id: quantity}`` that will be restored to
                stock before the debit happens (item replacement).
        """
        credits = credits or {}
        required: OrderedDict[str, int] = OrderedDict()
        labels: dict[str, str] = {}
        for product_id, quantity, label in requirements:
            if quantity <= 0:
                continue
            key = str(product_id)
            required[key] = required.get(key, 0) + quantity
            labels.setdefault(key, label or key)

        shortfalls = []
        for key, quantity in required.items():
            product = self.find(key)
            if product is None:
                shortfalls.append(f"Product not found: {labels[key]}")
                continue

            available = product.stock_quantity + credits.get(key, 0)
            if available < quantity:
                shortfalls.append(f"Insufficient stock for {product.name}: Available {available}, Required {quantity}")

        return shortfalls

    def ensure_available(self, requirements, credits=None) -> None:
        """Raise a ValidationError listing every shortfall, before any stock moves."""
        shortfalls = self.validate_availability(requirements, credits=credits)
        if shortfalls:
            logger.info("Stock availability check failed", shortfalls=shortfalls)
            raise ValidationError({"stock": shortfalls})
