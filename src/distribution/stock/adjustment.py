"""Manual stock adjustment: command and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from distribution.access.actor import Actor
from distribution.domain import distribution
from distribution.stock.ledger import StockLedger
from distribution.stock.product import Product


@distribution.command(part_of="Product")
class AdjustStock:
    """Add (positive delta) or remove (negative delta) stock. Removal clamps at zero."""

    product_id = Identifier(required=True)
    delta = Integer(required=True)
    reason = String(max_length=255)
    actor_id = Identifier(required=True)
    actor_name = String(max_length=255)
    actor_role = String(max_length=50)


@distribution.command_handler(part_of=Product)
class StockAdjustmentHandler:
    @handle(AdjustStock)
    def adjust_stock(self, command):
        ledger = StockLedger(actor=Actor.from_command(command))
        product = ledger.adjust(command.product_id, command.delta, reason=command.reason or "Manual adjustment")
        return product.stock_quantity
