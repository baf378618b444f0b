"""CancelOrder command + handler: cancel and return committed stock."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from distribution.access.actor import Actor
from distribution.domain import distribution
from distribution.order.fulfillment import release_stock
from distribution.order.order import Order
from distribution.stock.ledger import StockLedger


@distribution.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = Text()
    actor_id = Identifier(required=True)
    actor_name = String(max_length=255)
    actor_role = String(max_length=50)


@distribution.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        order.cancel(Actor.from_command(command), reason=command.reason)
        release_stock(order, StockLedger(), reason=f"Order {order.order_id} cancelled")

        repo.add(order)
