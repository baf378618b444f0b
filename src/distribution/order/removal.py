"""DeleteOrder command + handler: remove an order and return its committed stock."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from distribution.access.actor import Actor
from distribution.domain import distribution
from distribution.order.fulfillment import release_stock
from distribution.order.order import Order
from distribution.stock.ledger import StockLedger


@distribution.command(part_of="Order")
class DeleteOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_name = String(max_length=255)
    actor_role = String(max_length=50)


@distribution.command_handler(part_of=Order)
class DeleteOrderHandler:
    @handle(DeleteOrder)
    def delete_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        release_stock(order, StockLedger(), reason=f"Order {order.order_id} deleted")
        order.mark_deleted(Actor.from_command(command))

        repo.add(order)
        repo._dao.delete(order)
