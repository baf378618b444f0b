"""Dispatch and completion: commands and handler.

DispatchOrder records, per item, how much actually left the warehouse.
Anything delivered short leaves the order partially delivered until
CompleteOrder delivers the remainder.
"""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from distribution.access.actor import Actor
from distribution.domain import distribution
from distribution.order.fulfillment import complete_order, dispatch_order, load_json_list
from distribution.order.order import Order
from distribution.settings import current_settings
from distribution.stock.ledger import StockLedger


@distribution.command(part_of="Order")
class DispatchOrder:
    order_id = Identifier(required=True)
    delivery_partner = String(max_length=255)
    delivered_items = Text()  # JSON: list of {product_id, delivered_qty, is_delivered}
    actor_id = Identifier(required=True)
    actor_name = String(max_length=255)
    actor_role = String(max_length=50)


@distribution.command(part_of="Order")
class CompleteOrder:
    """Deliver the outstanding remainder of a partially dispatched order."""

    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_name = String(max_length=255)
    actor_role = String(max_length=50)


@distribution.command_handler(part_of=Order)
class DispatchOrderHandler:
    @handle(DispatchOrder)
    def dispatch(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        dispatch_order(
            order,
            StockLedger(),
            Actor.from_command(command),
            current_settings().transition_lineage,
            delivery_partner=command.delivery_partner,
            delivered_items=load_json_list(command.delivered_items, "delivered_items"),
        )
        repo.add(order)

    @handle(CompleteOrder)
    def complete(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        complete_order(order, StockLedger(), Actor.from_command(command))
        repo.add(order)
