"""ChangeOrderStatus command + handler: one step along the workflow.

A change to Dispatched takes the same path as DispatchOrder. The optional
``dispatch_items`` lists indices of items delivered in full; without it the
whole order is delivered.
"""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from distribution.access.actor import Actor
from distribution.domain import distribution
from distribution.order.fulfillment import dispatch_order, load_json_list
from distribution.order.order import Order
from distribution.order.workflow import OrderStatus
from distribution.settings import current_settings
from distribution.stock.ledger import StockLedger


@distribution.command(part_of="Order")
class ChangeOrderStatus:
    order_id = Identifier(required=True)
    new_status = String(required=True, max_length=20)
    delivery_partner = String(max_length=255)
    dispatch_items = Text()  # JSON: list of item indices
    actor_id = Identifier(required=True)
    actor_name = String(max_length=255)
    actor_role = String(max_length=50)


@distribution.command_handler(part_of=Order)
class ChangeOrderStatusHandler:
    @handle(ChangeOrderStatus)
    def change_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        actor = Actor.from_command(command)
        lineage = current_settings().transition_lineage

        if command.new_status == OrderStatus.DISPATCHED.value:
            dispatch_order(
                order,
                StockLedger(),
                actor,
                lineage,
                delivery_partner=command.delivery_partner,
                item_indices=load_json_list(command.dispatch_items, "dispatch_items"),
            )
        else:
            order.advance_status(command.new_status, actor, lineage)

        repo.add(order)
