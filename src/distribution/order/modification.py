"""Order modification: commands and handler.

Detail edits never touch stock. Replacing the item list restores whatever
the old items had committed and, under the commit-at-creation policy,
commits the new set; availability is checked against stock plus the amount
about to be restored.
"""

from protean import handle
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from distribution.access.actor import Actor
from distribution.domain import distribution
from distribution.order.fulfillment import load_json_list, replace_items, resolve_items
from distribution.order.order import Order
from distribution.settings import current_settings
from distribution.stock.ledger import StockLedger


@distribution.command(part_of="Order")
class UpdateOrderDetails:
    """Edit customer details, route, payment terms, notes, schedule or assignee."""

    order_id = Identifier(required=True)
    customer_name = String(max_length=255)
    customer_phone = String(max_length=50)
    customer_address = Text()
    order_route = String(max_length=255)
    payment_condition = String(max_length=100)
    notes = Text()
    scheduled_for = DateTime()
    assigned_to = String(max_length=255)
    assigned_to_id = Identifier()
    actor_id = Identifier(required=True)
    actor_name = String(max_length=255)
    actor_role = String(max_length=50)


@distribution.command(part_of="Order")
class ReplaceOrderItems:
    order_id = Identifier(required=True)
    items = Text(default="[]")  # JSON: list of {product_id, quantity, price}
    actor_id = Identifier(required=True)
    actor_name = String(max_length=255)
    actor_role = String(max_length=50)


@distribution.command_handler(part_of=Order)
class ModifyOrderHandler:
    @handle(UpdateOrderDetails)
    def update_details(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.update_details(
            actor=Actor.from_command(command),
            without_assignee_id=current_settings().without_assignee_id,
            customer_name=command.customer_name,
            customer_phone=command.customer_phone,
            customer_address=command.customer_address,
            order_route=command.order_route,
            payment_condition=command.payment_condition,
            notes=command.notes,
            scheduled_for=command.scheduled_for,
            assigned_to=command.assigned_to,
            assigned_to_id=command.assigned_to_id,
        )
        repo.add(order)

    @handle(ReplaceOrderItems)
    def replace_items(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        ledger = StockLedger()
        items = resolve_items(ledger, load_json_list(command.items, "items"))

        replace_items(
            order,
            ledger,
            items,
            actor=Actor.from_command(command),
            policy=current_settings().stock_commit_policy,
        )
        repo.add(order)
