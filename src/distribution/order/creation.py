"""CreateOrder command + handler.

Under the commit-at-creation policy stock for every item is validated and
debited in the same unit of work that persists the order.
"""

from protean import handle
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from distribution.access.actor import Actor
from distribution.domain import distribution
from distribution.order.fulfillment import commit_items, load_json_list, resolve_items
from distribution.order.identity import next_order_id
from distribution.order.order import Order
from distribution.order.workflow import StockCommitPolicy
from distribution.settings import current_settings
from distribution.stock.ledger import StockLedger


@distribution.command(part_of="Order")
class CreateOrder:
    customer_name = String(required=True, max_length=255)
    customer_phone = String(max_length=50)
    customer_address = Text()
    order_route = String(max_length=255)
    payment_condition = String(max_length=100)
    notes = Text()
    assigned_to = String(max_length=255)
    assigned_to_id = Identifier()
    items = Text(default="[]")  # JSON: list of {product_id, quantity, price, product_name?, brand_name?, dimension?}
    scheduled_for = DateTime()
    actor_id = Identifier(required=True)
    actor_name = String(max_length=255)
    actor_role = String(max_length=50)


@distribution.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        settings = current_settings()
        ledger = StockLedger()
        items = resolve_items(ledger, load_json_list(command.items, "items"))

        order_id, sequence = next_order_id(settings.order_id_prefix)
        order = Order.create(
            order_id=order_id,
            sequence=sequence,
            customer_name=command.customer_name,
            assigned_to=command.assigned_to,
            assigned_to_id=command.assigned_to_id,
            items=items,
            actor=Actor.from_command(command),
            customer_phone=command.customer_phone,
            customer_address=command.customer_address,
            order_route=command.order_route,
            payment_condition=command.payment_condition,
            notes=command.notes,
            scheduled_for=command.scheduled_for,
            is_without=str(command.assigned_to_id) == settings.without_assignee_id,
        )

        if settings.stock_commit_policy == StockCommitPolicy.AT_CREATION:
            commit_items(order, ledger, reason=f"Order {order_id} created")

        current_domain.repository_for(Order).add(order)
        return order_id
