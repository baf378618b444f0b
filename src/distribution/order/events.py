"""Domain events for the Order aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from distribution.domain import distribution


@distribution.event(part_of="Order")
class OrderCreated:
    """A new order was taken and assigned to a staff member."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_name = String(required=True)
    customer_phone = String()
    customer_address = Text()
    order_route = String()
    assigned_to = String(required=True)
    assigned_to_id = Identifier(required=True)
    created_by = String()
    created_by_id = Identifier()
    status = String(required=True)
    order_status = String(required=True)
    scheduled_for = DateTime()
    is_without = Boolean(default=False)
    item_count = Integer(required=True)
    total_amount = Float()
    actor_id = Identifier()
    actor_name = String()
    actor_role = String()
    created_at = DateTime(required=True)


@distribution.event(part_of="Order")
class OrderDetailsUpdated:
    """Customer, route, payment or schedule details were edited."""

    __version__ = 1

    order_id = Identifier(required=True)
    changed_fields = Text(required=True)  # JSON list of field names
    actor_id = Identifier()
    actor_name = String()
    actor_role = String()
    updated_at = DateTime(required=True)


@distribution.event(part_of="Order")
class OrderReassigned:
    __version__ = 1

    order_id = Identifier(required=True)
    customer_name = String()
    previous_assigned_to = String()
    previous_assigned_to_id = Identifier()
    assigned_to = String(required=True)
    assigned_to_id = Identifier(required=True)
    actor_id = Identifier()
    actor_name = String()
    actor_role = String()
    reassigned_at = DateTime(required=True)


@distribution.event(part_of="Order")
class OrderItemsReplaced:
    """The order's item list was replaced as a whole."""

    __version__ = 1

    order_id = Identifier(required=True)
    items = Text(required=True)  # JSON list of {product_id, quantity, price}
    total_amount = Float()
    actor_id = Identifier()
    actor_name = String()
    actor_role = String()
    replaced_at = DateTime(required=True)


@distribution.event(part_of="Order")
class OrderStatusChanged:
    """The workflow status moved, including dispatch and cancellation."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_name = String()
    previous_status = String(required=True)
    new_status = String(required=True)
    assigned_to_id = Identifier()
    created_by_id = Identifier()
    delivery_partner = String()
    is_partial_delivery = Boolean(default=False)
    reason = String()
    actor_id = Identifier()
    actor_name = String()
    actor_role = String()
    changed_at = DateTime(required=True)


@distribution.event(part_of="Order")
class PartialOrderCompleted:
    """The outstanding remainder of a partially dispatched order was delivered."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_name = String()
    completed_items = Text(required=True)  # JSON list of {product_id, quantity}
    assigned_to_id = Identifier()
    actor_id = Identifier()
    actor_name = String()
    actor_role = String()
    completed_at = DateTime(required=True)


@distribution.event(part_of="Order")
class OrderActivated:
    """A scheduled order reached its activation time."""

    __version__ = 1

    order_id = Identifier(required=True)
    activated_at = DateTime(required=True)


@distribution.event(part_of="Order")
class OrderDeleted:
    __version__ = 1

    order_id = Identifier(required=True)
    customer_name = String()
    assigned_to_id = Identifier()
    created_by_id = Identifier()
    actor_id = Identifier()
    actor_name = String()
    actor_role = String()
    deleted_at = DateTime(required=True)
