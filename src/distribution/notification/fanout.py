"""Notification fan-out policy: who hears about what.

``recipients_for`` is a pure function of the event type, the event context
and the staff directory. It performs no delivery: the result is the
deduplicated, ordered list of staff ids that should receive the push.
Only staff with an active delivery target (a registered push token) are
ever returned, whether they qualify by role or are named in the context.
"""

from enum import Enum

from distribution.access.policy import Role


class NotificationEvent(Enum):
    ORDER_CREATED = "order_created"
    ORDER_ASSIGNED = "order_assigned"
    ORDER_STATUS_CHANGED = "order_status_changed"
    ORDER_PENDING_TO_DC = "order_pending_to_dc"
    ORDER_DC_TO_INVOICE = "order_dc_to_invoice"
    ORDER_INVOICE_TO_DISPATCHED = "order_invoice_to_dispatched"
    ORDER_CANCELLED = "order_cancelled"
    ORDER_REASSIGNED = "order_reassigned"
    ORDER_DELETED = "order_deleted"
    PRODUCT_CREATED = "product_created"
    PRODUCT_UPDATED = "product_updated"
    PRODUCT_DELETED = "product_deleted"
    PRODUCT_LOW_STOCK = "product_low_stock"
    PRODUCT_OUT_OF_STOCK = "product_out_of_stock"
    STAFF_CREATED = "staff_created"
    STAFF_UPDATED = "staff_updated"
    STAFF_DELETED = "staff_deleted"


_STATUS_EVENTS = (
    NotificationEvent.ORDER_STATUS_CHANGED,
    NotificationEvent.ORDER_PENDING_TO_DC,
    NotificationEvent.ORDER_DC_TO_INVOICE,
    NotificationEvent.ORDER_INVOICE_TO_DISPATCHED,
    NotificationEvent.ORDER_CANCELLED,
)

# event -> (context keys naming individual recipients, roles notified as a whole)
_AUDIENCES: dict[NotificationEvent, tuple[tuple[str, ...], tuple[Role, ...]]] = {
    NotificationEvent.ORDER_CREATED: ((), (Role.ADMIN, Role.STAFF, Role.INVENTORY_MANAGER)),
    NotificationEvent.ORDER_ASSIGNED: (("assigned_to_id",), ()),
    **{event: (("assigned_to_id",), (Role.ADMIN, Role.STAFF)) for event in _STATUS_EVENTS},
    NotificationEvent.ORDER_REASSIGNED: (("assigned_to_id", "previous_assigned_to_id"), (Role.ADMIN,)),
    NotificationEvent.ORDER_DELETED: (("assigned_to_id", "created_by_id"), (Role.ADMIN,)),
    NotificationEvent.PRODUCT_CREATED: ((), (Role.ADMIN, Role.INVENTORY_MANAGER)),
    NotificationEvent.PRODUCT_UPDATED: ((), (Role.ADMIN, Role.INVENTORY_MANAGER)),
    NotificationEvent.PRODUCT_DELETED: ((), (Role.ADMIN,)),
    NotificationEvent.PRODUCT_LOW_STOCK: ((), (Role.ADMIN, Role.INVENTORY_MANAGER)),
    NotificationEvent.PRODUCT_OUT_OF_STOCK: ((), (Role.ADMIN, Role.INVENTORY_MANAGER)),
    NotificationEvent.STAFF_CREATED: ((), (Role.ADMIN,)),
    NotificationEvent.STAFF_UPDATED: ((), (Role.ADMIN,)),
    NotificationEvent.STAFF_DELETED: ((), (Role.ADMIN,)),
}

# (previous order status, new order status) -> specific event type
STATUS_CHANGE_EVENTS = {
    ("Pending", "DC"): NotificationEvent.ORDER_PENDING_TO_DC,
    ("DC", "Invoice"): NotificationEvent.ORDER_DC_TO_INVOICE,
    ("Invoice", "Dispatched"): NotificationEvent.ORDER_INVOICE_TO_DISPATCHED,
}


def status_change_event(previous_status: str, new_status: str) -> NotificationEvent:
    """Pick the most specific notification type for an order status change."""
    if new_status == "Cancelled":
        return NotificationEvent.ORDER_CANCELLED
    return STATUS_CHANGE_EVENTS.get((previous_status, new_status), NotificationEvent.ORDER_STATUS_CHANGED)


def recipients_for(event_type: NotificationEvent, context: dict, directory) -> list[str]:
    """Return the ids of staff members who should be notified.

    Args:
        event_type: the notification type
        context: ``assigned_to_id``, ``previous_assigned_to_id`` and
            ``created_by_id`` where relevant
        directory: iterable of staff records exposing ``id``, ``role`` and
            ``push_token``

    Individually named recipients come first, followed by role audiences in
    directory order. Each id appears at most once.
    """
    event_type = NotificationEvent(event_type)
    named_keys, roles = _AUDIENCES[event_type]
    reachable = {str(member.id): member for member in directory if member.push_token}
    role_values = {role.value for role in roles}

    candidates = [str(context[key]) for key in named_keys if context.get(key)]
    candidates += [member_id for member_id, member in reachable.items() if member.role in role_values]

    recipients = []
    for member_id in candidates:
        if member_id in reachable and member_id not in recipients:
            recipients.append(member_id)
    return recipients
