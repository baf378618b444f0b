"""Notifications reacts to Order events.

Each order event is mapped to a notification type and its audience. A
failure here never touches the order: it is logged and dropped.
"""

from protean.utils.mixins import handle

from distribution.domain import distribution
from distribution.notification.fanout import NotificationEvent, status_change_event
from distribution.notification.helpers import notify_safely
from distribution.notification.notification import Notification
from distribution.order.events import (
    OrderCreated,
    OrderDeleted,
    OrderReassigned,
    OrderStatusChanged,
    PartialOrderCompleted,
)


def _id(value):
    return str(value) if value else None


@distribution.event_handler(part_of=Notification, stream_category="distribution::order")
class OrderEventsHandler:
    @handle(OrderCreated)
    def on_order_created(self, event: OrderCreated) -> None:
        data = {
            "order_id": str(event.order_id),
            "customer_name": event.customer_name,
            "created_by": event.created_by or event.actor_name,
            "assigned_to_id": _id(event.assigned_to_id),
        }
        notify_safely(NotificationEvent.ORDER_CREATED, data, {"created_by_id": _id(event.created_by_id)})
        notify_safely(NotificationEvent.ORDER_ASSIGNED, data)

    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        notify_safely(
            status_change_event(event.previous_status, event.new_status),
            {
                "order_id": str(event.order_id),
                "customer_name": event.customer_name,
                "new_status": event.new_status,
                "delivery_partner": event.delivery_partner,
                "reason": event.reason,
                "assigned_to_id": _id(event.assigned_to_id),
            },
        )

    @handle(PartialOrderCompleted)
    def on_partial_completed(self, event: PartialOrderCompleted) -> None:
        notify_safely(
            NotificationEvent.ORDER_STATUS_CHANGED,
            {
                "order_id": str(event.order_id),
                "customer_name": event.customer_name,
                "new_status": "Completed",
                "assigned_to_id": _id(event.assigned_to_id),
            },
        )

    @handle(OrderReassigned)
    def on_order_reassigned(self, event: OrderReassigned) -> None:
        notify_safely(
            NotificationEvent.ORDER_REASSIGNED,
            {
                "order_id": str(event.order_id),
                "customer_name": event.customer_name,
                "new_assignee": event.assigned_to,
                "assigned_to_id": _id(event.assigned_to_id),
            },
            {"previous_assigned_to_id": _id(event.previous_assigned_to_id)},
        )

    @handle(OrderDeleted)
    def on_order_deleted(self, event: OrderDeleted) -> None:
        notify_safely(
            NotificationEvent.ORDER_DELETED,
            {
                "order_id": str(event.order_id),
                "customer_name": event.customer_name,
                "deleted_by": event.actor_name,
                "assigned_to_id": _id(event.assigned_to_id),
            },
            {"created_by_id": _id(event.created_by_id)},
        )
