"""Broadcast handlers: mirror domain events onto the live event sink.

Each broadcast carries the affected entity, the actor descriptor and a
timestamp. Broadcast failures are logged and swallowed: the change that
caused them is already committed.
"""

from datetime import UTC, datetime

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from distribution.access.actor import Actor
from distribution.domain import distribution
from distribution.order.events import (
    OrderActivated,
    OrderCreated,
    OrderDeleted,
    OrderDetailsUpdated,
    OrderItemsReplaced,
    OrderStatusChanged,
    PartialOrderCompleted,
)
from distribution.order.order import Order
from distribution.order.queries import order_detail
from distribution.realtime import get_broadcaster
from distribution.staff.events import StaffCreated, StaffDeleted, StaffUpdated
from distribution.staff.staff import StaffMember
from distribution.stock.events import (
    ProductCreated,
    ProductDeleted,
    ProductUpdated,
    StockAdjusted,
)
from distribution.stock.product import Product

logger = structlog.get_logger(__name__)


def publish(event_name: str, entity_key: str, entity: dict, event) -> None:
    """Broadcast to every observer, logging instead of raising on failure."""
    try:
        actor = Actor.from_event(event) if hasattr(event, "actor_id") else None
        get_broadcaster().broadcast(
            event_name,
            {
                entity_key: entity,
                "actor": actor.to_dict() if actor else None,
                "timestamp": datetime.now(UTC).isoformat(),
            },
        )
    except Exception as exc:
        logger.error("Broadcast failed", broadcast_event=event_name, error=str(exc))


def _product_payload(event) -> dict:
    return {
        "product_id": str(event.product_id),
        "name": event.name,
        "brand_name": getattr(event, "brand_name", None),
        "dimension": getattr(event, "dimension", None),
        "stock_quantity": getattr(event, "stock_quantity", getattr(event, "new_quantity", None)),
        "low_stock_threshold": event.low_stock_threshold,
        "stock_level": event.stock_level,
    }


@distribution.event_handler(part_of=Order)
class OrderBroadcastHandler:
    def _publish_order(self, event_name, event):
        try:
            order = current_domain.repository_for(Order).get(str(event.order_id))
        except Exception as exc:
            logger.error("Failed to load order for broadcast", order_id=str(event.order_id), error=str(exc))
            return
        publish(event_name, "order", order_detail(order), event)

    @handle(OrderCreated)
    def on_order_created(self, event: OrderCreated) -> None:
        self._publish_order("order:created", event)

    @handle(OrderDetailsUpdated)
    def on_details_updated(self, event: OrderDetailsUpdated) -> None:
        self._publish_order("order:updated", event)

    @handle(OrderItemsReplaced)
    def on_items_replaced(self, event: OrderItemsReplaced) -> None:
        self._publish_order("order:updated", event)

    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        self._publish_order("order:updated", event)

    @handle(PartialOrderCompleted)
    def on_partial_completed(self, event: PartialOrderCompleted) -> None:
        self._publish_order("order:updated", event)

    @handle(OrderActivated)
    def on_activated(self, event: OrderActivated) -> None:
        self._publish_order("order:updated", event)

    @handle(OrderDeleted)
    def on_order_deleted(self, event: OrderDeleted) -> None:
        publish(
            "order:deleted",
            "order",
            {"order_id": str(event.order_id), "customer_name": event.customer_name},
            event,
        )


@distribution.event_handler(part_of=Product)
class ProductBroadcastHandler:
    @handle(ProductCreated)
    def on_product_created(self, event: ProductCreated) -> None:
        publish("product:created", "product", _product_payload(event), event)

    @handle(ProductUpdated)
    def on_product_updated(self, event: ProductUpdated) -> None:
        publish("product:updated", "product", _product_payload(event), event)

    @handle(StockAdjusted)
    def on_stock_adjusted(self, event: StockAdjusted) -> None:
        publish("product:updated", "product", _product_payload(event), event)

    @handle(ProductDeleted)
    def on_product_deleted(self, event: ProductDeleted) -> None:
        publish(
            "product:deleted",
            "product",
            {"product_id": str(event.product_id), "name": event.name},
            event,
        )


@distribution.event_handler(part_of=StaffMember)
class StaffBroadcastHandler:
    @handle(StaffCreated)
    def on_staff_created(self, event: StaffCreated) -> None:
        publish("staff:created", "staff", _staff_payload(event), event)

    @handle(StaffUpdated)
    def on_staff_updated(self, event: StaffUpdated) -> None:
        publish("staff:updated", "staff", _staff_payload(event), event)

    @handle(StaffDeleted)
    def on_staff_deleted(self, event: StaffDeleted) -> None:
        publish("staff:deleted", "staff", _staff_payload(event), event)


def _staff_payload(event) -> dict:
    return {
        "staff_id": str(event.staff_id),
        "name": event.name,
        "phone": getattr(event, "phone", None),
        "role": event.role,
    }
