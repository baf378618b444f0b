"""Notifications reacts to Product events, including low and out-of-stock alerts."""

from protean.utils.mixins import handle

from distribution.domain import distribution
from distribution.notification.fanout import NotificationEvent
from distribution.notification.helpers import notify_safely
from distribution.notification.notification import Notification
from distribution.stock.events import (
    ProductCreated,
    ProductDeleted,
    ProductUpdated,
    StockAdjusted,
)
from distribution.stock.product import StockLevel

_STOCK_ALERTS = {
    StockLevel.LOW.value: NotificationEvent.PRODUCT_LOW_STOCK,
    StockLevel.OUT.value: NotificationEvent.PRODUCT_OUT_OF_STOCK,
}


def alert_on_stock_level(product_id, name, stock_level, stock_quantity, threshold) -> None:
    """Notify the inventory audience when a product is low or out of stock."""
    event_type = _STOCK_ALERTS.get(stock_level)
    if event_type is None:
        return
    notify_safely(
        event_type,
        {
            "product_id": str(product_id),
            "product_name": name,
            "stock_quantity": stock_quantity,
            "threshold": threshold,
        },
    )


@distribution.event_handler(part_of=Notification, stream_category="distribution::product")
class ProductEventsHandler:
    @handle(ProductCreated)
    def on_product_created(self, event: ProductCreated) -> None:
        alert_on_stock_level(
            event.product_id, event.name, event.stock_level, event.stock_quantity, event.low_stock_threshold
        )
        notify_safely(
            NotificationEvent.PRODUCT_CREATED,
            {"product_id": str(event.product_id), "product_name": event.name, "created_by": event.actor_name},
        )

    @handle(ProductUpdated)
    def on_product_updated(self, event: ProductUpdated) -> None:
        alert_on_stock_level(
            event.product_id, event.name, event.stock_level, event.stock_quantity, event.low_stock_threshold
        )
        notify_safely(
            NotificationEvent.PRODUCT_UPDATED,
            {"product_id": str(event.product_id), "product_name": event.name, "updated_by": event.actor_name},
        )

    @handle(StockAdjusted)
    def on_stock_adjusted(self, event: StockAdjusted) -> None:
        alert_on_stock_level(
            event.product_id, event.name, event.stock_level, event.new_quantity, event.low_stock_threshold
        )

    @handle(ProductDeleted)
    def on_product_deleted(self, event: ProductDeleted) -> None:
        notify_safely(
            NotificationEvent.PRODUCT_DELETED,
            {"product_id": str(event.product_id), "product_name": event.name, "deleted_by": event.actor_name},
        )
