"""Read-side helpers for orders: visibility, stock status and dispatch views."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from distribution.access.policy import can_access_order
from distribution.order.order import Order, as_utc
from distribution.order.workflow import LifecycleStatus
from distribution.stock.ledger import StockLedger
from distribution.stock.product import StockLevel


def visible_orders(actor, as_of=None, limit=500) -> list[Order]:
    """Orders the actor may see, newest first.

    Scheduled orders stay hidden until their activation time. Roles scoped to
    their own orders only see orders they created or are assigned to.
    """
    as_of = as_utc(as_of) or datetime.now(UTC)
    orders = current_domain.repository_for(Order)._dao.query.order_by("-sequence").limit(limit).all().items
    return [
        order
        for order in orders
        if can_access_order(actor, order)
        and not (
            order.status == LifecycleStatus.SCHEDULED.value
            and order.scheduled_for is not None
            and as_utc(order.scheduled_for) > as_of
        )
    ]


def order_detail(order: Order) -> dict:
    return {
        "order_id": order.order_id,
        "order_date": order.order_date,
        "scheduled_for": order.scheduled_for,
        "status": order.status,
        "order_status": order.order_status,
        "customer_name": order.customer_name,
        "customer_phone": order.customer_phone,
        "customer_address": order.customer_address,
        "order_route": order.order_route,
        "payment_condition": order.payment_condition,
        "notes": order.notes,
        "assigned_to": order.assigned_to,
        "assigned_to_id": str(order.assigned_to_id),
        "created_by": order.created_by,
        "created_by_id": order.created_by_id,
        "is_without": order.is_without,
        "total_amount": order.total_amount,
        "delivery_partner": order.delivery_partner,
        "dispatched_at": order.dispatched_at,
        "is_partial_delivery": order.is_partial_delivery,
        "original_item_count": order.original_item_count,
        "fulfilled_item_count": order.fulfilled_item_count,
        "status_updated_by": order.status_updated_by,
        "status_updated_at": order.status_updated_at,
        "cancelled_by": order.cancelled_by,
        "cancellation_reason": order.cancellation_reason,
        "order_items": [_item_detail(item) for item in order.items_in_order],
        "partial_items": [_item_detail(item) for item in order.partial_items],
        "status_history": [
            {
                "status": entry.status,
                "changed_by": entry.changed_by,
                "changed_by_id": entry.changed_by_id,
                "changed_at": entry.changed_at,
            }
            for entry in order.history
        ],
    }


def _item_detail(item) -> dict:
    return {
        "item_id": str(item.id),
        "product_id": str(item.product_id),
        "product_name": item.product_name,
        "brand_name": item.brand_name,
        "dimension": item.dimension,
        "quantity": item.quantity,
        "price": item.price,
        "total": item.total,
        "committed_qty": item.committed_qty,
        "delivered_qty": item.delivered_qty,
        "is_delivered": item.is_delivered,
    }


def stock_status(order_id) -> dict:
    """Per-item availability for an order, as seen before dispatch."""
    order = current_domain.repository_for(Order).get(order_id)
    ledger = StockLedger()

    items = []
    for item in order.items_in_order:
        product = ledger.find(item.product_id)
        required = item.quantity - item.committed_qty
        available = product.stock_quantity if product else 0
        items.append(
            {
                "product_id": str(item.product_id),
                "product_name": item.product_name,
                "required": max(0, required),
                "available": available,
                "sufficient": product is not None and available >= required,
                "low_stock": product is not None and product.stock_level != StockLevel.OK,
            }
        )

    return {
        "order_id": order.order_id,
        "all_available": all(entry["sufficient"] for entry in items),
        "items": items,
    }


def dispatch_confirmation(order_id) -> dict:
    """What a dispatch of the full order would take from stock."""
    status = stock_status(order_id)
    order = current_domain.repository_for(Order).get(order_id)
    return {
        "order_id": order.order_id,
        "customer_name": order.customer_name,
        "order_status": order.order_status,
        "can_dispatch": status["all_available"],
        "items": status["items"],
        "total_amount": order.total_amount,
    }


def partial_details(order_id) -> dict:
    order = current_domain.repository_for(Order).get(order_id)
    if not order.is_partial_delivery:
        raise ValidationError({"order_id": [f"Order {order.order_id} has no pending partial delivery"]})

    return {
        "order_id": order.order_id,
        "delivery_partner": order.delivery_partner,
        "original_item_count": order.original_item_count,
        "fulfilled_item_count": order.fulfilled_item_count,
        "delivered_items": [_item_detail(item) for item in order.items_in_order if item.delivered_qty],
        "pending_items": [
            {**_item_detail(item), "outstanding_qty": item.outstanding_qty} for item in order.partial_items
        ],
    }
