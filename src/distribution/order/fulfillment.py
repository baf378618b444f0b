"""Stock-aware fulfillment steps shared by the order command handlers.

Every step validates first and mutates second: availability is checked for
the whole request before the first debit, so a shortfall leaves both stock
and the order untouched. All steps run inside the calling handler's unit of
work.
"""

import json

import structlog
from protean.exceptions import ValidationError

from distribution.order.workflow import StockCommitPolicy

logger = structlog.get_logger(__name__)


def load_json_list(raw, field_name):
    """Decode a JSON list carried in a command Text field."""
    if raw is None or raw == "":
        return []
    value = json.loads(raw) if isinstance(raw, str) else raw
    if not isinstance(value, list):
        raise ValidationError({field_name: ["Expected a list"]})
    return value


def resolve_items(ledger, raw_items) -> list[dict]:
    """Resolve requested items against Products, backfilling names, brand and dimension."""
    resolved = []
    errors = []
    for entry in raw_items:
        product = ledger.find(entry.get("product_id"))
        label = entry.get("product_name") or entry.get("product_id")
        if product is None:
            errors.append(f"Product not found: {label}")
            continue

        quantity = entry.get("quantity")
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            errors.append(f"Quantity for {product.name} must be a whole number greater than zero")
            continue

        resolved.append(
            {
                "product_id": str(product.id),
                "product_name": entry.get("product_name") or product.name,
                "brand_name": entry.get("brand_name") or product.brand_name,
                "dimension": entry.get("dimension") or product.dimension,
                "quantity": quantity,
                "price": float(entry.get("price") or 0.0),
            }
        )

    if errors:
        raise ValidationError({"order_items": errors})
    return resolved


def _debit(order, ledger, amounts, reason):
    """Validate then debit ``{item_id: quantity}``, recording each commitment on the order."""
    items = {str(item.id): item for item in order.items_in_order}
    ledger.ensure_available(
        [(str(items[item_id].product_id), amount, items[item_id].product_name) for item_id, amount in amounts.items()]
    )
    for item_id, amount in amounts.items():
        if amount <= 0:
            continue
        ledger.debit(items[item_id].product_id, amount, reason=reason)
        order.record_commitment(item_id, amount)


def commit_items(order, ledger, reason):
    """Commit every item's uncommitted quantity (commit-at-creation policy)."""
    amounts = {str(item.id): item.quantity - item.committed_qty for item in order.items_in_order}
    _debit(order, ledger, amounts, reason)


def release_stock(order, ledger, reason):
    """Return all committed stock. Products deleted since are skipped with a warning."""
    for product_id, quantity, product_name in order.release_commitments():
        if ledger.find(product_id) is None:
            logger.warning(
                "Product no longer exists, committed stock not restored",
                order_id=order.order_id,
                product_id=product_id,
                product_name=product_name,
                quantity=quantity,
            )
            continue
        ledger.restore(product_id, quantity, reason=reason)


def credits_for(order) -> dict[str, int]:
    credits: dict[str, int] = {}
    for product_id, quantity, _ in order.committed_items():
        credits[product_id] = credits.get(product_id, 0) + quantity
    return credits


def replace_items(order, ledger, items, actor, policy):
    """Restore the old items' stock, then commit the new set (restore-then-debit)."""
    order.assert_items_editable()
    if not items:
        raise ValidationError({"order_items": ["Please add at least one item"]})
    if policy == StockCommitPolicy.AT_CREATION:
        ledger.ensure_available(
            [(item["product_id"], item["quantity"], item["product_name"]) for item in items],
            credits=credits_for(order),
        )

    reason = f"Order {order.order_id} items replaced"
    release_stock(order, ledger, reason)
    order.replace_items(items, actor)
    if policy == StockCommitPolicy.AT_CREATION:
        commit_items(order, ledger, reason)


def dispatch_order(order, ledger, actor, lineage, delivery_partner, delivered_items=None, item_indices=None):
    """Dispatch in full or in part, debiting delivered quantity not yet committed."""
    plan = order.plan_dispatch(
        delivery_partner,
        lineage,
        delivered_items=delivered_items,
        item_indices=item_indices,
    )
    amounts = {
        str(item.id): max(0, plan[str(item.id)] - item.committed_qty)
        for item in order.items_in_order
    }
    _debit(order, ledger, amounts, reason=f"Order {order.order_id} dispatched")
    order.dispatch(delivery_partner, plan, actor, lineage)


def complete_order(order, ledger, actor):
    """Deliver the outstanding remainder of a partially dispatched order."""
    outstanding = order.plan_completion()
    amounts = {
        str(item.id): max(0, item.quantity - item.committed_qty)
        for item in order.items_in_order
        if str(item.id) in outstanding
    }
    _debit(order, ledger, amounts, reason=f"Order {order.order_id} completed")
    order.complete_partial(actor)
