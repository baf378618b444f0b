"""Order aggregate (CQRS): a customer order moving through fulfillment.

Two status fields describe an order:

    order_status   fine-grained workflow: Pending → DC → Invoice → Dispatched,
                   or Cancelled (see ``distribution.order.workflow``)
    status         coarse lifecycle: active, scheduled, completed, cancelled

Every accepted ``order_status`` change appends one ``StatusEntry`` and stamps
``status_updated_by``/``status_updated_at`` in the same mutation. The history
is never rewritten.

Each item records how much stock has been committed against it
(``committed_qty``) and, once dispatched, how much was delivered
(``delivered_qty``). Command handlers move stock through the StockLedger and
report commitments back through ``record_commitment`` and
``release_commitments``; the aggregate itself never touches Product.
"""

import json
from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
)

from distribution.domain import distribution
from distribution.order.events import (
    OrderActivated,
    OrderCreated,
    OrderDeleted,
    OrderDetailsUpdated,
    OrderItemsReplaced,
    OrderReassigned,
    OrderStatusChanged,
    PartialOrderCompleted,
)
from distribution.order.workflow import (
    LifecycleStatus,
    OrderStatus,
    allowed_transitions,
)

DEFAULT_CANCELLATION_REASON = "Cancelled by admin"

_EDITABLE_DETAILS = (
    "customer_name",
    "customer_phone",
    "customer_address",
    "order_route",
    "payment_condition",
    "notes",
)


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@distribution.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    brand_name = String(max_length=255)
    dimension = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    price = Float(default=0.0, min_value=0.0)
    total = Float(default=0.0)
    position = Integer(default=0)
    committed_qty = Integer(default=0, min_value=0)
    delivered_qty = Integer(default=0, min_value=0)
    is_delivered = Boolean(default=False)

    @property
    def outstanding_qty(self) -> int:
        return self.quantity - (self.delivered_qty or 0)


@distribution.entity(part_of="Order")
class StatusEntry:
    status = String(required=True, max_length=20)
    sequence = Integer(required=True, min_value=1)
    changed_by = String(max_length=255)
    changed_by_id = Identifier()
    changed_by_role = String(max_length=50)
    changed_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@distribution.aggregate
class Order:
    order_id = Identifier(identifier=True)
    sequence = Integer(required=True, min_value=1)
    order_date = DateTime(required=True)
    scheduled_for = DateTime()
    status = String(choices=LifecycleStatus, default=LifecycleStatus.ACTIVE.value)
    order_status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)

    # Customer
    customer_name = String(required=True, max_length=255)
    customer_phone = String(max_length=50)
    customer_address = Text()
    order_route = String(max_length=255)
    payment_condition = String(max_length=100)
    notes = Text()

    # Assignment
    assigned_to = String(required=True, max_length=255)
    assigned_to_id = Identifier(required=True)
    created_by = String(max_length=255)
    created_by_id = Identifier()
    is_without = Boolean(default=False)

    order_items = HasMany(OrderItem)
    total_amount = Float(default=0.0)

    # Workflow audit
    status_history = HasMany(StatusEntry)
    status_updated_by = String(max_length=255)
    status_updated_at = DateTime()

    # Dispatch and partial fulfillment
    delivery_partner = String(max_length=255)
    dispatched_at = DateTime()
    is_partial_delivery = Boolean(default=False)
    original_item_count = Integer(default=0)
    fulfilled_item_count = Integer(default=0)

    # Cancellation
    cancelled_by = String(max_length=255)
    cancellation_reason = Text()
    cancelled_at = DateTime()

    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def dispatched_orders_must_name_a_delivery_partner(self):
        if self.order_status == OrderStatus.DISPATCHED.value and not self.delivery_partner:
            raise ValidationError({"delivery_partner": ["Delivery partner is required for dispatch"]})

    @invariant.post
    def fulfilled_items_reconcile_with_original_count(self):
        if self.order_status != OrderStatus.DISPATCHED.value:
            return
        if self.fulfilled_item_count > self.original_item_count:
            raise ValidationError({"fulfilled_item_count": ["Cannot fulfil more items than were ordered"]})
        if self.is_partial_delivery != (self.fulfilled_item_count < self.original_item_count):
            raise ValidationError({"is_partial_delivery": ["Partial flag does not match fulfilled item count"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_id,
        sequence,
        customer_name,
        assigned_to,
        assigned_to_id,
        items,
        actor,
        customer_phone=None,
        customer_address=None,
        order_route=None,
        payment_condition=None,
        notes=None,
        scheduled_for=None,
        is_without=False,
    ):
        """Create an order in Pending status.

        Args:
            items: list of dicts with product_id, product_name, brand_name,
                dimension, quantity and price. Product references are resolved
                by the caller.
        """
        _require_assignment(assigned_to, assigned_to_id)
        _require_items(items)

        now = datetime.now(UTC)
        scheduled_for = as_utc(scheduled_for)
        is_scheduled = scheduled_for is not None and scheduled_for > now

        order = cls(
            order_id=order_id,
            sequence=sequence,
            order_date=scheduled_for if is_scheduled else now,
            scheduled_for=scheduled_for,
            status=(LifecycleStatus.SCHEDULED if is_scheduled else LifecycleStatus.ACTIVE).value,
            order_status=OrderStatus.PENDING.value,
            customer_name=customer_name,
            customer_phone=customer_phone,
            customer_address=customer_address,
            order_route=order_route,
            payment_condition=payment_condition,
            notes=notes,
            assigned_to=assigned_to,
            assigned_to_id=assigned_to_id,
            created_by=actor.name,
            created_by_id=actor.id,
            is_without=is_without,
            created_at=now,
            updated_at=now,
        )
        order._set_items(items)
        order._record_status(OrderStatus.PENDING, actor, now)

        order.raise_(
            OrderCreated(
                order_id=order.order_id,
                customer_name=order.customer_name,
                customer_phone=order.customer_phone,
                customer_address=order.customer_address,
                order_route=order.order_route,
                assigned_to=order.assigned_to,
                assigned_to_id=str(order.assigned_to_id),
                created_by=order.created_by,
                created_by_id=order.created_by_id,
                status=order.status,
                order_status=order.order_status,
                scheduled_for=order.scheduled_for,
                is_without=order.is_without,
                item_count=len(items),
                total_amount=order.total_amount,
                actor_id=actor.id,
                actor_name=actor.name,
                actor_role=actor.role,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------
    @property
    def items_in_order(self) -> list:
        return sorted(self.order_items, key=lambda item: item.position)

    @property
    def history(self) -> list:
        return sorted(self.status_history, key=lambda entry: entry.sequence)

    @property
    def partial_items(self) -> list:
        """Items dispatched short of the ordered quantity."""
        if not self.is_partial_delivery:
            return []
        return [item for item in self.items_in_order if item.outstanding_qty > 0]

    @property
    def is_partial_order(self) -> bool:
        return bool(self.is_partial_delivery)

    def committed_items(self) -> list[tuple[str, int, str]]:
        """``(product_id, committed_qty, product_name)`` for every item holding stock."""
        return [
            (str(item.product_id), item.committed_qty, item.product_name)
            for item in self.items_in_order
            if item.committed_qty
        ]

    def _item(self, item_id):
        item = next((i for i in self.order_items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ValidationError({"order_items": [f"Item {item_id} is not part of order {self.order_id}"]})
        return item

    # -------------------------------------------------------------------
    # Internal mutators
    # -------------------------------------------------------------------
    def _set_items(self, items):
        for position, data in enumerate(items):
            quantity = data["quantity"]
            price = data.get("price") or 0.0
            self.add_order_items(
                OrderItem(
                    product_id=data["product_id"],
                    product_name=data["product_name"],
                    brand_name=data.get("brand_name"),
                    dimension=data.get("dimension"),
                    quantity=quantity,
                    price=price,
                    total=quantity * price,
                    position=position,
                )
            )
        self.total_amount = sum(item.total for item in self.order_items)

    def _record_status(self, status: OrderStatus, actor, now):
        """Append to the status history and stamp who changed it and when."""
        self.add_status_history(
            StatusEntry(
                status=status.value,
                sequence=len(self.status_history) + 1,
                changed_by=actor.name,
                changed_by_id=actor.id,
                changed_by_role=actor.role,
                changed_at=now,
            )
        )
        self.status_updated_by = actor.name
        self.status_updated_at = now
        self.updated_at = now

    def _assert_can_transition(self, target: OrderStatus, lineage):
        current = OrderStatus(self.order_status)
        if target == OrderStatus.CANCELLED:
            raise ValidationError({"order_status": ["Orders are cancelled with the cancel command, not a status change"]})

        allowed = allowed_transitions(current, lineage)
        if target not in allowed:
            allowed_text = ", ".join(status.value for status in allowed) or "none"
            raise ValidationError(
                {
                    "order_status": [
                        f"Invalid status transition from {current.value} to {target.value}. Allowed: {allowed_text}"
                    ]
                }
            )

    def _status_changed_event(self, previous, actor, now, reason=None):
        return OrderStatusChanged(
            order_id=self.order_id,
            customer_name=self.customer_name,
            previous_status=previous.value,
            new_status=self.order_status,
            assigned_to_id=str(self.assigned_to_id),
            created_by_id=self.created_by_id,
            delivery_partner=self.delivery_partner,
            is_partial_delivery=bool(self.is_partial_delivery),
            reason=reason,
            actor_id=actor.id,
            actor_name=actor.name,
            actor_role=actor.role,
            changed_at=now,
        )

    # -------------------------------------------------------------------
    # Stock commitment bookkeeping
    # -------------------------------------------------------------------
    def record_commitment(self, item_id, quantity):
        item = self._item(item_id)
        item.committed_qty = (item.committed_qty or 0) + quantity

    def release_commitments(self) -> list[tuple[str, int, str]]:
        """Zero every item's committed stock and return what was released."""
        released = self.committed_items()
        for item in self.order_items:
            if item.committed_qty:
                item.committed_qty = 0
        return released

    # -------------------------------------------------------------------
    # Detail edits
    # -------------------------------------------------------------------
    def update_details(self, actor, without_assignee_id=None, **changes):
        """Edit customer, route, payment, notes, schedule and assignment.

        ``None`` values are ignored. A new ``assigned_to_id`` raises
        OrderReassigned in addition to OrderDetailsUpdated.
        """
        if LifecycleStatus(self.status) == LifecycleStatus.CANCELLED:
            raise ValidationError({"status": ["Cancelled orders cannot be edited"]})

        now = datetime.now(UTC)
        changed = []

        for field_name in _EDITABLE_DETAILS:
            value = changes.get(field_name)
            if value is not None and value != getattr(self, field_name):
                setattr(self, field_name, value)
                changed.append(field_name)

        scheduled_for = as_utc(changes.get("scheduled_for"))
        if scheduled_for is not None and scheduled_for != as_utc(self.scheduled_for):
            self._reschedule(scheduled_for, now)
            changed.append("scheduled_for")

        previous_assignee, previous_assignee_id = self.assigned_to, str(self.assigned_to_id)
        new_assignee_id = changes.get("assigned_to_id")
        new_assignee = changes.get("assigned_to")
        reassigned = bool(new_assignee_id) and str(new_assignee_id) != previous_assignee_id
        if reassigned or (new_assignee and new_assignee != self.assigned_to):
            _require_assignment(new_assignee or self.assigned_to, new_assignee_id or self.assigned_to_id)
            self.assigned_to = new_assignee or self.assigned_to
            self.assigned_to_id = new_assignee_id or self.assigned_to_id
            if without_assignee_id is not None:
                self.is_without = str(self.assigned_to_id) == str(without_assignee_id)
            changed.extend(["assigned_to", "assigned_to_id"])

        if not changed:
            return

        self.updated_at = now
        self.raise_(
            OrderDetailsUpdated(
                order_id=self.order_id,
                changed_fields=json.dumps(changed),
                actor_id=actor.id,
                actor_name=actor.name,
                actor_role=actor.role,
                updated_at=now,
            )
        )

        if reassigned:
            self.raise_(
                OrderReassigned(
                    order_id=self.order_id,
                    customer_name=self.customer_name,
                    previous_assigned_to=previous_assignee,
                    previous_assigned_to_id=previous_assignee_id,
                    assigned_to=self.assigned_to,
                    assigned_to_id=str(self.assigned_to_id),
                    actor_id=actor.id,
                    actor_name=actor.name,
                    actor_role=actor.role,
                    reassigned_at=now,
                )
            )

    def _reschedule(self, scheduled_for, now):
        self.scheduled_for = scheduled_for
        lifecycle = LifecycleStatus(self.status)
        if lifecycle in (LifecycleStatus.ACTIVE, LifecycleStatus.SCHEDULED):
            is_scheduled = scheduled_for > now
            self.status = (LifecycleStatus.SCHEDULED if is_scheduled else LifecycleStatus.ACTIVE).value
            if is_scheduled:
                self.order_date = scheduled_for

    def assert_items_editable(self):
        if OrderStatus(self.order_status) in (OrderStatus.DISPATCHED, OrderStatus.CANCELLED):
            raise ValidationError(
                {"order_items": [f"Items cannot be changed on a {self.order_status.lower()} order"]}
            )

    def replace_items(self, items, actor):
        """Replace the whole item list. Stock for the old items must already be released."""
        self.assert_items_editable()
        _require_items(items)

        for item in list(self.order_items):
            self.remove_order_items(item)
        self._set_items(items)

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            OrderItemsReplaced(
                order_id=self.order_id,
                items=json.dumps(
                    [
                        {"product_id": str(i.product_id), "quantity": i.quantity, "price": i.price}
                        for i in self.items_in_order
                    ]
                ),
                total_amount=self.total_amount,
                actor_id=actor.id,
                actor_name=actor.name,
                actor_role=actor.role,
                replaced_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Workflow transitions
    # -------------------------------------------------------------------
    def advance_status(self, target, actor, lineage):
        """Move to DC or Invoice. Dispatch goes through ``plan_dispatch``/``dispatch``."""
        target = _parse_status(target)
        self._assert_can_transition(target, lineage)
        if target == OrderStatus.DISPATCHED:
            raise ValidationError({"order_status": ["Dispatching requires a delivery partner and dispatch details"]})

        previous = OrderStatus(self.order_status)
        now = datetime.now(UTC)
        self.order_status = target.value
        self._record_status(target, actor, now)
        self.raise_(self._status_changed_event(previous, actor, now))

    def plan_dispatch(self, delivery_partner, lineage, delivered_items=None, item_indices=None) -> dict:
        """Validate a dispatch request without mutating anything.

        Returns ``{item_id: delivered_qty}`` covering every item.

        Args:
            delivered_items: list of ``{product_id, delivered_qty, is_delivered}``.
                Entries are matched to items by product, in item order; an
                entry with ``is_delivered`` false delivers nothing.
            item_indices: positions of items delivered in full; the rest stay
                pending. Ignored when ``delivered_items`` is given.
        """
        self._assert_can_transition(OrderStatus.DISPATCHED, lineage)
        if not (delivery_partner or "").strip():
            raise ValidationError({"delivery_partner": ["Delivery partner is required for dispatch"]})

        items = self.items_in_order
        if delivered_items:
            plan = self._plan_from_deliveries(items, delivered_items)
        elif item_indices:
            plan = self._plan_from_indices(items, item_indices)
        else:
            plan = {str(item.id): item.quantity for item in items}

        if not any(plan.values()):
            raise ValidationError({"delivered_items": ["At least one item must be delivered"]})
        return plan

    def _plan_from_deliveries(self, items, delivered_items):
        plan = {str(item.id): 0 for item in items}
        matched = set()
        errors = []
        for entry in delivered_items:
            product_id = str(entry.get("product_id"))
            item = next(
                (i for i in items if str(i.product_id) == product_id and str(i.id) not in matched),
                None,
            )
            if item is None:
                errors.append(f"Product {product_id} is not part of order {self.order_id}")
                continue
            matched.add(str(item.id))

            raw = entry.get("delivered_qty")
            try:
                delivered = item.quantity if raw is None else int(raw)
            except (TypeError, ValueError):
                errors.append(f"Delivered quantity for {item.product_name} must be a whole number")
                continue

            if delivered < 0:
                errors.append(f"Delivered quantity cannot be negative for {item.product_name}")
            elif delivered > item.quantity:
                errors.append(
                    f"Delivered quantity for {item.product_name} exceeds ordered quantity ({delivered} > {item.quantity})"
                )
            elif entry.get("is_delivered", True):
                plan[str(item.id)] = delivered

        if errors:
            raise ValidationError({"delivered_items": errors})
        return plan

    def _plan_from_indices(self, items, item_indices):
        plan = {str(item.id): 0 for item in items}
        invalid = [index for index in item_indices if not isinstance(index, int) or not 0 <= index < len(items)]
        if invalid:
            raise ValidationError({"dispatch_items": [f"Invalid item index: {index}" for index in invalid]})
        for index in item_indices:
            item = items[index]
            plan[str(item.id)] = item.quantity
        return plan

    def dispatch(self, delivery_partner, plan, actor, lineage):
        """Apply a dispatch plan produced by ``plan_dispatch``."""
        self._assert_can_transition(OrderStatus.DISPATCHED, lineage)
        previous = OrderStatus(self.order_status)
        now = datetime.now(UTC)

        with atomic_change(self):
            for item in self.order_items:
                delivered = plan.get(str(item.id), 0)
                item.delivered_qty = delivered
                item.is_delivered = delivered == item.quantity

            fulfilled = sum(1 for item in self.order_items if item.is_delivered)
            self.original_item_count = len(self.order_items)
            self.fulfilled_item_count = fulfilled
            self.is_partial_delivery = fulfilled < self.original_item_count
            self.delivery_partner = delivery_partner.strip()
            self.dispatched_at = now
            self.order_status = OrderStatus.DISPATCHED.value
            if not self.is_partial_delivery:
                self.status = LifecycleStatus.COMPLETED.value
            self._record_status(OrderStatus.DISPATCHED, actor, now)

        self.raise_(self._status_changed_event(previous, actor, now))

    def plan_completion(self) -> dict:
        """``{item_id: outstanding_qty}`` for a partially dispatched order."""
        if OrderStatus(self.order_status) != OrderStatus.DISPATCHED:
            raise ValidationError({"order_status": ["Only dispatched orders can be completed"]})
        if not self.is_partial_delivery:
            raise ValidationError({"order_status": ["Order has no pending partial delivery"]})
        return {str(item.id): item.outstanding_qty for item in self.partial_items}

    def complete_partial(self, actor):
        """Deliver every outstanding item in full and clear the partial flag."""
        outstanding = self.plan_completion()
        now = datetime.now(UTC)
        completed = []

        with atomic_change(self):
            for item in self.order_items:
                if str(item.id) in outstanding:
                    completed.append({"product_id": str(item.product_id), "quantity": outstanding[str(item.id)]})
                    item.delivered_qty = item.quantity
                    item.is_delivered = True
            self.fulfilled_item_count = self.original_item_count
            self.is_partial_delivery = False
            self.status = LifecycleStatus.COMPLETED.value
            self.updated_at = now

        self.raise_(
            PartialOrderCompleted(
                order_id=self.order_id,
                customer_name=self.customer_name,
                completed_items=json.dumps(completed),
                assigned_to_id=str(self.assigned_to_id),
                actor_id=actor.id,
                actor_name=actor.name,
                actor_role=actor.role,
                completed_at=now,
            )
        )

    def cancel(self, actor, reason=None):
        """Cancel the order. Committed stock must be released by the caller."""
        if LifecycleStatus(self.status) == LifecycleStatus.CANCELLED:
            raise ValidationError({"status": ["Order is already cancelled"]})
        if OrderStatus(self.order_status) == OrderStatus.DISPATCHED:
            raise ValidationError({"order_status": ["Cannot cancel dispatched orders"]})

        previous = OrderStatus(self.order_status)
        now = datetime.now(UTC)
        reason = reason or DEFAULT_CANCELLATION_REASON

        with atomic_change(self):
            self.status = LifecycleStatus.CANCELLED.value
            self.order_status = OrderStatus.CANCELLED.value
            self.cancelled_by = actor.name
            self.cancellation_reason = reason
            self.cancelled_at = now
            self._record_status(OrderStatus.CANCELLED, actor, now)

        self.raise_(self._status_changed_event(previous, actor, now, reason=reason))

    def activate(self, as_of):
        """Flip a due scheduled order to active. Returns True when it changed."""
        if LifecycleStatus(self.status) != LifecycleStatus.SCHEDULED:
            return False
        if as_utc(self.scheduled_for) and as_utc(self.scheduled_for) > as_utc(as_of):
            return False

        self.status = LifecycleStatus.ACTIVE.value
        self.updated_at = as_of
        self.raise_(OrderActivated(order_id=self.order_id, activated_at=as_of))
        return True

    def mark_deleted(self, actor):
        self.raise_(
            OrderDeleted(
                order_id=self.order_id,
                customer_name=self.customer_name,
                assigned_to_id=str(self.assigned_to_id),
                created_by_id=self.created_by_id,
                actor_id=actor.id,
                actor_name=actor.name,
                actor_role=actor.role,
                deleted_at=datetime.now(UTC),
            )
        )


def _require_assignment(assigned_to, assigned_to_id):
    if not assigned_to or not assigned_to_id:
        raise ValidationError({"assigned_to": ["Please assign the order to a staff member"]})


def _require_items(items):
    if not items:
        raise ValidationError({"order_items": ["Please add at least one item"]})


def _parse_status(value) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(status.value for status in OrderStatus)
        raise ValidationError({"order_status": [f"Unknown order status '{value}'. Expected one of: {allowed}"]})
