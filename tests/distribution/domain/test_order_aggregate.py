from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ValidationError

from distribution.order.events import OrderCreated, OrderStatusChanged, PartialOrderCompleted
from distribution.order.order import DEFAULT_CANCELLATION_REASON, Order
from distribution.order.workflow import LifecycleStatus, OrderStatus, TransitionLineage

PERMISSIVE = TransitionLineage.PERMISSIVE
STRICT = TransitionLineage.STRICT


def _items():
    return [
        {"product_id": "prod-a", "product_name": "Pipe", "brand_name": "Supreme", "quantity": 5, "price": 10.0},
        {"product_id": "prod-b", "product_name": "Elbow", "brand_name": "Supreme", "quantity": 3, "price": 4.0},
    ]


def _order(actor, **overrides):
    fields = {
        "order_id": "ORD-001",
        "sequence": 1,
        "customer_name": "Sharma Traders",
        "assigned_to": "Ravi",
        "assigned_to_id": "staff-1",
        "items": _items(),
        "actor": actor,
    }
    fields.update(overrides)
    return Order.create(**fields)


def _advance_to_invoice(order, actor):
    order.advance_status("DC", actor, PERMISSIVE)
    order.advance_status("Invoice", actor, PERMISSIVE)


class TestOrderCreation:
    def test_starts_pending_and_active(self, staff_actor):
        order = _order(staff_actor)
        assert order.order_status == OrderStatus.PENDING.value
        assert order.status == LifecycleStatus.ACTIVE.value

    def test_line_totals_and_order_total(self, staff_actor):
        order = _order(staff_actor)
        assert [item.total for item in order.items_in_order] == [50.0, 12.0]
        assert order.total_amount == 62.0

    def test_initial_status_recorded_in_history(self, staff_actor):
        order = _order(staff_actor)
        assert [entry.status for entry in order.history] == ["Pending"]
        assert order.status_updated_by == "Ravi"

    def test_creator_taken_from_actor(self, staff_actor):
        order = _order(staff_actor)
        assert order.created_by == "Ravi"
        assert order.created_by_id == "staff-1"

    def test_raises_order_created(self, staff_actor):
        order = _order(staff_actor)
        event = order._events[-1]
        assert isinstance(event, OrderCreated)
        assert event.item_count == 2
        assert event.actor_role == "Staff"

    def test_assignment_required(self, staff_actor):
        with pytest.raises(ValidationError) as exc:
            _order(staff_actor, assigned_to=None, assigned_to_id=None)
        assert exc.value.messages["assigned_to"] == ["Please assign the order to a staff member"]

    def test_items_required(self, staff_actor):
        with pytest.raises(ValidationError) as exc:
            _order(staff_actor, items=[])
        assert exc.value.messages["order_items"] == ["Please add at least one item"]

    def test_future_schedule_marks_order_scheduled(self, staff_actor):
        later = datetime.now(UTC) + timedelta(days=2)
        order = _order(staff_actor, scheduled_for=later)
        assert order.status == LifecycleStatus.SCHEDULED.value
        assert order.order_date == later

    def test_past_schedule_stays_active(self, staff_actor):
        order = _order(staff_actor, scheduled_for=datetime.now(UTC) - timedelta(hours=1))
        assert order.status == LifecycleStatus.ACTIVE.value


class TestStatusAdvance:
    def test_pending_to_dc_to_invoice(self, staff_actor):
        order = _order(staff_actor)
        _advance_to_invoice(order, staff_actor)
        assert order.order_status == "Invoice"
        assert [entry.status for entry in order.history] == ["Pending", "DC", "Invoice"]

    def test_each_change_raises_status_changed(self, staff_actor):
        order = _order(staff_actor)
        order.advance_status("DC", staff_actor, PERMISSIVE)
        event = order._events[-1]
        assert isinstance(event, OrderStatusChanged)
        assert (event.previous_status, event.new_status) == ("Pending", "DC")

    def test_skipping_dc_rejected_with_allowed_set(self, staff_actor):
        order = _order(staff_actor)
        with pytest.raises(ValidationError) as exc:
            order.advance_status("Invoice", staff_actor, PERMISSIVE)
        assert exc.value.messages["order_status"] == [
            "Invalid status transition from Pending to Invoice. Allowed: DC"
        ]
        assert order.order_status == "Pending"
        assert len(order.history) == 1

    def test_same_status_rejected(self, staff_actor):
        order = _order(staff_actor)
        with pytest.raises(ValidationError):
            order.advance_status("Pending", staff_actor, PERMISSIVE)

    def test_unknown_status_rejected(self, staff_actor):
        order = _order(staff_actor)
        with pytest.raises(ValidationError) as exc:
            order.advance_status("Shipped", staff_actor, PERMISSIVE)
        assert "Unknown order status" in exc.value.messages["order_status"][0]

    def test_cancelled_not_reachable_by_status_change(self, staff_actor):
        order = _order(staff_actor)
        with pytest.raises(ValidationError):
            order.advance_status("Cancelled", staff_actor, PERMISSIVE)

    def test_history_timestamps_non_decreasing(self, staff_actor):
        order = _order(staff_actor)
        _advance_to_invoice(order, staff_actor)
        stamps = [entry.changed_at for entry in order.history]
        assert stamps == sorted(stamps)


class TestDispatchPlanning:
    def test_delivery_partner_required(self, staff_actor):
        order = _order(staff_actor)
        _advance_to_invoice(order, staff_actor)
        with pytest.raises(ValidationError) as exc:
            order.plan_dispatch("  ", PERMISSIVE)
        assert "delivery_partner" in exc.value.messages

    def test_dc_to_dispatched_only_in_permissive_lineage(self, staff_actor):
        order = _order(staff_actor)
        order.advance_status("DC", staff_actor, PERMISSIVE)

        assert order.plan_dispatch("BlueDart", PERMISSIVE)
        with pytest.raises(ValidationError):
            order.plan_dispatch("BlueDart", STRICT)

    def test_full_plan_without_details(self, staff_actor):
        order = _order(staff_actor)
        _advance_to_invoice(order, staff_actor)
        plan = order.plan_dispatch("BlueDart", PERMISSIVE)
        assert sorted(plan.values()) == [3, 5]

    def test_partial_plan_from_delivered_items(self, staff_actor):
        order = _order(staff_actor)
        _advance_to_invoice(order, staff_actor)
        plan = order.plan_dispatch(
            "BlueDart",
            PERMISSIVE,
            delivered_items=[
                {"product_id": "prod-a", "delivered_qty": 5, "is_delivered": True},
                {"product_id": "prod-b", "delivered_qty": 1, "is_delivered": True},
            ],
        )
        by_product = {str(item.product_id): plan[str(item.id)] for item in order.items_in_order}
        assert by_product == {"prod-a": 5, "prod-b": 1}

    def test_undelivered_flag_delivers_nothing(self, staff_actor):
        order = _order(staff_actor)
        _advance_to_invoice(order, staff_actor)
        plan = order.plan_dispatch(
            "BlueDart",
            PERMISSIVE,
            delivered_items=[
                {"product_id": "prod-a", "delivered_qty": 5, "is_delivered": True},
                {"product_id": "prod-b", "delivered_qty": 3, "is_delivered": False},
            ],
        )
        by_product = {str(item.product_id): plan[str(item.id)] for item in order.items_in_order}
        assert by_product == {"prod-a": 5, "prod-b": 0}

    def test_negative_delivered_quantity_rejected(self, staff_actor):
        order = _order(staff_actor)
        _advance_to_invoice(order, staff_actor)
        with pytest.raises(ValidationError) as exc:
            order.plan_dispatch("BlueDart", PERMISSIVE, delivered_items=[{"product_id": "prod-a", "delivered_qty": -1}])
        assert exc.value.messages["delivered_items"] == ["Delivered quantity cannot be negative for Pipe"]

    def test_delivered_quantity_above_ordered_rejected(self, staff_actor):
        order = _order(staff_actor)
        _advance_to_invoice(order, staff_actor)
        with pytest.raises(ValidationError) as exc:
            order.plan_dispatch("BlueDart", PERMISSIVE, delivered_items=[{"product_id": "prod-b", "delivered_qty": 4}])
        assert "exceeds ordered quantity" in exc.value.messages["delivered_items"][0]

    def test_unknown_product_rejected(self, staff_actor):
        order = _order(staff_actor)
        _advance_to_invoice(order, staff_actor)
        with pytest.raises(ValidationError):
            order.plan_dispatch("BlueDart", PERMISSIVE, delivered_items=[{"product_id": "prod-z", "delivered_qty": 1}])

    def test_nothing_delivered_rejected(self, staff_actor):
        order = _order(staff_actor)
        _advance_to_invoice(order, staff_actor)
        with pytest.raises(ValidationError) as exc:
            order.plan_dispatch(
                "BlueDart", PERMISSIVE, delivered_items=[{"product_id": "prod-a", "delivered_qty": 0}]
            )
        assert exc.value.messages["delivered_items"] == ["At least one item must be delivered"]

    def test_item_indices_deliver_listed_items_in_full(self, staff_actor):
        order = _order(staff_actor)
        _advance_to_invoice(order, staff_actor)
        plan = order.plan_dispatch("BlueDart", PERMISSIVE, item_indices=[1])
        by_product = {str(item.product_id): plan[str(item.id)] for item in order.items_in_order}
        assert by_product == {"prod-a": 0, "prod-b": 3}

    def test_out_of_range_index_rejected(self, staff_actor):
        order = _order(staff_actor)
        _advance_to_invoice(order, staff_actor)
        with pytest.raises(ValidationError) as exc:
            order.plan_dispatch("BlueDart", PERMISSIVE, item_indices=[7])
        assert exc.value.messages["dispatch_items"] == ["Invalid item index: 7"]


class TestDispatchAndCompletion:
    def _partially_dispatched(self, actor):
        order = _order(actor)
        _advance_to_invoice(order, actor)
        plan = order.plan_dispatch(
            "BlueDart",
            PERMISSIVE,
            delivered_items=[
                {"product_id": "prod-a", "delivered_qty": 5},
                {"product_id": "prod-b", "delivered_qty": 1},
            ],
        )
        order.dispatch("BlueDart", plan, actor, PERMISSIVE)
        return order

    def test_full_dispatch_completes_order(self, staff_actor):
        order = _order(staff_actor)
        _advance_to_invoice(order, staff_actor)
        order.dispatch("BlueDart", order.plan_dispatch("BlueDart", PERMISSIVE), staff_actor, PERMISSIVE)

        assert order.order_status == "Dispatched"
        assert order.status == LifecycleStatus.COMPLETED.value
        assert order.is_partial_delivery is False
        assert order.fulfilled_item_count == order.original_item_count == 2

    def test_partial_dispatch_bookkeeping(self, staff_actor):
        order = self._partially_dispatched(staff_actor)
        items = {str(item.product_id): item for item in order.items_in_order}

        assert order.is_partial_delivery is True
        assert order.is_partial_order is True
        assert order.status == LifecycleStatus.ACTIVE.value
        assert (items["prod-a"].delivered_qty, items["prod-a"].is_delivered) == (5, True)
        assert (items["prod-b"].delivered_qty, items["prod-b"].is_delivered) == (1, False)
        assert [str(item.product_id) for item in order.partial_items] == ["prod-b"]
        assert (order.original_item_count, order.fulfilled_item_count) == (2, 1)

    def test_dispatched_is_terminal(self, staff_actor):
        order = self._partially_dispatched(staff_actor)
        with pytest.raises(ValidationError):
            order.advance_status("Invoice", staff_actor, PERMISSIVE)
        with pytest.raises(ValidationError):
            order.plan_dispatch("BlueDart", PERMISSIVE)

    def test_completion_plan_lists_outstanding_quantity(self, staff_actor):
        order = self._partially_dispatched(staff_actor)
        outstanding = order.plan_completion()
        assert list(outstanding.values()) == [2]

    def test_complete_partial_clears_flag(self, staff_actor):
        order = self._partially_dispatched(staff_actor)
        order.complete_partial(staff_actor)

        assert order.is_partial_delivery is False
        assert order.partial_items == []
        assert order.fulfilled_item_count == 2
        assert order.status == LifecycleStatus.COMPLETED.value
        assert isinstance(order._events[-1], PartialOrderCompleted)

    def test_complete_rejected_when_not_dispatched(self, staff_actor):
        order = _order(staff_actor)
        with pytest.raises(ValidationError) as exc:
            order.plan_completion()
        assert exc.value.messages["order_status"] == ["Only dispatched orders can be completed"]

    def test_complete_rejected_without_partial_delivery(self, staff_actor):
        order = _order(staff_actor)
        _advance_to_invoice(order, staff_actor)
        order.dispatch("BlueDart", order.plan_dispatch("BlueDart", PERMISSIVE), staff_actor, PERMISSIVE)
        with pytest.raises(ValidationError) as exc:
            order.plan_completion()
        assert exc.value.messages["order_status"] == ["Order has no pending partial delivery"]


class TestCancellation:
    def test_cancel_records_reason_and_history(self, admin):
        order = _order(admin)
        order.cancel(admin, reason="Customer called off")

        assert order.status == LifecycleStatus.CANCELLED.value
        assert order.order_status == OrderStatus.CANCELLED.value
        assert order.cancelled_by == "Asha"
        assert order.cancellation_reason == "Customer called off"
        assert [entry.status for entry in order.history] == ["Pending", "Cancelled"]

    def test_default_reason(self, admin):
        order = _order(admin)
        order.cancel(admin)
        assert order.cancellation_reason == DEFAULT_CANCELLATION_REASON

    def test_cannot_cancel_twice(self, admin):
        order = _order(admin)
        order.cancel(admin)
        with pytest.raises(ValidationError) as exc:
            order.cancel(admin)
        assert exc.value.messages["status"] == ["Order is already cancelled"]

    def test_cannot_cancel_dispatched(self, admin):
        order = _order(admin)
        _advance_to_invoice(order, admin)
        order.dispatch("BlueDart", order.plan_dispatch("BlueDart", PERMISSIVE), admin, PERMISSIVE)
        with pytest.raises(ValidationError) as exc:
            order.cancel(admin)
        assert exc.value.messages["order_status"] == ["Cannot cancel dispatched orders"]


class TestActivation:
    def test_due_scheduled_order_activates(self, staff_actor):
        later = datetime.now(UTC) + timedelta(hours=1)
        order = _order(staff_actor, scheduled_for=later)
        assert order.activate(later + timedelta(minutes=1)) is True
        assert order.status == LifecycleStatus.ACTIVE.value

    def test_not_yet_due_order_stays_scheduled(self, staff_actor):
        later = datetime.now(UTC) + timedelta(hours=1)
        order = _order(staff_actor, scheduled_for=later)
        assert order.activate(datetime.now(UTC)) is False
        assert order.status == LifecycleStatus.SCHEDULED.value
