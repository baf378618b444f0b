import json
from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from distribution.order.dispatch import CompleteOrder, DispatchOrder
from distribution.order.modification import UpdateOrderDetails
from distribution.order.order import Order
from distribution.order.removal import DeleteOrder
from distribution.order.scheduling import ActivateScheduledOrders
from distribution.order.status import ChangeOrderStatus
from distribution.order.workflow import TransitionLineage
from distribution.settings import override_settings


def _actor(actor):
    return {"actor_id": actor.id, "actor_name": actor.name, "actor_role": actor.role}


def _change(order_id, status, actor, **extra):
    current_domain.process(
        ChangeOrderStatus(order_id=order_id, new_status=status, **extra, **_actor(actor)), asynchronous=False
    )


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


@pytest.fixture
def pipe(create_product):
    return create_product("Pipe", stock=50)


class TestOrderIds:
    def test_ids_are_sequential(self, pipe, create_order):
        ids = [create_order([(pipe, 1)]) for _ in range(3)]
        assert ids == ["ORD-001", "ORD-002", "ORD-003"]

    def test_sequence_continues_after_deletion_of_older_order(self, pipe, create_order, admin):
        first = create_order([(pipe, 1)])
        create_order([(pipe, 1)])
        current_domain.process(DeleteOrder(order_id=first, **_actor(admin)), asynchronous=False)
        assert create_order([(pipe, 1)]) == "ORD-003"

    def test_prefix_comes_from_settings(self, pipe, create_order):
        with override_settings(order_id_prefix="SO"):
            assert create_order([(pipe, 1)]) == "SO-001"


class TestStatusChanges:
    def test_walks_the_full_workflow(self, pipe, create_order, staff_actor):
        order_id = create_order([(pipe, 2)])
        _change(order_id, "DC", staff_actor)
        _change(order_id, "Invoice", staff_actor)
        _change(order_id, "Dispatched", staff_actor, delivery_partner="BlueDart")

        order = _order(order_id)
        assert order.order_status == "Dispatched"
        assert order.status == "completed"
        assert [entry.status for entry in order.history] == ["Pending", "DC", "Invoice", "Dispatched"]
        assert order.status_updated_by == "Ravi"

    def test_rejected_transition_changes_nothing(self, pipe, create_order, staff_actor):
        order_id = create_order([(pipe, 2)])
        with pytest.raises(ValidationError) as exc:
            _change(order_id, "Invoice", staff_actor)

        assert "Allowed: DC" in exc.value.messages["order_status"][0]
        order = _order(order_id)
        assert order.order_status == "Pending"
        assert len(order.history) == 1

    def test_dc_straight_to_dispatched_in_permissive_lineage(self, pipe, create_order, staff_actor):
        order_id = create_order([(pipe, 2)])
        _change(order_id, "DC", staff_actor)
        _change(order_id, "Dispatched", staff_actor, delivery_partner="BlueDart")
        assert _order(order_id).order_status == "Dispatched"

    def test_strict_lineage_requires_invoice(self, pipe, create_order, staff_actor):
        order_id = create_order([(pipe, 2)])
        with override_settings(transition_lineage=TransitionLineage.STRICT):
            _change(order_id, "DC", staff_actor)
            with pytest.raises(ValidationError) as exc:
                _change(order_id, "Dispatched", staff_actor, delivery_partner="BlueDart")

        assert exc.value.messages["order_status"] == [
            "Invalid status transition from DC to Dispatched. Allowed: Invoice"
        ]

    def test_dispatch_by_status_change_requires_partner(self, pipe, create_order, staff_actor):
        order_id = create_order([(pipe, 2)])
        _change(order_id, "DC", staff_actor)
        _change(order_id, "Invoice", staff_actor)
        with pytest.raises(ValidationError) as exc:
            _change(order_id, "Dispatched", staff_actor)
        assert exc.value.messages["delivery_partner"] == ["Delivery partner is required for dispatch"]

    def test_dispatch_items_select_delivered_lines(self, create_product, create_order, staff_actor):
        pipe = create_product("Pipe", stock=10)
        elbow = create_product("Elbow", stock=10)
        order_id = create_order([(pipe, 2), (elbow, 3)])
        _change(order_id, "DC", staff_actor)
        _change(order_id, "Invoice", staff_actor)
        _change(order_id, "Dispatched", staff_actor, delivery_partner="BlueDart", dispatch_items=json.dumps([0]))

        order = _order(order_id)
        assert order.is_partial_delivery is True
        assert [str(item.product_id) for item in order.partial_items] == [elbow]

    def test_dispatched_order_cannot_move(self, pipe, create_order, staff_actor):
        order_id = create_order([(pipe, 2)])
        _change(order_id, "DC", staff_actor)
        _change(order_id, "Dispatched", staff_actor, delivery_partner="BlueDart")
        with pytest.raises(ValidationError):
            _change(order_id, "Invoice", staff_actor)

    def test_complete_requires_partial_delivery(self, pipe, create_order, staff_actor):
        order_id = create_order([(pipe, 2)])
        _change(order_id, "DC", staff_actor)
        current_domain.process(
            DispatchOrder(order_id=order_id, delivery_partner="BlueDart", **_actor(staff_actor)), asynchronous=False
        )
        with pytest.raises(ValidationError) as exc:
            current_domain.process(CompleteOrder(order_id=order_id, **_actor(staff_actor)), asynchronous=False)
        assert exc.value.messages["order_status"] == ["Order has no pending partial delivery"]

    def test_unknown_order_raises_not_found(self, staff_actor):
        with pytest.raises(ObjectNotFoundError):
            _change("ORD-999", "DC", staff_actor)


class TestDetailUpdates:
    def test_updates_customer_details(self, pipe, create_order, staff_actor):
        order_id = create_order([(pipe, 1)])
        current_domain.process(
            UpdateOrderDetails(order_id=order_id, customer_phone="+91 90000 11111", notes="Gate 2", **_actor(staff_actor)),
            asynchronous=False,
        )
        order = _order(order_id)
        assert order.customer_phone == "+91 90000 11111"
        assert order.notes == "Gate 2"
        assert order.customer_name == "Sharma Traders"

    def test_reassignment(self, pipe, create_order, admin):
        order_id = create_order([(pipe, 1)])
        current_domain.process(
            UpdateOrderDetails(order_id=order_id, assigned_to="Meena", assigned_to_id="staff-2", **_actor(admin)),
            asynchronous=False,
        )
        order = _order(order_id)
        assert (order.assigned_to, str(order.assigned_to_id)) == ("Meena", "staff-2")

    def test_assigning_the_without_placeholder_flags_the_order(self, pipe, create_order, admin):
        order_id = create_order([(pipe, 1)])
        with override_settings(without_assignee_id="without-1"):
            current_domain.process(
                UpdateOrderDetails(order_id=order_id, assigned_to="Without", assigned_to_id="without-1", **_actor(admin)),
                asynchronous=False,
            )
        assert _order(order_id).is_without is True

    def test_created_for_without_placeholder(self, pipe, create_order):
        with override_settings(without_assignee_id="without-1"):
            order_id = create_order([(pipe, 1)], assigned_to="Without", assigned_to_id="without-1")
        assert _order(order_id).is_without is True

    def test_cancelled_orders_cannot_be_edited(self, pipe, create_order, admin):
        from distribution.order.cancellation import CancelOrder

        order_id = create_order([(pipe, 1)])
        current_domain.process(CancelOrder(order_id=order_id, **_actor(admin)), asynchronous=False)
        with pytest.raises(ValidationError):
            current_domain.process(
                UpdateOrderDetails(order_id=order_id, notes="too late", **_actor(admin)), asynchronous=False
            )


class TestScheduledOrders:
    def test_future_order_is_scheduled(self, pipe, create_order):
        order_id = create_order([(pipe, 1)], scheduled_for=datetime.now(UTC) + timedelta(days=1))
        assert _order(order_id).status == "scheduled"

    def test_activation_flips_due_orders_only(self, pipe, create_order):
        soon = create_order([(pipe, 1)], scheduled_for=datetime.now(UTC) + timedelta(hours=1))
        later = create_order([(pipe, 1)], scheduled_for=datetime.now(UTC) + timedelta(days=3))

        activated = current_domain.process(
            ActivateScheduledOrders(as_of=datetime.now(UTC) + timedelta(hours=2)), asynchronous=False
        )

        assert activated == [soon]
        assert _order(soon).status == "active"
        assert _order(later).status == "scheduled"

    def test_rescheduling_into_the_past_activates(self, pipe, create_order, staff_actor):
        order_id = create_order([(pipe, 1)], scheduled_for=datetime.now(UTC) + timedelta(days=1))
        current_domain.process(
            UpdateOrderDetails(
                order_id=order_id, scheduled_for=datetime.now(UTC) - timedelta(minutes=5), **_actor(staff_actor)
            ),
            asynchronous=False,
        )
        assert _order(order_id).status == "active"
