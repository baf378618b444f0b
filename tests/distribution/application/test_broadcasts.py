from protean import current_domain

from distribution.order.removal import DeleteOrder
from distribution.order.status import ChangeOrderStatus
from distribution.stock.adjustment import AdjustStock


def _actor(actor):
    return {"actor_id": actor.id, "actor_name": actor.name, "actor_role": actor.role}


def test_product_creation_is_broadcast(create_product, broadcaster):
    product_id = create_product("Tee", stock=3, threshold=5)

    [event] = broadcaster.named("product:created")
    assert event["audience"] == "all"
    product = event["payload"]["product"]
    assert product["product_id"] == product_id
    assert product["stock_level"] == "low"
    assert event["payload"]["actor"] == {"id": "admin-1", "name": "Asha", "role": "Admin"}
    assert event["payload"]["timestamp"]


def test_stock_adjustment_broadcasts_product_update(create_product, broadcaster, admin):
    product_id = create_product("Tee", stock=3)
    current_domain.process(AdjustStock(product_id=product_id, delta=4, **_actor(admin)), asynchronous=False)

    [event] = broadcaster.named("product:updated")
    assert event["payload"]["product"]["stock_quantity"] == 7


def test_order_lifecycle_is_broadcast(create_product, create_order, broadcaster, staff_actor, admin):
    pipe = create_product("Pipe", stock=10)
    order_id = create_order([(pipe, 2)])
    current_domain.process(
        ChangeOrderStatus(order_id=order_id, new_status="DC", **_actor(staff_actor)), asynchronous=False
    )
    current_domain.process(DeleteOrder(order_id=order_id, **_actor(admin)), asynchronous=False)

    [created] = broadcaster.named("order:created")
    assert created["payload"]["order"]["order_id"] == order_id
    assert created["payload"]["order"]["order_items"][0]["quantity"] == 2

    updated = broadcaster.named("order:updated")
    assert updated[-1]["payload"]["order"]["order_status"] == "DC"

    [deleted] = broadcaster.named("order:deleted")
    assert deleted["payload"]["order"] == {"order_id": order_id, "customer_name": "Sharma Traders"}
    assert deleted["payload"]["actor"]["role"] == "Admin"


def test_stock_commitment_broadcasts_product_updates(create_product, create_order, broadcaster):
    pipe = create_product("Pipe", stock=10)
    create_order([(pipe, 4)])

    [event] = broadcaster.named("product:updated")
    assert event["payload"]["product"]["stock_quantity"] == 6
    assert event["payload"]["actor"]["id"] == "system"


def test_staff_changes_are_broadcast(create_staff, broadcaster):
    staff_id = create_staff("Meena", "Staff")
    [event] = broadcaster.named("staff:created")
    assert event["payload"]["staff"] == {"staff_id": staff_id, "name": "Meena", "phone": None, "role": "Staff"}


def test_broadcast_failure_does_not_fail_the_command(create_product, broadcaster, stock_of):
    broadcaster.configure(should_fail=True)

    product_id = create_product("Tee", stock=3)

    assert stock_of(product_id) == 3
    assert broadcaster.events == []
