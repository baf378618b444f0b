import pytest
from protean.integrations.pytest import DomainFixture

from distribution.access.actor import Actor


@pytest.fixture(scope="session")
def distribution_bed():
    from distribution.domain import distribution

    bed = DomainFixture(distribution)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(distribution_bed):
    from distribution.notification.channel import reset_channels
    from distribution.realtime import configure_broadcaster, reset_broadcaster
    from distribution.realtime.memory import InMemoryBroadcaster

    reset_channels()
    configure_broadcaster(InMemoryBroadcaster())

    with distribution_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        for _, broker in current_domain.brokers.items():
            broker._data_reset()

        current_domain.event_store.store._data_reset()

    reset_broadcaster()
    reset_channels()


@pytest.fixture
def admin():
    return Actor(id="admin-1", name="Asha", role="Admin")


@pytest.fixture
def staff_actor():
    return Actor(id="staff-1", name="Ravi", role="Staff")


@pytest.fixture
def broadcaster():
    from distribution.realtime import get_broadcaster

    return get_broadcaster()


@pytest.fixture
def push():
    from distribution.notification.channel import get_channel
    from distribution.notification.notification import NotificationChannel

    return get_channel(NotificationChannel.PUSH.value)


def _actor_kwargs(actor):
    return {"actor_id": actor.id, "actor_name": actor.name, "actor_role": actor.role}


@pytest.fixture
def create_product(admin):
    """Factory: create a product through its command and return its id."""
    from protean import current_domain

    from distribution.stock.management import CreateProduct

    def _create(name, stock=10, threshold=2, brand="Generic", dimension="Standard"):
        command = CreateProduct(
            name=name,
            brand_name=brand,
            dimension=dimension,
            stock_quantity=stock,
            low_stock_threshold=threshold,
            **_actor_kwargs(admin),
        )
        return current_domain.process(command, asynchronous=False)

    return _create


@pytest.fixture
def create_order(staff_actor):
    """Factory: create an order from ``[(product_id, quantity), ...]`` and return its id."""
    import json

    from protean import current_domain

    from distribution.order.creation import CreateOrder

    def _create(items, actor=None, **overrides):
        actor = actor or staff_actor
        fields = {
            "customer_name": "Sharma Traders",
            "customer_phone": "+91 98100 00000",
            "order_route": "North Loop",
            "assigned_to": "Ravi",
            "assigned_to_id": "staff-1",
            "items": json.dumps(
                [{"product_id": product_id, "quantity": quantity, "price": 10.0} for product_id, quantity in items]
            ),
        }
        fields.update(overrides)
        return current_domain.process(CreateOrder(**fields, **_actor_kwargs(actor)), asynchronous=False)

    return _create


@pytest.fixture
def stock_of():
    """Current stock quantity of a product."""
    from protean import current_domain

    from distribution.stock.product import Product

    def _stock(product_id):
        return current_domain.repository_for(Product).get(product_id).stock_quantity

    return _stock


@pytest.fixture
def create_staff(admin):
    """Factory: create a staff member, optionally with a push token, and return its id."""
    from protean import current_domain

    from distribution.staff.management import CreateStaff, RegisterPushToken

    def _create(name, role, push_token=None):
        staff_id = current_domain.process(
            CreateStaff(name=name, role=role, **_actor_kwargs(admin)), asynchronous=False
        )
        if push_token:
            current_domain.process(RegisterPushToken(staff_id=staff_id, push_token=push_token), asynchronous=False)
        return staff_id

    return _create
