"""Upserts Customer and Route records when an order names new ones.

Failures are logged and never affect the order that triggered them.
"""

from datetime import UTC, datetime

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from distribution.directory.directory import Customer, Route
from distribution.domain import distribution
from distribution.order.events import OrderCreated

logger = structlog.get_logger(__name__)


def _first(repo, **filters):
    matches = repo._dao.query.filter(**filters).all().items
    return matches[0] if matches else None


def upsert_customer(name, phone=None, address=None, route=None):
    repo = current_domain.repository_for(Customer)
    customer = _first(repo, name=name)
    if customer is None:
        now = datetime.now(UTC)
        repo.add(Customer(name=name, phone=phone, address=address, route=route, created_at=now, updated_at=now))
    elif customer.refresh(phone=phone, address=address, route=route):
        repo.add(customer)


def upsert_route(name):
    repo = current_domain.repository_for(Route)
    if _first(repo, name=name) is None:
        repo.add(Route(name=name, created_at=datetime.now(UTC)))


@distribution.event_handler(part_of=Customer, stream_category="distribution::order")
class DirectoryOrderEventsHandler:
    @handle(OrderCreated)
    def on_order_created(self, event: OrderCreated) -> None:
        try:
            upsert_customer(
                event.customer_name.strip(),
                phone=event.customer_phone,
                address=event.customer_address,
                route=event.order_route,
            )
            if event.order_route and event.order_route.strip():
                upsert_route(event.order_route.strip())
        except Exception as exc:
            logger.error(
                "Failed to upsert customer directory",
                order_id=str(event.order_id),
                customer_name=event.customer_name,
                error=str(exc),
            )
