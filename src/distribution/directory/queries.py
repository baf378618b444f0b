"""Name lookups that back autocomplete on order entry."""

from protean.utils.globals import current_domain

from distribution.directory.directory import Customer, Route

_LOOKUP_LIMIT = 1000


def _names(aggregate_cls) -> list[str]:
    records = current_domain.repository_for(aggregate_cls)._dao.query.order_by("name").limit(_LOOKUP_LIMIT).all().items
    return [record.name for record in records]


def customer_names() -> list[str]:
    return _names(Customer)


def route_names() -> list[str]:
    return _names(Route)
