from protean import current_domain

from distribution.directory.directory import Customer, Route
from distribution.directory.queries import customer_names, route_names


def _customers():
    return current_domain.repository_for(Customer)._dao.query.all().items


def _routes():
    return current_domain.repository_for(Route)._dao.query.all().items


def test_order_creates_customer_and_route(create_product, create_order):
    pipe = create_product("Pipe", stock=10)
    create_order([(pipe, 1)], customer_address="12 Mill Road")

    [customer] = _customers()
    assert (customer.name, customer.phone, customer.address, customer.route) == (
        "Sharma Traders",
        "+91 98100 00000",
        "12 Mill Road",
        "North Loop",
    )
    assert [route.name for route in _routes()] == ["North Loop"]


def test_repeat_customer_is_refreshed_not_duplicated(create_product, create_order):
    pipe = create_product("Pipe", stock=10)
    create_order([(pipe, 1)])
    create_order([(pipe, 1)], customer_phone="+91 90000 33333", order_route="North Loop")

    [customer] = _customers()
    assert customer.phone == "+91 90000 33333"
    assert len(_routes()) == 1


def test_order_without_route_creates_no_route(create_product, create_order):
    pipe = create_product("Pipe", stock=10)
    create_order([(pipe, 1)], order_route=None)
    assert _routes() == []


def test_lookups_list_each_name_once_in_order(create_product, create_order):
    pipe = create_product("Pipe", stock=10)
    create_order([(pipe, 1)], customer_name="Verma Sanitary", order_route="West Ring")
    create_order([(pipe, 1)], customer_name="Anand Hardware", order_route="East Market")
    create_order([(pipe, 1)], customer_name="Verma Sanitary", order_route="West Ring")

    assert customer_names() == ["Anand Hardware", "Verma Sanitary"]
    assert route_names() == ["East Market", "West Ring"]
