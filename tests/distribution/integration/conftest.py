import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean.integrations.fastapi import register_exception_handlers

from distribution.api import order_router, product_router, staff_router


@pytest.fixture()
def client():
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(order_router)
    app.include_router(product_router)
    app.include_router(staff_router)
    return TestClient(app)


def headers_for(actor_id, name, role):
    return {"X-Actor-Id": actor_id, "X-Actor-Name": name, "X-Actor-Role": role}


@pytest.fixture()
def as_admin():
    return headers_for("admin-1", "Asha", "Admin")


@pytest.fixture()
def as_staff():
    return headers_for("staff-1", "Ravi", "Staff")


@pytest.fixture()
def as_executive():
    return headers_for("exec-1", "Vikram", "Executive")


@pytest.fixture()
def as_inventory_manager():
    return headers_for("inv-1", "Kiran", "Inventory Manager")
