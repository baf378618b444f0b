"""Role-based authorization policy.

A single capability table answers "may this actor perform this action". The
HTTP layer consults ``can_perform`` before any command is processed, and
``can_access_order`` narrows order reads and edits for roles that may only
see their own orders.
"""

from enum import Enum


class Role(Enum):
    ADMIN = "Admin"
    STAFF = "Staff"
    EXECUTIVE = "Executive"
    INVENTORY_MANAGER = "Inventory Manager"


class Action(Enum):
    VIEW_ORDERS = "order.view"
    CREATE_ORDER = "order.create"
    UPDATE_ORDER = "order.update"
    CHANGE_ORDER_STATUS = "order.change_status"
    DISPATCH_ORDER = "order.dispatch"
    COMPLETE_ORDER = "order.complete"
    CANCEL_ORDER = "order.cancel"
    DELETE_ORDER = "order.delete"
    VIEW_PRODUCTS = "product.view"
    CREATE_PRODUCT = "product.create"
    IMPORT_PRODUCTS = "product.import"
    UPDATE_PRODUCT = "product.update"
    DELETE_PRODUCT = "product.delete"
    ADJUST_STOCK = "product.adjust_stock"
    VIEW_STAFF = "staff.view"
    MANAGE_STAFF = "staff.manage"
    REGISTER_PUSH_TOKEN = "staff.register_push_token"


_ORDER_DESK = {Role.ADMIN, Role.STAFF, Role.EXECUTIVE}
_ORDER_OPERATORS = {Role.ADMIN, Role.STAFF}
_STOCK_KEEPERS = {Role.ADMIN, Role.STAFF, Role.INVENTORY_MANAGER}
_EVERYONE = set(Role)

_PERMISSIONS: dict[Action, set[Role]] = {
    Action.VIEW_ORDERS: _ORDER_DESK,
    Action.CREATE_ORDER: _ORDER_DESK,
    Action.UPDATE_ORDER: _ORDER_DESK,
    Action.CHANGE_ORDER_STATUS: _ORDER_DESK,
    Action.DISPATCH_ORDER: _ORDER_OPERATORS,
    Action.COMPLETE_ORDER: _ORDER_OPERATORS,
    Action.CANCEL_ORDER: _ORDER_OPERATORS,
    Action.DELETE_ORDER: {Role.ADMIN},
    Action.VIEW_PRODUCTS: _EVERYONE,
    Action.CREATE_PRODUCT: _EVERYONE,
    Action.IMPORT_PRODUCTS: _EVERYONE,
    Action.UPDATE_PRODUCT: _STOCK_KEEPERS,
    Action.DELETE_PRODUCT: _STOCK_KEEPERS,
    Action.ADJUST_STOCK: _STOCK_KEEPERS,
    Action.VIEW_STAFF: _ORDER_OPERATORS,
    Action.MANAGE_STAFF: {Role.ADMIN},
    Action.REGISTER_PUSH_TOKEN: _EVERYONE,
}

# Roles limited to orders they created or were assigned
_OWN_ORDERS_ONLY = {Role.EXECUTIVE}


def _role_of(actor) -> Role | None:
    try:
        return Role(actor.role)
    except ValueError:
        return None


def can_perform(actor, action: Action) -> bool:
    """Return True when the actor's role grants ``action``."""
    role = _role_of(actor)
    if role is None:
        return False
    return role in _PERMISSIONS.get(action, set())


def is_scoped_to_own_orders(actor) -> bool:
    return _role_of(actor) in _OWN_ORDERS_ONLY


def can_access_order(actor, order) -> bool:
    """Row-level check layered on top of ``can_perform`` for order reads and edits."""
    if not is_scoped_to_own_orders(actor):
        return True
    return actor.id in (str(order.created_by_id or ""), str(order.assigned_to_id or ""))
