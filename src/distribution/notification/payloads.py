"""Static payload table: title, body, priority and deep link per notification type."""

from distribution.notification.fanout import NotificationEvent

HIGH = "high"
NORMAL = "normal"

_ORDERS = "/orders"
_MY_ORDERS = "/orders/my-orders"
_PRODUCTS = "/products"
_STAFF = "/staff"
# Resolved to /orders/my-orders when the order has an assignee
_ASSIGNEE_ORDERS = "assignee-orders"

_PAYLOADS = {
    NotificationEvent.ORDER_CREATED: (
        "Order Created",
        "Order {order_id} ({customer_name}) was created by {created_by}",
        NORMAL,
        _ORDERS,
    ),
    NotificationEvent.ORDER_ASSIGNED: (
        "New Order Assigned",
        "Order {order_id} ({customer_name}) has been assigned to you",
        HIGH,
        _MY_ORDERS,
    ),
    NotificationEvent.ORDER_STATUS_CHANGED: (
        "Order Status Updated",
        "Order {order_id} status changed to {new_status}",
        HIGH,
        _ASSIGNEE_ORDERS,
    ),
    NotificationEvent.ORDER_PENDING_TO_DC: (
        "Order Status Updated",
        "Order {order_id} moved to DC status",
        HIGH,
        _ASSIGNEE_ORDERS,
    ),
    NotificationEvent.ORDER_DC_TO_INVOICE: (
        "Order Ready for Dispatch",
        "Order {order_id} is ready for dispatch",
        HIGH,
        _ORDERS,
    ),
    NotificationEvent.ORDER_INVOICE_TO_DISPATCHED: (
        "Order Dispatched",
        "Order {order_id} has been dispatched via {delivery_partner}",
        HIGH,
        _ASSIGNEE_ORDERS,
    ),
    NotificationEvent.ORDER_CANCELLED: (
        "Order Cancelled",
        "Order {order_id} was cancelled: {reason}",
        HIGH,
        _ASSIGNEE_ORDERS,
    ),
    NotificationEvent.ORDER_REASSIGNED: (
        "Order Reassigned",
        "Order {order_id} has been reassigned to {new_assignee}",
        HIGH,
        _MY_ORDERS,
    ),
    NotificationEvent.ORDER_DELETED: (
        "Order Deleted",
        "Order {order_id} was deleted by {deleted_by}",
        HIGH,
        _ORDERS,
    ),
    NotificationEvent.PRODUCT_CREATED: (
        "Product Created",
        "{product_name} was added by {created_by}",
        NORMAL,
        _PRODUCTS,
    ),
    NotificationEvent.PRODUCT_UPDATED: (
        "Product Updated",
        "{product_name} was updated by {updated_by}",
        NORMAL,
        _PRODUCTS,
    ),
    NotificationEvent.PRODUCT_DELETED: (
        "Product Deleted",
        "{product_name} was deleted by {deleted_by}",
        NORMAL,
        _PRODUCTS,
    ),
    NotificationEvent.PRODUCT_LOW_STOCK: (
        "Low Stock Alert",
        "{product_name} is running low (Stock: {stock_quantity}, Threshold: {threshold})",
        HIGH,
        _PRODUCTS,
    ),
    NotificationEvent.PRODUCT_OUT_OF_STOCK: (
        "Out of Stock",
        "{product_name} is out of stock",
        HIGH,
        _PRODUCTS,
    ),
    NotificationEvent.STAFF_CREATED: (
        "Staff Created",
        "{staff_name} ({role}) was added",
        NORMAL,
        _STAFF,
    ),
    NotificationEvent.STAFF_UPDATED: (
        "Staff Updated",
        "{staff_name} was updated",
        NORMAL,
        _STAFF,
    ),
    NotificationEvent.STAFF_DELETED: (
        "Staff Deleted",
        "{staff_name} was removed",
        NORMAL,
        _STAFF,
    ),
}

_PLACEHOLDER_DEFAULTS = {"delivery_partner": "delivery partner", "reason": "no reason given"}

# Entity ids forwarded into the push data block
_ID_KEYS = ("order_id", "product_id", "staff_id")


class _Blank(dict):
    def __missing__(self, key):
        return ""


def payload_for(event_type: NotificationEvent, data: dict) -> dict:
    """Build the push payload for ``event_type`` from event ``data``.

    Returns a dict with ``title``, ``body``, ``priority``, ``deep_link`` and a
    flat ``data`` block of strings for the device.
    """
    event_type = NotificationEvent(event_type)
    title, template, priority, deep_link = _PAYLOADS[event_type]

    values = _Blank(_PLACEHOLDER_DEFAULTS)
    values.update({key: value for key, value in data.items() if value not in (None, "")})

    if deep_link == _ASSIGNEE_ORDERS:
        deep_link = _MY_ORDERS if data.get("assigned_to_id") else _ORDERS

    device_data = {"type": event_type.value, "deep_link": deep_link}
    device_data.update({key: str(data[key]) for key in _ID_KEYS if data.get(key)})

    return {
        "title": title,
        "body": template.format_map(values),
        "priority": priority,
        "deep_link": deep_link,
        "data": device_data,
    }
