"""FastAPI routes for the Distribution domain: orders, products and staff.

Every route resolves the actor from the request headers and checks the
role/action table before a command is processed. Executives are further
limited to orders they created or are assigned to.
"""

import json

from fastapi import APIRouter, Depends, HTTPException
from protean.utils.globals import current_domain

from distribution.access.actor import Actor
from distribution.access.policy import Action, Role
from distribution.api.dependencies import actor_fields, ensure_order_access, require
from distribution.api.schemas import (
    AdjustStockRequest,
    CancelOrderRequest,
    ChangeOrderStatusRequest,
    CreateOrderRequest,
    CreateProductRequest,
    CreateStaffRequest,
    DispatchOrderRequest,
    ImportProductsRequest,
    ImportResultResponse,
    OrderIdResponse,
    ProductIdResponse,
    PushTokenRequest,
    ReplaceOrderItemsRequest,
    StaffIdResponse,
    StatusResponse,
    StockResponse,
    UpdateOrderRequest,
    UpdateProductRequest,
    UpdateStaffRequest,
)
from distribution.directory.queries import customer_names, route_names
from distribution.order.cancellation import CancelOrder
from distribution.order.creation import CreateOrder
from distribution.order.dispatch import CompleteOrder, DispatchOrder
from distribution.order.modification import ReplaceOrderItems, UpdateOrderDetails
from distribution.order.order import Order
from distribution.order.queries import (
    dispatch_confirmation,
    order_detail,
    partial_details,
    stock_status,
    visible_orders,
)
from distribution.order.removal import DeleteOrder
from distribution.order.status import ChangeOrderStatus
from distribution.staff.management import (
    ClearPushToken,
    CreateStaff,
    DeleteStaff,
    RegisterPushToken,
    UpdateStaff,
)
from distribution.staff.staff import StaffMember
from distribution.stock.adjustment import AdjustStock
from distribution.stock.importing import ImportProducts
from distribution.stock.management import CreateProduct, DeleteProduct, UpdateProduct
from distribution.stock.product import Product
from distribution.stock.queries import brand_names

_LIST_LIMIT = 500


def _accessible_order(order_id: str, actor: Actor) -> Order:
    order = current_domain.repository_for(Order).get(order_id)
    ensure_order_access(actor, order)
    return order


def _order_response(order_id: str) -> dict:
    return order_detail(current_domain.repository_for(Order).get(order_id))


def _items_json(items) -> str:
    return json.dumps([item.model_dump(exclude_none=True) for item in items])


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("")
async def list_orders(actor: Actor = Depends(require(Action.VIEW_ORDERS))) -> list[dict]:
    return [order_detail(order) for order in visible_orders(actor)]


@order_router.get("/customers")
async def list_customer_names(actor: Actor = Depends(require(Action.VIEW_ORDERS))) -> list[str]:
    return customer_names()


@order_router.get("/routes")
async def list_route_names(actor: Actor = Depends(require(Action.VIEW_ORDERS))) -> list[str]:
    return route_names()


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def create_order(
    body: CreateOrderRequest, actor: Actor = Depends(require(Action.CREATE_ORDER))
) -> OrderIdResponse:
    command = CreateOrder(
        customer_name=body.customer_name,
        customer_phone=body.customer_phone,
        customer_address=body.customer_address,
        order_route=body.order_route,
        payment_condition=body.payment_condition,
        notes=body.notes,
        assigned_to=body.assigned_to,
        assigned_to_id=body.assigned_to_id,
        items=_items_json(body.items),
        scheduled_for=body.scheduled_for,
        **actor_fields(actor),
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.get("/{order_id}")
async def get_order(order_id: str, actor: Actor = Depends(require(Action.VIEW_ORDERS))) -> dict:
    return order_detail(_accessible_order(order_id, actor))


@order_router.put("/{order_id}")
async def update_order(
    order_id: str, body: UpdateOrderRequest, actor: Actor = Depends(require(Action.UPDATE_ORDER))
) -> dict:
    _accessible_order(order_id, actor)
    command = UpdateOrderDetails(order_id=order_id, **body.model_dump(exclude_none=True), **actor_fields(actor))
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/items")
async def replace_order_items(
    order_id: str, body: ReplaceOrderItemsRequest, actor: Actor = Depends(require(Action.UPDATE_ORDER))
) -> dict:
    _accessible_order(order_id, actor)
    command = ReplaceOrderItems(order_id=order_id, items=_items_json(body.items), **actor_fields(actor))
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@order_router.patch("/{order_id}/status")
async def change_order_status(
    order_id: str, body: ChangeOrderStatusRequest, actor: Actor = Depends(require(Action.CHANGE_ORDER_STATUS))
) -> dict:
    _accessible_order(order_id, actor)
    command = ChangeOrderStatus(
        order_id=order_id,
        new_status=body.new_status,
        delivery_partner=body.delivery_partner,
        dispatch_items=json.dumps(body.dispatch_items) if body.dispatch_items is not None else None,
        **actor_fields(actor),
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@order_router.post("/{order_id}/dispatch")
async def dispatch_order(
    order_id: str, body: DispatchOrderRequest, actor: Actor = Depends(require(Action.DISPATCH_ORDER))
) -> dict:
    delivered = None
    if body.delivered_items is not None:
        delivered = json.dumps([item.model_dump() for item in body.delivered_items])
    command = DispatchOrder(
        order_id=order_id,
        delivery_partner=body.delivery_partner,
        delivered_items=delivered,
        **actor_fields(actor),
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@order_router.post("/{order_id}/complete")
async def complete_order(order_id: str, actor: Actor = Depends(require(Action.COMPLETE_ORDER))) -> dict:
    current_domain.process(CompleteOrder(order_id=order_id, **actor_fields(actor)), asynchronous=False)
    return _order_response(order_id)


@order_router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: str, body: CancelOrderRequest, actor: Actor = Depends(require(Action.CANCEL_ORDER))
) -> dict:
    current_domain.process(CancelOrder(order_id=order_id, reason=body.reason, **actor_fields(actor)), asynchronous=False)
    return _order_response(order_id)


@order_router.delete("/{order_id}", response_model=StatusResponse)
async def delete_order(order_id: str, actor: Actor = Depends(require(Action.DELETE_ORDER))) -> StatusResponse:
    current_domain.process(DeleteOrder(order_id=order_id, **actor_fields(actor)), asynchronous=False)
    return StatusResponse(status="deleted")


@order_router.get("/{order_id}/stock-status")
async def get_stock_status(order_id: str, actor: Actor = Depends(require(Action.VIEW_ORDERS))) -> dict:
    _accessible_order(order_id, actor)
    return stock_status(order_id)


@order_router.get("/{order_id}/dispatch-confirmation")
async def get_dispatch_confirmation(order_id: str, actor: Actor = Depends(require(Action.DISPATCH_ORDER))) -> dict:
    return dispatch_confirmation(order_id)


@order_router.get("/{order_id}/partial-details")
async def get_partial_details(order_id: str, actor: Actor = Depends(require(Action.VIEW_ORDERS))) -> dict:
    _accessible_order(order_id, actor)
    return partial_details(order_id)


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


def _product_view(product: Product) -> dict:
    return {
        "product_id": str(product.id),
        "name": product.name,
        "brand_name": product.brand_name,
        "dimension": product.dimension,
        "stock_quantity": product.stock_quantity,
        "low_stock_threshold": product.low_stock_threshold,
        "stock_level": product.stock_level.value,
    }


@product_router.get("")
async def list_products(actor: Actor = Depends(require(Action.VIEW_PRODUCTS))) -> list[dict]:
    repo = current_domain.repository_for(Product)
    products = repo._dao.query.order_by("name").limit(_LIST_LIMIT).all().items
    return [_product_view(product) for product in products]


@product_router.get("/brands")
async def list_brand_names(actor: Actor = Depends(require(Action.VIEW_PRODUCTS))) -> list[str]:
    return brand_names()


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def create_product(
    body: CreateProductRequest, actor: Actor = Depends(require(Action.CREATE_PRODUCT))
) -> ProductIdResponse:
    command = CreateProduct(**body.model_dump(exclude_none=True), **actor_fields(actor))
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.post("/import", response_model=ImportResultResponse)
async def import_products(
    body: ImportProductsRequest, actor: Actor = Depends(require(Action.IMPORT_PRODUCTS))
) -> ImportResultResponse:
    result = current_domain.process(ImportProducts(csv_text=body.csv_text, **actor_fields(actor)), asynchronous=False)
    return ImportResultResponse(**result)


@product_router.get("/{product_id}")
async def get_product(product_id: str, actor: Actor = Depends(require(Action.VIEW_PRODUCTS))) -> dict:
    return _product_view(current_domain.repository_for(Product).get(product_id))


@product_router.put("/{product_id}")
async def update_product(
    product_id: str, body: UpdateProductRequest, actor: Actor = Depends(require(Action.UPDATE_PRODUCT))
) -> dict:
    command = UpdateProduct(product_id=product_id, **body.model_dump(exclude_none=True), **actor_fields(actor))
    current_domain.process(command, asynchronous=False)
    return _product_view(current_domain.repository_for(Product).get(product_id))


@product_router.post("/{product_id}/adjust", response_model=StockResponse)
async def adjust_stock(
    product_id: str, body: AdjustStockRequest, actor: Actor = Depends(require(Action.ADJUST_STOCK))
) -> StockResponse:
    command = AdjustStock(product_id=product_id, delta=body.delta, reason=body.reason, **actor_fields(actor))
    result = current_domain.process(command, asynchronous=False)
    return StockResponse(product_id=product_id, stock_quantity=result)


@product_router.delete("/{product_id}", response_model=StatusResponse)
async def delete_product(product_id: str, actor: Actor = Depends(require(Action.DELETE_PRODUCT))) -> StatusResponse:
    current_domain.process(DeleteProduct(product_id=product_id, **actor_fields(actor)), asynchronous=False)
    return StatusResponse(status="deleted")


# ---------------------------------------------------------------------------
# Staff Router
# ---------------------------------------------------------------------------
staff_router = APIRouter(prefix="/staff", tags=["staff"])


def _staff_view(member: StaffMember) -> dict:
    return {
        "staff_id": str(member.id),
        "name": member.name,
        "phone": member.phone,
        "role": member.role,
        "has_push_token": member.has_push_target,
    }


@staff_router.get("")
async def list_staff(actor: Actor = Depends(require(Action.VIEW_STAFF))) -> list[dict]:
    repo = current_domain.repository_for(StaffMember)
    members = repo._dao.query.order_by("name").limit(_LIST_LIMIT).all().items
    return [_staff_view(member) for member in members]


@staff_router.post("", status_code=201, response_model=StaffIdResponse)
async def create_staff(body: CreateStaffRequest, actor: Actor = Depends(require(Action.MANAGE_STAFF))) -> StaffIdResponse:
    command = CreateStaff(name=body.name, phone=body.phone, role=body.role, **actor_fields(actor))
    result = current_domain.process(command, asynchronous=False)
    return StaffIdResponse(staff_id=result)


@staff_router.put("/{staff_id}")
async def update_staff(
    staff_id: str, body: UpdateStaffRequest, actor: Actor = Depends(require(Action.MANAGE_STAFF))
) -> dict:
    command = UpdateStaff(staff_id=staff_id, **body.model_dump(exclude_none=True), **actor_fields(actor))
    current_domain.process(command, asynchronous=False)
    return _staff_view(current_domain.repository_for(StaffMember).get(staff_id))


@staff_router.delete("/{staff_id}", response_model=StatusResponse)
async def delete_staff(staff_id: str, actor: Actor = Depends(require(Action.MANAGE_STAFF))) -> StatusResponse:
    current_domain.process(DeleteStaff(staff_id=staff_id, **actor_fields(actor)), asynchronous=False)
    return StatusResponse(status="deleted")


def _ensure_own_record(staff_id: str, actor: Actor) -> None:
    if actor.id != staff_id and actor.role != Role.ADMIN.value:
        raise HTTPException(status_code=403, detail="You can only manage your own push token")


@staff_router.put("/{staff_id}/push-token", response_model=StatusResponse)
async def register_push_token(
    staff_id: str, body: PushTokenRequest, actor: Actor = Depends(require(Action.REGISTER_PUSH_TOKEN))
) -> StatusResponse:
    _ensure_own_record(staff_id, actor)
    current_domain.process(RegisterPushToken(staff_id=staff_id, push_token=body.push_token), asynchronous=False)
    return StatusResponse()


@staff_router.delete("/{staff_id}/push-token", response_model=StatusResponse)
async def clear_push_token(
    staff_id: str, actor: Actor = Depends(require(Action.REGISTER_PUSH_TOKEN))
) -> StatusResponse:
    _ensure_own_record(staff_id, actor)
    current_domain.process(ClearPushToken(staff_id=staff_id), asynchronous=False)
    return StatusResponse()
