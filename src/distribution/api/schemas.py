"""Pydantic request/response schemas for the Distribution API.

These are external contracts, kept separate from the internal Protean
commands they are translated into.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class OrderItemSchema(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    price: float = Field(ge=0, default=0)
    product_name: str | None = None
    brand_name: str | None = None
    dimension: str | None = None


class DeliveredItemSchema(BaseModel):
    product_id: str
    delivered_qty: int
    is_delivered: bool = True


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    customer_name: str
    customer_phone: str | None = None
    customer_address: str | None = None
    order_route: str | None = None
    payment_condition: str | None = None
    notes: str | None = None
    assigned_to: str | None = None
    assigned_to_id: str | None = None
    items: list[OrderItemSchema] = Field(default_factory=list)
    scheduled_for: datetime | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_name": "Sharma Traders",
                    "customer_phone": "+91 98100 00000",
                    "order_route": "North Loop",
                    "assigned_to": "Ravi",
                    "assigned_to_id": "staff-001",
                    "items": [{"product_id": "prod-001", "quantity": 3, "price": 120.0}],
                }
            ]
        }
    }


class UpdateOrderRequest(BaseModel):
    customer_name: str | None = None
    customer_phone: str | None = None
    customer_address: str | None = None
    order_route: str | None = None
    payment_condition: str | None = None
    notes: str | None = None
    scheduled_for: datetime | None = None
    assigned_to: str | None = None
    assigned_to_id: str | None = None


class ReplaceOrderItemsRequest(BaseModel):
    items: list[OrderItemSchema]


class ChangeOrderStatusRequest(BaseModel):
    new_status: str
    delivery_partner: str | None = None
    dispatch_items: list[int] | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"new_status": "DC"},
                {"new_status": "Dispatched", "delivery_partner": "BlueDart", "dispatch_items": [0, 2]},
            ]
        }
    }


class DispatchOrderRequest(BaseModel):
    delivery_partner: str | None = None
    delivered_items: list[DeliveredItemSchema] | None = None


class CancelOrderRequest(BaseModel):
    reason: str | None = None


# ---------------------------------------------------------------------------
# Product Request Schemas
# ---------------------------------------------------------------------------
class CreateProductRequest(BaseModel):
    name: str
    brand_name: str | None = None
    dimension: str | None = None
    stock_quantity: int = Field(ge=0, default=0)
    low_stock_threshold: int = Field(ge=0, default=10)


class UpdateProductRequest(BaseModel):
    name: str | None = None
    brand_name: str | None = None
    dimension: str | None = None
    stock_quantity: int | None = Field(ge=0, default=None)
    low_stock_threshold: int | None = Field(ge=0, default=None)


class AdjustStockRequest(BaseModel):
    delta: int
    reason: str | None = None


class ImportProductsRequest(BaseModel):
    csv_text: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"csv_text": "name,brandName,dimension,stockQuantity,lowStockThreshold\nPVC Pipe,Supreme,1 inch,40,5"}
            ]
        }
    }


# ---------------------------------------------------------------------------
# Staff Request Schemas
# ---------------------------------------------------------------------------
class CreateStaffRequest(BaseModel):
    name: str
    phone: str | None = None
    role: str


class UpdateStaffRequest(BaseModel):
    name: str | None = None
    phone: str | None = None
    role: str | None = None


class PushTokenRequest(BaseModel):
    push_token: str


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    order_id: str


class ProductIdResponse(BaseModel):
    product_id: str


class StaffIdResponse(BaseModel):
    staff_id: str


class StockResponse(BaseModel):
    product_id: str
    stock_quantity: int


class ImportResultResponse(BaseModel):
    total_rows: int
    created: int
    updated: int
    errors: list[dict]
    warnings: list[dict]


class StatusResponse(BaseModel):
    status: str = "ok"
