"""Pydantic request/response schemas for the Ordering API.

These are external contracts, separate from the SQLAlchemy models.
Money is serialised as decimal strings ("1250.00").
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str = Field(..., min_length=1, max_length=64)
    quantity: int = Field(default=1, ge=1)

    model_config = {"json_schema_extra": {"examples": [{"product_id": "P1", "quantity": 2}]}}


class UpdateCartQuantityRequest(BaseModel):
    quantity: int = Field(ge=1)


class CartLineResponse(BaseModel):
    model_config = {"from_attributes": True}

    product_id: str
    name: str
    brand: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    available: bool


class CartResponse(BaseModel):
    lines: list[CartLineResponse]
    item_count: int
    subtotal: Decimal
    currency: str
    checkout_ready: bool


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CheckoutItemSchema(BaseModel):
    # Quantity is range-checked by the checkout itself so the error names the product
    product_id: str = Field(..., min_length=1, max_length=64)
    quantity: int


class CheckoutRequest(BaseModel):
    items: list[CheckoutItemSchema] | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"items": [{"product_id": "P1", "quantity": 2}]},
                {},
            ]
        }
    }


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderLineResponse(BaseModel):
    model_config = {"from_attributes": True}

    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class OrderResponse(BaseModel):
    model_config = {"from_attributes": True}

    order_code: str = Field(validation_alias="code")
    status: str
    currency: str
    subtotal: Decimal
    discount_total: Decimal
    total: Decimal
    created_at: datetime
    lines: list[OrderLineResponse]


class CheckoutResponse(OrderResponse):
    message: str = "Order placed"


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    total: int


class ChangeOrderStatusRequest(BaseModel):
    status: str = Field(..., examples=["confirmed", "shipped", "delivered", "cancelled"])
