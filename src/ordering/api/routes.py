"""FastAPI routes for the Ordering domain — cart, checkout and orders."""

from fastapi import APIRouter, Query, Request

from identity.api.dependencies import AdminUser, CurrentUser, DbSession
from ordering.api.schemas import (
    AddToCartRequest,
    CartLineResponse,
    CartResponse,
    ChangeOrderStatusRequest,
    CheckoutRequest,
    CheckoutResponse,
    OrderListResponse,
    OrderResponse,
    UpdateCartQuantityRequest,
)
from ordering.cart.cart import CartView, list_cart
from ordering.cart.items import add_to_cart, clear_cart, remove_from_cart, update_cart_item
from ordering.checkout.checkout import CheckoutItem, checkout_cart, place_order
from ordering.order.management import (
    change_order_status,
    get_customer_order,
    list_customer_orders,
    list_orders,
)
from ordering.order.order import OrderStatus
from shared.errors import ValidationFailed


def _cart_response(view: CartView) -> CartResponse:
    return CartResponse(
        lines=[CartLineResponse.model_validate(line) for line in view.lines],
        item_count=view.item_count,
        subtotal=view.subtotal,
        currency=view.currency,
        checkout_ready=view.checkout_ready,
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
def get_cart(user: CurrentUser, request: Request, db: DbSession) -> CartResponse:
    return _cart_response(list_cart(db, user.id, currency=request.app.state.settings.currency))


@cart_router.post("/items", status_code=201, response_model=CartResponse)
def add_cart_item(body: AddToCartRequest, user: CurrentUser, request: Request, db: DbSession) -> CartResponse:
    add_to_cart(db, user.id, body.product_id, body.quantity)
    db.commit()
    return _cart_response(list_cart(db, user.id, currency=request.app.state.settings.currency))


@cart_router.put("/items/{product_id}", response_model=CartResponse)
def update_cart_item_quantity(
    product_id: str, body: UpdateCartQuantityRequest, user: CurrentUser, request: Request, db: DbSession
) -> CartResponse:
    update_cart_item(db, user.id, product_id, body.quantity)
    db.commit()
    return _cart_response(list_cart(db, user.id, currency=request.app.state.settings.currency))


@cart_router.delete("/items/{product_id}", response_model=CartResponse)
def remove_cart_item(product_id: str, user: CurrentUser, request: Request, db: DbSession) -> CartResponse:
    remove_from_cart(db, user.id, product_id)
    db.commit()
    return _cart_response(list_cart(db, user.id, currency=request.app.state.settings.currency))


@cart_router.delete("", response_model=CartResponse)
def empty_cart(user: CurrentUser, request: Request, db: DbSession) -> CartResponse:
    clear_cart(db, user.id)
    db.commit()
    return _cart_response(list_cart(db, user.id, currency=request.app.state.settings.currency))


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("", status_code=201, response_model=CheckoutResponse)
def checkout(user: CurrentUser, request: Request, body: CheckoutRequest | None = None) -> CheckoutResponse:
    """Place an order.

    With ``items`` in the body those exact quantities are bought; without
    them the stored cart is checked out and emptied of what was bought.
    """
    database = request.app.state.database
    currency = request.app.state.settings.currency

    if body is not None and body.items is not None:
        items = [CheckoutItem(item.product_id, item.quantity) for item in body.items]
        order = place_order(database, user, items, currency=currency)
    else:
        order = checkout_cart(database, user, currency=currency)

    return CheckoutResponse.model_validate(order).model_copy(
        update={"message": f"Thank you. Your order #{order.code} has been placed."}
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=OrderListResponse)
def my_orders(user: CurrentUser, db: DbSession) -> OrderListResponse:
    orders = list_customer_orders(db, user.id)
    return OrderListResponse(items=[OrderResponse.model_validate(o) for o in orders], total=len(orders))


@order_router.get("/{code}", response_model=OrderResponse)
def my_order(code: str, user: CurrentUser, db: DbSession) -> OrderResponse:
    return OrderResponse.model_validate(get_customer_order(db, user.id, code))


# ---------------------------------------------------------------------------
# Admin Order Router
# ---------------------------------------------------------------------------
admin_order_router = APIRouter(prefix="/admin/orders", tags=["admin"])


@admin_order_router.get("", response_model=OrderListResponse)
def all_orders(
    admin: AdminUser,
    db: DbSession,
    status: str | None = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> OrderListResponse:
    orders, total = list_orders(db, status=status, limit=limit, offset=offset)
    return OrderListResponse(items=[OrderResponse.model_validate(o) for o in orders], total=total)


@admin_order_router.put("/{code}/status", response_model=OrderResponse)
def update_order_status(code: str, body: ChangeOrderStatusRequest, admin: AdminUser, db: DbSession) -> OrderResponse:
    try:
        target = OrderStatus(body.status.lower())
    except ValueError as exc:
        raise ValidationFailed(f"Unknown order status: {body.status}") from exc

    order = change_order_status(db, code, target)
    db.commit()
    return OrderResponse.model_validate(order)
