"""Checkout — converts a cart into a persisted order.

Everything a checkout writes happens in one transaction: the stock
decrements, the order and its lines, the confirmation notification and the
removal of the purchased cart rows. Any failure rolls all of it back.

Stock is taken with a conditional UPDATE (``stock >= quantity`` in the WHERE
clause) instead of read-then-write, so when two checkouts race for the last
unit the database lets exactly one of them through. Products are decremented
in id order so multi-item checkouts lock rows in the same order.

Order codes are random; a collision surfaces as a unique-constraint
violation, and the whole transaction is retried with a fresh code.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from decimal import Decimal

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from catalogue.product.product import Product
from identity.user.user import User
from notifications.notification.notification import NotificationType, enqueue_notification
from ordering.cart.cart import cart_items
from ordering.cart.items import clear_cart as remove_cart_rows
from ordering.order.code import generate_order_code
from ordering.order.order import Order, OrderLine, OrderStatus
from shared.db import Database, utcnow
from shared.errors import InsufficientInventory, OrderPersistenceFailed, ProductUnavailable, ValidationFailed

logger = structlog.get_logger(__name__)

MAX_CODE_ATTEMPTS = 5


@dataclass(frozen=True)
class CheckoutItem:
    product_id: str
    quantity: int


def normalise_items(items: Iterable[CheckoutItem]) -> list[CheckoutItem]:
    """Merge duplicate products and sort by product id.

    Raises ``ValidationFailed`` for an empty cart or a non-positive quantity.
    """
    merged: dict[str, int] = {}
    for item in items:
        if item.quantity <= 0:
            raise ValidationFailed(
                f"Quantity for product {item.product_id} must be greater than zero",
                product_id=item.product_id,
            )
        merged[item.product_id] = merged.get(item.product_id, 0) + item.quantity

    if not merged:
        raise ValidationFailed("Cart is empty")
    return [CheckoutItem(product_id, quantity) for product_id, quantity in sorted(merged.items())]


def _take_stock(session: Session, item: CheckoutItem) -> bool:
    result = session.execute(
        update(Product)
        .where(
            Product.id == item.product_id,
            Product.is_active.is_(True),
            Product.stock >= item.quantity,
        )
        .values(stock=Product.stock - item.quantity, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _confirmation_context(order: Order) -> dict:
    return {
        "order_code": order.code,
        "currency": order.currency,
        "total": str(order.total),
        "lines": [
            {
                "product_id": line.product_id,
                "product_name": line.product_name,
                "quantity": line.quantity,
                "unit_price": str(line.unit_price),
            }
            for line in order.lines
        ],
    }


def _place(
    session: Session,
    customer: User,
    items: list[CheckoutItem],
    *,
    code: str,
    currency: str,
    clear_cart: bool,
) -> Order:
    product_ids = [item.product_id for item in items]
    products = {p.id: p for p in session.scalars(select(Product).where(Product.id.in_(product_ids)))}

    for item in items:
        product = products.get(item.product_id)
        if product is None or not product.is_active:
            raise ProductUnavailable(item.product_id)
    for item in items:
        available = products[item.product_id].stock
        if available < item.quantity:
            raise InsufficientInventory(item.product_id, item.quantity, available)

    for item in items:
        if not _take_stock(session, item):
            # Someone else took the stock between the read above and now
            raise InsufficientInventory(item.product_id, item.quantity)

    lines = []
    subtotal = Decimal("0.00")
    for item in items:
        product = products[item.product_id]
        unit_price = product.unit_price
        subtotal += Decimal(product.price) * item.quantity
        lines.append(
            OrderLine(
                product_id=product.id,
                product_name=product.name,
                quantity=item.quantity,
                unit_price=unit_price,
                line_total=unit_price * item.quantity,
            )
        )
    total = sum((line.line_total for line in lines), Decimal("0.00"))

    order = Order(
        code=code,
        user_id=customer.id,
        status=OrderStatus.PLACED.value,
        currency=currency,
        subtotal=subtotal,
        discount_total=subtotal - total,
        total=total,
        lines=lines,
    )
    session.add(order)
    session.flush()

    if clear_cart:
        remove_cart_rows(session, customer.id, product_ids)
    enqueue_notification(session, NotificationType.ORDER_CONFIRMATION, customer.email, _confirmation_context(order))
    return order


def _code_taken(database: Database, code: str) -> bool:
    with database.session() as session:
        return session.scalar(select(Order.id).where(Order.code == code)) is not None


def place_order(
    database: Database,
    customer: User,
    items: Iterable[CheckoutItem],
    *,
    currency: str = "USD",
    clear_cart: bool = False,
    code_generator: Callable[[], str] = generate_order_code,
    max_attempts: int = MAX_CODE_ATTEMPTS,
) -> Order:
    """Validate stock, take it, and persist an order: all or nothing.

    Raises:
        ValidationFailed: empty cart or a quantity that is not positive.
        ProductUnavailable: a product id that is unknown or archived.
        InsufficientInventory: a product without enough stock.
        OrderPersistenceFailed: the order could not be written.
    """
    items = normalise_items(items)

    for attempt in range(1, max_attempts + 1):
        code = code_generator()
        try:
            with database.transaction() as session:
                order = _place(session, customer, items, code=code, currency=currency, clear_cart=clear_cart)
        except IntegrityError as exc:
            if _code_taken(database, code):
                logger.warning("order_code_collision", order_code=code, attempt=attempt)
                continue
            logger.error("order_persistence_failed", user_id=customer.id, exc_info=exc)
            raise OrderPersistenceFailed() from exc
        except SQLAlchemyError as exc:
            logger.error("order_persistence_failed", user_id=customer.id, exc_info=exc)
            raise OrderPersistenceFailed() from exc

        logger.info(
            "order_placed",
            order_code=order.code,
            user_id=customer.id,
            items=len(order.lines),
            total=str(order.total),
        )
        return order

    logger.error("order_code_attempts_exhausted", user_id=customer.id, attempts=max_attempts)
    raise OrderPersistenceFailed()


def checkout_cart(database: Database, customer: User, *, currency: str = "USD") -> Order:
    """Place an order for everything in the customer's stored cart."""
    with database.session() as session:
        items = [CheckoutItem(item.product_id, item.quantity) for item in cart_items(session, customer.id)]
    return place_order(database, customer, items, currency=currency, clear_cart=True)
