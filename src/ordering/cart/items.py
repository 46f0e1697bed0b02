"""Cart item management: add, change quantity, remove, clear."""

import structlog
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from catalogue.product.browsing import get_product
from ordering.cart.cart import CartItem
from shared.errors import NotFound, ValidationFailed

logger = structlog.get_logger(__name__)

MAX_LINE_QUANTITY = 99


def _check_quantity(quantity: int) -> None:
    if quantity <= 0:
        raise ValidationFailed("Quantity must be greater than zero")
    if quantity > MAX_LINE_QUANTITY:
        raise ValidationFailed(f"Quantity cannot exceed {MAX_LINE_QUANTITY}")


def _find_item(session: Session, user_id: str, product_id: str) -> CartItem | None:
    return session.scalar(select(CartItem).where(CartItem.user_id == user_id, CartItem.product_id == product_id))


def add_to_cart(session: Session, user_id: str, product_id: str, quantity: int = 1) -> CartItem:
    """Add a product; adding one already in the cart merges the quantities."""
    _check_quantity(quantity)
    get_product(session, product_id)

    item = _find_item(session, user_id, product_id)
    if item is None:
        item = CartItem(user_id=user_id, product_id=product_id, quantity=quantity)
        session.add(item)
    else:
        _check_quantity(item.quantity + quantity)
        item.quantity += quantity

    session.flush()
    logger.info("cart_item_added", user_id=user_id, product_id=product_id, quantity=item.quantity)
    return item


def update_cart_item(session: Session, user_id: str, product_id: str, quantity: int) -> CartItem:
    _check_quantity(quantity)
    item = _find_item(session, user_id, product_id)
    if item is None:
        raise NotFound(f"Product {product_id} is not in the cart")
    item.quantity = quantity
    session.flush()
    return item


def remove_from_cart(session: Session, user_id: str, product_id: str) -> None:
    result = session.execute(delete(CartItem).where(CartItem.user_id == user_id, CartItem.product_id == product_id))
    if result.rowcount == 0:
        raise NotFound(f"Product {product_id} is not in the cart")


def clear_cart(session: Session, user_id: str, product_ids: list[str] | None = None) -> int:
    """Remove all of the user's cart rows, or only those for ``product_ids``."""
    statement = delete(CartItem).where(CartItem.user_id == user_id)
    if product_ids is not None:
        statement = statement.where(CartItem.product_id.in_(product_ids))
    return session.execute(statement).rowcount
