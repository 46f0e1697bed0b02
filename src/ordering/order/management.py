"""Order queries and admin status changes."""

import structlog
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from catalogue.product.stock import return_stock
from identity.user.user import User
from notifications.notification.notification import NotificationType, enqueue_notification
from ordering.order.order import Order, OrderStatus
from shared.errors import NotFound, ValidationFailed

logger = structlog.get_logger(__name__)


def get_order(session: Session, code: str) -> Order:
    order = session.scalar(select(Order).where(Order.code == code))
    if order is None:
        raise NotFound(f"Order {code} not found")
    return order


def get_customer_order(session: Session, user_id: str, code: str) -> Order:
    """Fetch one of the customer's own orders; other customers' orders look missing."""
    order = get_order(session, code)
    if order.user_id != user_id:
        raise NotFound(f"Order {code} not found")
    return order


def list_customer_orders(session: Session, user_id: str) -> list[Order]:
    return list(session.scalars(select(Order).where(Order.user_id == user_id).order_by(Order.created_at.desc(), Order.id.desc())))


def list_orders(
    session: Session, *, status: str | None = None, limit: int = 50, offset: int = 0
) -> tuple[list[Order], int]:
    conditions = []
    if status is not None:
        try:
            conditions.append(Order.status == OrderStatus(status).value)
        except ValueError as exc:
            raise ValidationFailed(f"Unknown order status: {status}") from exc

    total = session.scalar(select(func.count()).select_from(Order).where(*conditions)) or 0
    orders = session.scalars(
        select(Order).where(*conditions).order_by(Order.created_at.desc(), Order.id.desc()).limit(limit).offset(offset)
    ).all()
    return list(orders), total


def change_order_status(session: Session, code: str, target: OrderStatus) -> Order:
    """Move an order along its state machine.

    Cancelling puts every line's quantity back in stock. The customer is
    notified of every change. The caller commits.
    """
    order = get_order(session, code)
    previous = order.status
    order.transition_to(target)

    if target is OrderStatus.CANCELLED:
        quantities: dict[str, int] = {}
        for line in order.lines:
            quantities[line.product_id] = quantities.get(line.product_id, 0) + line.quantity
        return_stock(session, quantities)

    customer = session.get(User, order.user_id)
    if customer is not None:
        enqueue_notification(
            session,
            NotificationType.ORDER_STATUS_UPDATE,
            customer.email,
            {"order_code": order.code, "status": order.status},
        )

    session.flush()
    logger.info("order_status_changed", order_code=order.code, previous=previous, status=order.status)
    return order
