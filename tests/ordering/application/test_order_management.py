"""Tests for order queries and admin status changes."""

import pytest
from notifications.notification.notification import Notification, NotificationType
from ordering.checkout.checkout import CheckoutItem, place_order
from ordering.order.management import (
    change_order_status,
    get_customer_order,
    get_order,
    list_customer_orders,
    list_orders,
)
from ordering.order.order import OrderStatus
from shared.errors import InvalidTransition, NotFound, ValidationFailed


@pytest.fixture()
def order(database, customer, make_product):
    make_product("P1", stock=5)
    make_product("P2", stock=5)
    return place_order(database, customer, [CheckoutItem("P1", 2), CheckoutItem("P2", 1)])


class TestQueries:
    def test_get_order_by_code(self, session, order):
        assert get_order(session, order.code).id == order.id

    def test_unknown_code(self, session):
        with pytest.raises(NotFound):
            get_order(session, "999999")

    def test_customers_see_only_their_orders(self, session, order, customer, make_user):
        other = make_user("other@example.com")

        assert get_customer_order(session, customer.id, order.code).code == order.code
        with pytest.raises(NotFound):
            get_customer_order(session, other.id, order.code)

    def test_list_customer_orders_newest_first(self, database, session, order, customer):
        second = place_order(database, customer, [CheckoutItem("P1", 1)])
        assert [o.code for o in list_customer_orders(session, customer.id)] == [second.code, order.code]

    def test_list_orders_by_status(self, session, order):
        orders, total = list_orders(session, status="placed")
        assert total == 1
        assert orders[0].code == order.code

        assert list_orders(session, status="shipped") == ([], 0)

    def test_list_orders_unknown_status(self, session):
        with pytest.raises(ValidationFailed):
            list_orders(session, status="lost")


class TestChangeOrderStatus:
    def test_confirm(self, session, order):
        updated = change_order_status(session, order.code, OrderStatus.CONFIRMED)
        session.commit()
        assert updated.status == "confirmed"

    def test_invalid_transition(self, session, order):
        with pytest.raises(InvalidTransition):
            change_order_status(session, order.code, OrderStatus.DELIVERED)

    def test_cancelling_returns_stock(self, session, order, stock_of):
        assert (stock_of("P1"), stock_of("P2")) == (3, 4)

        change_order_status(session, order.code, OrderStatus.CANCELLED)
        session.commit()

        assert (stock_of("P1"), stock_of("P2")) == (5, 5)

    def test_customer_is_notified(self, session, order, customer):
        change_order_status(session, order.code, OrderStatus.CONFIRMED)
        session.commit()

        update = (
            session.query(Notification)
            .filter_by(notification_type=NotificationType.ORDER_STATUS_UPDATE.value)
            .one()
        )
        assert update.recipient == customer.email
        assert "confirmed" in update.subject.lower()

    def test_full_lifecycle(self, session, order):
        for status in (OrderStatus.CONFIRMED, OrderStatus.SHIPPED, OrderStatus.DELIVERED):
            change_order_status(session, order.code, status)
        session.commit()
        assert get_order(session, order.code).status == "delivered"
