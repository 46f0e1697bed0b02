"""Shared BDD fixtures and step definitions for the Ordering context."""

import pytest
from ordering.checkout.checkout import CheckoutItem, place_order
from ordering.order.order import Order
from pytest_bdd import given, parsers, then


@pytest.fixture()
def outcome():
    """What a When step produced: the order(s) placed and any error raised."""
    return {"orders": [], "error": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a signed-in customer", target_fixture="shopper")
def _(customer):
    return customer


@given(parsers.cfparse('product "{product_id}" has {stock:d} units in stock'))
def _(make_product, product_id, stock):
    make_product(product_id, stock=stock)


@given(parsers.cfparse('an order already uses code "{code}"'))
def _(database, shopper, code):
    place_order(database, shopper, [CheckoutItem("P1", 1)], code_generator=lambda: code)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('product "{product_id}" has {stock:d} units in stock'))
def _(stock_of, product_id, stock):
    assert stock_of(product_id) == stock


@then("no order is placed")
def _(database):
    with database.session() as s:
        assert s.query(Order).count() == 0


@then(parsers.cfparse("exactly {count:d} order is placed"))
def _(database, outcome, count):
    assert len(outcome["orders"]) == count
    with database.session() as s:
        assert s.query(Order).count() == count
