"""Tests for checkout item normalisation."""

import pytest
from ordering.checkout.checkout import CheckoutItem, normalise_items
from shared.errors import ValidationFailed


class TestNormaliseItems:
    def test_sorted_by_product_id(self):
        items = normalise_items([CheckoutItem("P3", 1), CheckoutItem("P1", 2)])
        assert items == [CheckoutItem("P1", 2), CheckoutItem("P3", 1)]

    def test_duplicate_products_are_merged(self):
        items = normalise_items([CheckoutItem("P1", 2), CheckoutItem("P2", 1), CheckoutItem("P1", 3)])
        assert items == [CheckoutItem("P1", 5), CheckoutItem("P2", 1)]

    def test_empty_cart_is_rejected(self):
        with pytest.raises(ValidationFailed, match="Cart is empty"):
            normalise_items([])

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_quantity_must_be_positive(self, quantity):
        with pytest.raises(ValidationFailed) as exc_info:
            normalise_items([CheckoutItem("P1", quantity)])
        assert exc_info.value.extra == {"product_id": "P1"}

    def test_accepts_any_iterable(self):
        items = normalise_items(CheckoutItem(pid, 1) for pid in ("P2", "P1"))
        assert [item.product_id for item in items] == ["P1", "P2"]
