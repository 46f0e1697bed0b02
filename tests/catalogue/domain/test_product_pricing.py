"""Tests for Product pricing, text normalisation and field validation."""

from decimal import Decimal

import pytest
from catalogue.product.product import Gender, Product, discounted_price, single_line


class TestDiscountedPrice:
    def test_no_discount_keeps_list_price(self):
        assert discounted_price(Decimal("4200.00"), 0) == Decimal("4200.00")

    def test_percentage_is_taken_off(self):
        assert discounted_price(Decimal("3150.00"), 15) == Decimal("2677.50")

    def test_rounds_half_up_to_cents(self):
        # 0.125 rounds up, not to even
        assert discounted_price(Decimal("0.25"), 50) == Decimal("0.13")

    def test_accepts_string_amounts(self):
        assert discounted_price("100", 10) == Decimal("90.00")


class TestSingleLine:
    def test_strips_newlines(self):
        assert single_line("Pure cashmere,\nhorn buttons") == "Pure cashmere, horn buttons"

    def test_collapses_whitespace_runs(self):
        assert single_line("  90 cm \t silk\r\n\r\ntwill  ") == "90 cm silk twill"

    def test_none_passes_through(self):
        assert single_line(None) is None


class TestProductFields:
    def test_description_is_kept_on_one_line(self):
        product = Product(name="Coat", brand="Valmont", price=Decimal("10"), description="Line one\nLine two")
        assert product.description == "Line one Line two"

    def test_categories_are_lowercased_and_deduplicated(self):
        product = Product(name="Bag", brand="Arlette", price=Decimal("10"), categories=["Bags", "leather", "BAGS", " "])
        assert product.categories == ["bags", "leather"]

    def test_gender_must_be_known(self):
        with pytest.raises(ValueError):
            Product(name="Bag", brand="Arlette", price=Decimal("10"), gender="kids")

    def test_gender_accepts_enum_values(self):
        product = Product(name="Bag", brand="Arlette", price=Decimal("10"), gender=Gender.WOMEN.value)
        assert product.gender == "women"

    def test_unit_price_applies_discount(self):
        product = Product(name="Pumps", brand="Valmont", price=Decimal("890.00"), discount_percent=20)
        assert product.unit_price == Decimal("712.00")

    def test_in_stock(self):
        assert Product(name="A", brand="B", price=Decimal("1"), stock=1).in_stock is True
        assert Product(name="A", brand="B", price=Decimal("1"), stock=0).in_stock is False
