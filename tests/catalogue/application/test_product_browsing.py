"""Tests for catalogue browsing queries and facets."""

from decimal import Decimal

import pytest
from catalogue.product.browsing import catalogue_facets, get_product, list_products
from catalogue.product.lifecycle import archive_product
from shared.errors import NotFound, ValidationFailed


@pytest.fixture()
def catalogue(make_product):
    make_product("P1", name="Quilted Shoulder Bag", brand="Maison Arlette", gender="women",
                 categories=["bags", "leather"], price="4200.00", stock=5)
    make_product("P2", name="Cashmere Coat", brand="Valmont", gender="men",
                 categories=["outerwear"], price="3150.00", discount_percent=15, stock=8)
    make_product("P3", name="Silk Carré", brand="Maison Arlette", gender="unisex",
                 categories=["accessories", "silk"], price="495.00", stock=0)
    make_product("P4", name="Slingback Pumps", brand="Valmont", gender="women",
                 categories=["shoes", "leather"], price="890.00", stock=12,
                 description="Patent leather, 85 mm heel")


def _ids(page):
    return sorted(p.id for p in page.items)


class TestListProducts:
    def test_lists_all_active_products(self, session, catalogue):
        page = list_products(session)
        assert page.total == 4
        assert _ids(page) == ["P1", "P2", "P3", "P4"]

    def test_archived_products_are_hidden(self, database, session, catalogue):
        with database.transaction() as s:
            archive_product(s, "P2")

        assert _ids(list_products(session)) == ["P1", "P3", "P4"]

    def test_filter_by_gender(self, session, catalogue):
        assert _ids(list_products(session, gender="women")) == ["P1", "P4"]

    def test_filter_by_category_tag(self, session, catalogue):
        assert _ids(list_products(session, category="leather")) == ["P1", "P4"]

    def test_category_filter_matches_whole_tags(self, session, catalogue):
        assert _ids(list_products(session, category="silk")) == ["P3"]
        assert list_products(session, category="sil").total == 0

    def test_category_filter_matches_accented_tags(self, session, make_product):
        make_product("P9", categories=["Élégance", "soie"])
        assert _ids(list_products(session, category="élégance")) == ["P9"]

    def test_category_wildcards_are_literal(self, session, catalogue, make_product):
        make_product("P9", categories=["100%_silk"])
        assert list_products(session, category="%").total == 0
        assert list_products(session, category="s_lk").total == 0
        assert _ids(list_products(session, category="100%_silk")) == ["P9"]

    def test_filter_by_brand_ignores_case(self, session, catalogue):
        assert _ids(list_products(session, brand="valmont")) == ["P2", "P4"]

    def test_search_matches_name_brand_and_description(self, session, catalogue):
        assert _ids(list_products(session, search="coat")) == ["P2"]
        assert _ids(list_products(session, search="arlette")) == ["P1", "P3"]
        assert _ids(list_products(session, search="85 mm")) == ["P4"]

    def test_price_bounds_use_list_price(self, session, catalogue):
        # P2 lists at 3150.00 and sells at 2677.50
        assert _ids(list_products(session, min_price=Decimal("3000"), max_price=Decimal("4000"))) == ["P2"]

    def test_in_stock_filter(self, session, catalogue):
        assert _ids(list_products(session, in_stock=True)) == ["P1", "P2", "P4"]
        assert _ids(list_products(session, in_stock=False)) == ["P3"]

    def test_sort_by_price(self, session, catalogue):
        ascending = [p.id for p in list_products(session, sort="price_asc").items]
        assert ascending == ["P3", "P4", "P2", "P1"]

        descending = [p.id for p in list_products(session, sort="price_desc").items]
        assert descending == ["P1", "P2", "P4", "P3"]

    def test_unknown_sort_is_rejected(self, session, catalogue):
        with pytest.raises(ValidationFailed):
            list_products(session, sort="popularity")

    def test_pagination_reports_full_total(self, session, catalogue):
        page = list_products(session, sort="name", limit=2, offset=2)
        assert page.total == 4
        assert [p.id for p in page.items] == ["P3", "P4"]
        assert (page.limit, page.offset) == (2, 2)


class TestGetProduct:
    def test_returns_active_product(self, session, catalogue):
        assert get_product(session, "P1").name == "Quilted Shoulder Bag"

    def test_unknown_product(self, session, catalogue):
        with pytest.raises(NotFound):
            get_product(session, "nope")

    def test_archived_product_is_not_found_unless_asked(self, database, session, catalogue):
        with database.transaction() as s:
            archive_product(s, "P1")

        with pytest.raises(NotFound):
            get_product(session, "P1")
        assert get_product(session, "P1", include_inactive=True).is_active is False


class TestFacets:
    def test_facets_cover_active_products(self, session, catalogue):
        facets = catalogue_facets(session)
        assert facets.brands == ["Maison Arlette", "Valmont"]
        assert facets.categories == ["accessories", "bags", "leather", "outerwear", "shoes", "silk"]
        assert facets.genders == ["men", "unisex", "women"]

    def test_facets_on_empty_catalogue(self, session):
        facets = catalogue_facets(session)
        assert facets.brands == []
        assert facets.categories == []
