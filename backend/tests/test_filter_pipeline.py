# Overview: Pytest coverage for the pure filter/sort pipeline (no database).

from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from stockroom.services.filter_pipeline import (
    FilterSpec,
    PriceRange,
    stock_level_of,
    visible,
)
from stockroom.validation import ValidationError


def _product(pid, name, **fields):
    row = {
        "id": pid,
        "name": name,
        "sku": f"SKU-{pid}",
        "description": None,
        "price": Decimal("10.00"),
        "stock_quantity": 10,
        "low_stock_threshold": 5,
        "category_id": None,
        "supplier_id": None,
        "created_at": datetime(2026, 1, 1, 9, pid),
    }
    row.update(fields)
    return row


def _ids(rows):
    return [r["id"] for r in rows]


@pytest.fixture
def catalog():
    return [
        _product(1, "Cola", price=Decimal("5"), stock_quantity=0),
        _product(2, "apple juice", price=Decimal("20"), stock_quantity=3),
        _product(3, "Banana Chips", price=Decimal("50"), stock_quantity=40),
        _product(4, "Chocolate Bar", price=Decimal("100"), stock_quantity=5, description="Dark cocoa"),
    ]


class TestStockLevel:
    @pytest.mark.parametrize("qty,threshold,expected", [
        (0, 5, "out"),
        (1, 5, "low"),
        (5, 5, "low"),
        (6, 5, "normal"),
        (0, 0, "out"),
        (1, 0, "normal"),
    ])
    def test_buckets(self, qty, threshold, expected):
        assert stock_level_of({"stock_quantity": qty, "low_stock_threshold": threshold}) == expected

    def test_attribute_objects(self):
        assert stock_level_of(SimpleNamespace(stock_quantity=2, low_stock_threshold=5)) == "low"


class TestFilters:
    def test_default_spec_keeps_everything_sorted_by_name(self, catalog):
        assert _ids(visible(catalog)) == [2, 3, 4, 1]

    def test_search_is_case_insensitive_across_name_sku_description(self, catalog):
        assert _ids(visible(catalog, FilterSpec(search="COLA"))) == [4, 1]
        assert _ids(visible(catalog, FilterSpec(search="sku-3"))) == [3]
        assert _ids(visible(catalog, FilterSpec(search="cocoa"))) == [4]
        assert _ids(visible(catalog, FilterSpec(search="ch"))) == [3, 4]

    def test_blank_search_matches_all(self, catalog):
        assert len(visible(catalog, FilterSpec(search="   "))) == 4

    def test_stock_level_filters(self, catalog):
        assert _ids(visible(catalog, FilterSpec(stock_level="out"))) == [1]
        assert _ids(visible(catalog, FilterSpec(stock_level="low"))) == [2, 4]
        assert _ids(visible(catalog, FilterSpec(stock_level="normal"))) == [3]

    def test_price_range_is_inclusive(self, catalog):
        spec = FilterSpec(price_range=PriceRange(min=Decimal("20"), max=Decimal("50")))
        assert _ids(visible(catalog, spec)) == [2, 3]

    def test_price_range_single_bound(self, catalog):
        assert _ids(visible(catalog, FilterSpec(price_range=PriceRange(min=50)))) == [3, 4]
        assert _ids(visible(catalog, FilterSpec(price_range=PriceRange(max="5")))) == [1]

    def test_inverted_price_range_matches_nothing(self, catalog):
        spec = FilterSpec(price_range=PriceRange(min=Decimal("50"), max=Decimal("20")))
        assert visible(catalog, spec) == []

    def test_category_and_supplier_match_by_id(self):
        rows = [
            _product(1, "A", category_id=7, supplier_id=1),
            _product(2, "B", category_id=8, supplier_id=1),
            _product(3, "C", category_id=7, supplier_id=2),
        ]
        assert _ids(visible(rows, FilterSpec(category=7))) == [1, 3]
        assert _ids(visible(rows, FilterSpec(category="7", supplier="2"))) == [3]

    def test_uncategorized_never_matches_specific_category(self):
        rows = [_product(1, "A"), _product(2, "B", category_id=3)]
        assert _ids(visible(rows, FilterSpec(category=3))) == [2]

    def test_combined_predicates(self, catalog):
        spec = FilterSpec(search="choc", stock_level="low", price_range=PriceRange(min=10))
        assert _ids(visible(catalog, spec)) == [4]


class TestSorting:
    def test_price_sort_both_directions(self, catalog):
        assert _ids(visible(catalog, FilterSpec(sort_by="price"))) == [1, 2, 3, 4]
        assert _ids(visible(catalog, FilterSpec(sort_by="price", sort_order="desc"))) == [4, 3, 2, 1]

    def test_low_stock_sorted_by_price_desc(self):
        rows = [
            _product(1, "A", price=Decimal("5"), stock_quantity=2),
            _product(2, "B", price=Decimal("20"), stock_quantity=40),
            _product(3, "C", price=Decimal("15"), stock_quantity=1),
        ]
        spec = FilterSpec(stock_level="low", sort_by="price", sort_order="desc")
        assert _ids(visible(rows, spec)) == [3, 1]

    def test_stock_sort(self, catalog):
        assert _ids(visible(catalog, FilterSpec(sort_by="stock"))) == [1, 2, 4, 3]

    def test_created_at_sort_accepts_iso_strings(self):
        rows = [
            _product(1, "A", created_at="2026-03-01T10:00:00Z"),
            _product(2, "B", created_at="2026-01-01T10:00:00Z"),
            _product(3, "C", created_at="2026-02-01T10:00:00+00:00"),
        ]
        assert _ids(visible(rows, FilterSpec(sort_by="created_at"))) == [2, 3, 1]
        assert _ids(visible(rows, FilterSpec(sort_by="created_at", sort_order="desc"))) == [1, 3, 2]

    def test_name_sort_ignores_case(self):
        rows = [_product(1, "beta"), _product(2, "Alpha"), _product(3, "gamma")]
        assert _ids(visible(rows)) == [2, 1, 3]

    def test_ties_keep_input_order_ascending(self):
        rows = [_product(pid, f"P{pid}", price=Decimal("9.99")) for pid in (5, 2, 9)]
        assert _ids(visible(rows, FilterSpec(sort_by="price"))) == [5, 2, 9]

    def test_ties_keep_input_order_descending(self):
        rows = [
            _product(5, "P5", price=Decimal("9.99")),
            _product(1, "P1", price=Decimal("20")),
            _product(2, "P2", price=Decimal("9.99")),
        ]
        assert _ids(visible(rows, FilterSpec(sort_by="price", sort_order="desc"))) == [1, 5, 2]

    def test_missing_price_sorts_lowest(self):
        rows = [_product(1, "A", price=Decimal("3")), _product(2, "B", price=None)]
        assert _ids(visible(rows, FilterSpec(sort_by="price"))) == [2, 1]


class TestPipelineProperties:
    def test_idempotent(self, catalog):
        spec = FilterSpec(search="c", sort_by="price", sort_order="desc")
        once = visible(catalog, spec)
        assert visible(once, spec) == once

    def test_result_is_subset_and_input_untouched(self, catalog):
        snapshot = [dict(p) for p in catalog]
        result = visible(catalog, FilterSpec(stock_level="low", sort_by="stock", sort_order="desc"))

        assert all(r in catalog for r in result)
        assert catalog == snapshot

    def test_empty_input(self):
        assert visible([], FilterSpec(search="anything")) == []


class TestFilterSpec:
    def test_default_has_no_active_filters(self):
        spec = FilterSpec.default()
        assert spec.active_filter_count() == 0
        assert (spec.sort_by, spec.sort_order) == ("name", "asc")

    def test_active_filter_count_ignores_sorting(self):
        spec = FilterSpec(
            search="x",
            category=1,
            supplier=2,
            stock_level="low",
            price_range=PriceRange(max=10),
            sort_by="price",
            sort_order="desc",
        )
        assert spec.active_filter_count() == 5
        assert FilterSpec(sort_by="stock").active_filter_count() == 0

    def test_with_changes_and_reset(self):
        spec = FilterSpec.default().with_changes(search="cola", stock_level="out")
        assert spec.active_filter_count() == 2
        assert spec.with_changes(search="") != FilterSpec.default()
        assert FilterSpec.default() == FilterSpec()

    @pytest.mark.parametrize("field,value", [
        ("stock_level", "empty"),
        ("sort_by", "sku"),
        ("sort_order", "up"),
    ])
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            FilterSpec(**{field: value})

    def test_from_args(self):
        spec = FilterSpec.from_args({
            "search": " cola ",
            "category": "3",
            "stock_level": "low",
            "min_price": "1.50",
            "max_price": "",
            "sort_by": "price",
            "sort_order": "desc",
        })

        assert spec.search == "cola"
        assert spec.category == "3"
        assert spec.supplier == "all"
        assert spec.stock_level == "low"
        assert spec.price_range == PriceRange(min=Decimal("1.50"))
        assert (spec.sort_by, spec.sort_order) == ("price", "desc")
        assert spec.active_filter_count() == 4

    def test_from_args_empty_is_default(self):
        assert FilterSpec.from_args({}) == FilterSpec.default()

    def test_from_args_bad_price(self):
        with pytest.raises(ValidationError):
            FilterSpec.from_args({"min_price": "cheap"})

    @pytest.mark.parametrize("bounds", [
        {"min": "abc"},
        {"max": "ten"},
        {"min": True},
        {"max": "NaN"},
    ])
    def test_price_range_rejects_non_numeric_bounds(self, bounds):
        with pytest.raises(ValidationError):
            PriceRange(**bounds)

    def test_to_dict_renders_prices_as_strings(self):
        spec = FilterSpec(price_range=PriceRange(min=Decimal("2.50")))
        assert spec.to_dict()["price_range"] == {"min": "2.50", "max": None}
