# Overview: Pure filter/sort pipeline deriving the visible product list from a FilterSpec.

"""
Filter/Sort Pipeline

visible(products, spec) is a pure function of its inputs:
- no I/O, no mutation of the input sequence or its items
- deterministic: same snapshot + same spec -> same ordered result
- idempotent: visible(visible(p, s), s) == visible(p, s)

Predicates (all must pass):
1. search       case-insensitive substring of name OR sku OR description
2. category     skipped when "all", otherwise exact id match
3. supplier     skipped when "all", otherwise exact id match
4. stock_level  out: qty == 0 | low: 0 < qty <= threshold | normal: qty > threshold
5. price_range  price >= min (if set) AND price <= max (if set), inclusive

A range with min > max simply matches nothing.

Sorting is stable in both directions, so equal keys keep input order.

Products may be ORM rows or plain mappings with the same field names.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Mapping

from ..validation import ValidationError, coerce_decimal

ALL = "all"

STOCK_LEVELS = ("all", "low", "out", "normal")
SORT_KEYS = ("name", "price", "stock", "created_at")
SORT_ORDERS = ("asc", "desc")


def field_value(product: Any, name: str, default=None):
    if isinstance(product, Mapping):
        return product.get(name, default)
    return getattr(product, name, default)


def _to_decimal(value) -> Decimal | None:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class PriceRange:
    min: Decimal | None = None
    max: Decimal | None = None

    def __post_init__(self):
        if self.min is not None:
            object.__setattr__(self, "min", coerce_decimal(self.min, "min_price"))
        if self.max is not None:
            object.__setattr__(self, "max", coerce_decimal(self.max, "max_price"))

    @property
    def is_set(self) -> bool:
        return self.min is not None or self.max is not None

    def contains(self, price) -> bool:
        price = _to_decimal(price)
        if price is None:
            return not self.is_set
        if self.min is not None and price < self.min:
            return False
        if self.max is not None and price > self.max:
            return False
        return True


@dataclass(frozen=True)
class FilterSpec:
    search: str = ""
    category: Any = ALL
    supplier: Any = ALL
    stock_level: str = ALL
    price_range: PriceRange = field(default_factory=PriceRange)
    sort_by: str = "name"
    sort_order: str = "asc"

    def __post_init__(self):
        if self.stock_level not in STOCK_LEVELS:
            raise ValidationError(f"stock_level must be one of: {', '.join(STOCK_LEVELS)}")
        if self.sort_by not in SORT_KEYS:
            raise ValidationError(f"sort_by must be one of: {', '.join(SORT_KEYS)}")
        if self.sort_order not in SORT_ORDERS:
            raise ValidationError(f"sort_order must be one of: {', '.join(SORT_ORDERS)}")
        if self.price_range is None:
            object.__setattr__(self, "price_range", PriceRange())
        if self.search is None:
            object.__setattr__(self, "search", "")

    @classmethod
    def default(cls) -> "FilterSpec":
        """The reset state: no filters, sorted by name ascending."""
        return cls()

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "FilterSpec":
        """
        Build a spec from query-string style args.

        Recognized keys: search, category, supplier, stock_level, min_price,
        max_price, sort_by, sort_order. Blank values fall back to defaults.
        """
        def _arg(key: str, default=None):
            value = args.get(key)
            if value is None:
                return default
            value = str(value).strip()
            return value if value else default

        min_price = _arg("min_price")
        max_price = _arg("max_price")

        return cls(
            search=_arg("search", ""),
            category=_arg("category", ALL),
            supplier=_arg("supplier", ALL),
            stock_level=_arg("stock_level", ALL),
            price_range=PriceRange(
                min=coerce_decimal(min_price, "min_price") if min_price is not None else None,
                max=coerce_decimal(max_price, "max_price") if max_price is not None else None,
            ),
            sort_by=_arg("sort_by", "name"),
            sort_order=_arg("sort_order", "asc"),
        )

    def with_changes(self, **changes) -> "FilterSpec":
        return replace(self, **changes)

    def active_filter_count(self) -> int:
        """Number of active filter facets (sorting is not a filter)."""
        count = 0
        if self.search:
            count += 1
        if not _is_all(self.category):
            count += 1
        if not _is_all(self.supplier):
            count += 1
        if self.stock_level != ALL:
            count += 1
        if self.price_range.is_set:
            count += 1
        return count

    def to_dict(self) -> dict:
        return {
            "search": self.search,
            "category": self.category,
            "supplier": self.supplier,
            "stock_level": self.stock_level,
            "price_range": {
                "min": None if self.price_range.min is None else str(self.price_range.min),
                "max": None if self.price_range.max is None else str(self.price_range.max),
            },
            "sort_by": self.sort_by,
            "sort_order": self.sort_order,
        }


def _is_all(value) -> bool:
    return value is None or value == ALL


def _same_id(record_id, wanted) -> bool:
    # Ids are opaque: "7" from a query string matches 7 from the database
    return record_id is not None and str(record_id) == str(wanted)


def stock_level_of(product) -> str:
    """Classify a product into the out / low / normal bucket."""
    qty = field_value(product, "stock_quantity", 0) or 0
    threshold = field_value(product, "low_stock_threshold", 0) or 0
    if qty <= 0:
        return "out"
    if qty <= threshold:
        return "low"
    return "normal"


def _matches_search(product, needle: str) -> bool:
    for name in ("name", "sku", "description"):
        value = field_value(product, name)
        if value and needle in str(value).lower():
            return True
    return False


def matches(product, spec: FilterSpec) -> bool:
    needle = spec.search.strip().lower()
    if needle and not _matches_search(product, needle):
        return False
    if not _is_all(spec.category) and not _same_id(field_value(product, "category_id"), spec.category):
        return False
    if not _is_all(spec.supplier) and not _same_id(field_value(product, "supplier_id"), spec.supplier):
        return False
    if spec.stock_level != ALL and stock_level_of(product) != spec.stock_level:
        return False
    if spec.price_range.is_set and not spec.price_range.contains(field_value(product, "price")):
        return False
    return True


def _sort_key(sort_by: str):
    def _present(value):
        # Missing values sort lowest without comparing None to real values
        return (False, 0) if value is None else (True, value)

    if sort_by == "name":
        return lambda p: (field_value(p, "name") or "").lower()
    if sort_by == "price":
        return lambda p: _present(_to_decimal(field_value(p, "price")))
    if sort_by == "stock":
        return lambda p: field_value(p, "stock_quantity") or 0
    if sort_by == "created_at":
        def _created(p):
            value = field_value(p, "created_at")
            if isinstance(value, str):
                value = datetime.fromisoformat(value.replace("Z", "+00:00"))
            if isinstance(value, datetime) and value.tzinfo is not None:
                value = value.astimezone(timezone.utc).replace(tzinfo=None)
            return _present(value)
        return _created
    raise ValidationError(f"sort_by must be one of: {', '.join(SORT_KEYS)}")


def visible(products: Iterable, spec: FilterSpec | None = None) -> list:
    """Return the filtered, stably sorted products for spec."""
    if spec is None:
        spec = FilterSpec.default()

    kept = [p for p in products if matches(p, spec)]
    return sorted(kept, key=_sort_key(spec.sort_by), reverse=spec.sort_order == "desc")
