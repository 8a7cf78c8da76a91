# backend/stockroom/services/products_service.py
"""
Product listing for a store.

MULTI-TENANT: Products are always read for a single store_id.
Only active products are listed; soft-deleted rows stay in the database for
history but never show up here.
"""
from __future__ import annotations

from ..models import Product, Store
from ..errors import RecordNotFound
from ..extensions import db
from .filter_pipeline import FilterSpec, stock_level_of, visible
from .record_store import products


def require_store(store_id: int) -> Store:
    store = db.session.get(Store, store_id)
    if store is None:
        raise RecordNotFound(f"stores {store_id} not found")
    return store


def list_active_products(store_id: int) -> list[Product]:
    require_store(store_id)
    return products.find(store_id, Product.is_active.is_(True), order_by=(Product.name.asc(), Product.id.asc()))


def list_products(*, store_id: int, spec: FilterSpec | None = None) -> dict:
    """
    Filtered, sorted product listing.

    Returns:
        Dict with 'items' (each with its stock_level bucket), 'count',
        'total' (active products before filtering), 'active_filters' and
        the normalized 'filters'.
    """
    spec = spec or FilterSpec.default()
    universe = list_active_products(store_id)
    shown = visible(universe, spec)

    items = []
    for p in shown:
        row = p.to_dict()
        row["stock_level"] = stock_level_of(p)
        items.append(row)

    return {
        "items": items,
        "count": len(items),
        "total": len(universe),
        "active_filters": spec.active_filter_count(),
        "filters": spec.to_dict(),
    }
