# Overview: Flask API routes for product listing; parses filter args and returns JSON responses.

# backend/stockroom/routes/products.py
"""
Product listing routes.

MULTI-TENANT: Every request names its store via ?store_id=.

Query params (all optional except store_id):
- search: substring of name / sku / description (case-insensitive)
- category, supplier: id or "all"
- stock_level: all | low | out | normal
- min_price, max_price: inclusive bounds
- sort_by: name | price | stock | created_at
- sort_order: asc | desc
"""
from flask import Blueprint, request, current_app

from ..errors import RecordNotFound
from ..services.filter_pipeline import FilterSpec
from ..services.products_service import list_products as list_products_service
from ..validation import ValidationError

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products():
    store_id = request.args.get("store_id", type=int)
    if store_id is None:
        return {"error": "store_id is required"}, 400

    try:
        spec = FilterSpec.from_args(request.args)
        return list_products_service(store_id=store_id, spec=spec)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except RecordNotFound:
        return {"error": "Store not found"}, 404
    except Exception:
        current_app.logger.exception("Failed to list products")
        return {"error": "Failed to list products"}, 500
