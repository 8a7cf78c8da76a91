# Overview: Flask API routes for stock adjustments; parses input and returns JSON responses.

# backend/stockroom/routes/inventory.py
"""
Stock adjustment routes.

- POST /api/inventory/adjust        single product
- POST /api/inventory/bulk-adjust   several products, all-or-nothing
- GET  /api/inventory/<id>/history  adjustment history, newest first

Status codes:
- 400 invalid payload, zero delta, unknown type, negative result
- 404 product missing / inactive / other store
- 409 bulk rejection or unresolved concurrent modification
"""
from flask import Blueprint, request, current_app

from ..errors import (
    BulkAdjustmentRejected,
    ConcurrentModification,
    ConstraintViolation,
    InvalidAdjustment,
    NegativeStockRejected,
    RecordNotFound,
)
from ..models import StockAdjustment
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    coerce_int,
    enforce_rules_stock_adjustment,
    validate_payload,
)

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")

STOCK_ADJUST_POLICY = ModelValidationPolicy(
    writable_fields={"store_id", "product_id", "quantity_change", "adjustment_type", "reason", "user_id"},
    required_on_create={"store_id", "product_id", "quantity_change", "adjustment_type"},
)

BULK_ADJUST_POLICY = ModelValidationPolicy(
    writable_fields={"store_id", "quantity_change", "adjustment_type", "reason", "user_id"},
    required_on_create={"store_id", "quantity_change", "adjustment_type"},
)


def _parse_product_ids(raw) -> list[int]:
    if not isinstance(raw, list) or not raw:
        raise ValidationError("product_ids must be a non-empty list")
    return [coerce_int(v, "product_ids") for v in raw]


@inventory_bp.post("/adjust")
def adjust_stock_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(
            model=StockAdjustment,
            payload=payload,
            policy=STOCK_ADJUST_POLICY,
            partial=False,
        )
        enforce_rules_stock_adjustment(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    from ..services.stock_ledger import apply_adjustment

    try:
        result = apply_adjustment(
            store_id=patch["store_id"],
            product_id=patch["product_id"],
            quantity_change=patch["quantity_change"],
            adjustment_type=patch["adjustment_type"],
            reason=patch.get("reason"),
            user_id=patch.get("user_id"),
        )
    except (InvalidAdjustment, NegativeStockRejected) as e:
        return {"error": str(e)}, 400
    except RecordNotFound:
        return {"error": "Product not found"}, 404
    except (ConcurrentModification, ConstraintViolation) as e:
        return {"error": str(e)}, 409
    except Exception:
        current_app.logger.exception("Failed to adjust stock")
        return {"error": "Failed to adjust stock"}, 500

    return result.to_dict(), 201


@inventory_bp.post("/bulk-adjust")
def bulk_adjust_stock_route():
    payload = request.get_json(silent=True) or {}

    try:
        if not isinstance(payload, dict):
            raise ValidationError("Invalid JSON payload")
        payload = dict(payload)
        product_ids = _parse_product_ids(payload.pop("product_ids", None))
        patch = validate_payload(
            model=StockAdjustment,
            payload=payload,
            policy=BULK_ADJUST_POLICY,
            partial=False,
        )
        enforce_rules_stock_adjustment(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    from ..services.stock_ledger import apply_bulk_adjustment

    try:
        result = apply_bulk_adjustment(
            store_id=patch["store_id"],
            product_ids=product_ids,
            quantity_change=patch["quantity_change"],
            adjustment_type=patch["adjustment_type"],
            reason=patch.get("reason"),
            user_id=patch.get("user_id"),
        )
    except InvalidAdjustment as e:
        return {"error": str(e)}, 400
    except RecordNotFound:
        return {"error": "Product not found"}, 404
    except BulkAdjustmentRejected as e:
        return {"error": str(e), "rejected": e.rejected_ids}, 409
    except (ConcurrentModification, ConstraintViolation) as e:
        return {"error": str(e)}, 409
    except Exception:
        current_app.logger.exception("Failed to bulk adjust stock")
        return {"error": "Failed to bulk adjust stock"}, 500

    return result.to_dict(), 201


@inventory_bp.get("/<int:product_id>/history")
def stock_history_route(product_id: int):
    store_id = request.args.get("store_id", type=int)
    if store_id is None:
        return {"error": "store_id is required"}, 400
    limit = request.args.get("limit", default=200, type=int)

    from ..services.stock_ledger import list_adjustments

    try:
        rows = list_adjustments(store_id=store_id, product_id=product_id, limit=limit)
    except RecordNotFound:
        return {"error": "Product not found"}, 404

    return {"items": [r.to_dict() for r in rows], "count": len(rows)}
