# Overview: Flask API routes guarding category and supplier removal.

# backend/stockroom/routes/catalog.py
"""
Category and supplier removal routes.

MULTI-TENANT: Every request names its store via ?store_id=. An entity that
belongs to another store is reported as not found.

Removal is refused with 409 while active products reference the entity;
the response carries blocking_count so the caller can explain why.
Categories are hard-deleted, suppliers are deactivated.
"""
from flask import Blueprint, request, current_app

from ..errors import ConstraintViolation, RecordNotFound
from ..services import integrity_guard

catalog_bp = Blueprint("catalog", __name__, url_prefix="/api")


@catalog_bp.get("/categories/<int:category_id>/removal-check")
def category_removal_check(category_id: int):
    store_id = request.args.get("store_id", type=int)
    if store_id is None:
        return {"error": "store_id is required"}, 400

    try:
        check = integrity_guard.can_remove_category(category_id, store_id=store_id)
    except RecordNotFound:
        return {"error": "Category not found"}, 404
    except Exception:
        current_app.logger.exception("Failed to check category removal")
        return {"error": "Failed to check category removal"}, 500
    return check.to_dict()


@catalog_bp.delete("/categories/<int:category_id>")
def delete_category(category_id: int):
    store_id = request.args.get("store_id", type=int)
    if store_id is None:
        return {"error": "store_id is required"}, 400

    try:
        integrity_guard.remove_category(category_id, store_id=store_id)
    except RecordNotFound:
        return {"error": "Category not found"}, 404
    except ConstraintViolation as e:
        return {"error": str(e), "blocking_count": e.blocking_count}, 409
    except Exception:
        current_app.logger.exception("Failed to delete category")
        return {"error": "Failed to delete category"}, 500
    return {"ok": True}


@catalog_bp.get("/suppliers/<int:supplier_id>/removal-check")
def supplier_removal_check(supplier_id: int):
    store_id = request.args.get("store_id", type=int)
    if store_id is None:
        return {"error": "store_id is required"}, 400

    try:
        check = integrity_guard.can_remove_supplier(supplier_id, store_id=store_id)
    except RecordNotFound:
        return {"error": "Supplier not found"}, 404
    except Exception:
        current_app.logger.exception("Failed to check supplier removal")
        return {"error": "Failed to check supplier removal"}, 500
    return check.to_dict()


@catalog_bp.delete("/suppliers/<int:supplier_id>")
def delete_supplier(supplier_id: int):
    store_id = request.args.get("store_id", type=int)
    if store_id is None:
        return {"error": "store_id is required"}, 400

    try:
        integrity_guard.remove_supplier(supplier_id, store_id=store_id)
    except RecordNotFound:
        return {"error": "Supplier not found"}, 404
    except ConstraintViolation as e:
        return {"error": str(e), "blocking_count": e.blocking_count}, 409
    except Exception:
        current_app.logger.exception("Failed to delete supplier")
        return {"error": "Failed to delete supplier"}, 500
    return {"ok": True}
