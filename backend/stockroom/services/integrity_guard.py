# Overview: Referential-integrity checks guarding category and supplier removal.

"""
Integrity Guard

A Category or Supplier that is referenced by at least one ACTIVE product
cannot be removed. Inactive (soft-deleted) products do not block.

DELETE SEMANTICS (intentionally asymmetric):
- Category removal is a hard delete. Inactive products that still point at
  the category have their category_id cleared in the same transaction.
- Supplier removal is a soft delete (is_active=False); suppliers can be
  reactivated by editing, so product references are left untouched.

Orphaned products are never reassigned here; moving them to another
category is the caller's job.
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..errors import ConstraintViolation
from ..extensions import db
from ..models import Product
from ..signals import category_removed, supplier_removed
from .record_store import categories, products, suppliers


@dataclass(frozen=True)
class RemovalCheck:
    allowed: bool
    blocking_count: int

    def to_dict(self) -> dict:
        return {"allowed": self.allowed, "blocking_count": self.blocking_count}


def _check(store_id: int, column, entity_id: int) -> RemovalCheck:
    blocking = products.count(
        store_id,
        column == entity_id,
        Product.is_active.is_(True),
    )
    return RemovalCheck(allowed=blocking == 0, blocking_count=blocking)


def can_remove_category(category_id: int, *, store_id: int) -> RemovalCheck:
    category = categories.get(category_id, store_id=store_id)
    return _check(category.store_id, Product.category_id, category.id)


def can_remove_supplier(supplier_id: int, *, store_id: int) -> RemovalCheck:
    supplier = suppliers.get(supplier_id, store_id=store_id)
    return _check(supplier.store_id, Product.supplier_id, supplier.id)


def _blocked(kind: str, entity_id: int, check: RemovalCheck) -> ConstraintViolation:
    plural = "s" if check.blocking_count != 1 else ""
    return ConstraintViolation(
        f"Cannot delete {kind} {entity_id}. It's currently assigned to "
        f"{check.blocking_count} active product{plural}.",
        blocking_count=check.blocking_count,
    )


def remove_category(category_id: int, *, store_id: int) -> RemovalCheck:
    """
    Hard-delete a category if no active product references it.

    Raises:
        RecordNotFound: category missing or in another store
        ConstraintViolation: blocking_count active products reference it
    """
    category = categories.get(category_id, store_id=store_id)
    check = _check(category.store_id, Product.category_id, category.id)
    if not check.allowed:
        raise _blocked("category", category_id, check)

    # Only inactive products can still point here
    for product in products.find(category.store_id, Product.category_id == category.id):
        products.update(product.id, {"category_id": None})

    cat_store_id = category.store_id
    categories.hard_delete(category.id)
    db.session.commit()

    current_app.logger.info("Category %s removed from store %s", category_id, cat_store_id)
    category_removed.send(
        current_app._get_current_object(), category_id=category_id, store_id=cat_store_id
    )
    return check


def remove_supplier(supplier_id: int, *, store_id: int) -> RemovalCheck:
    """
    Soft-delete a supplier (is_active=False) if no active product references it.

    Raises:
        RecordNotFound: supplier missing or in another store
        ConstraintViolation: blocking_count active products reference it
    """
    supplier = suppliers.get(supplier_id, store_id=store_id)
    check = _check(supplier.store_id, Product.supplier_id, supplier.id)
    if not check.allowed:
        raise _blocked("supplier", supplier_id, check)

    sup_store_id = supplier.store_id
    suppliers.soft_delete(supplier.id)
    db.session.commit()

    current_app.logger.info("Supplier %s deactivated in store %s", supplier_id, sup_store_id)
    supplier_removed.send(
        current_app._get_current_object(), supplier_id=supplier_id, store_id=sup_store_id
    )
    return check
