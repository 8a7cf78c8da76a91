# Overview: Service-layer operations for stock adjustments; quantity writes paired with audit rows.

from __future__ import annotations

from dataclasses import dataclass, field

from flask import current_app

from ..errors import BulkAdjustmentRejected, InvalidAdjustment, NegativeStockRejected, RecordNotFound
from ..extensions import db
from ..models import ADJUSTMENT_TYPES, Product, StockAdjustment
from ..signals import stock_adjusted
from .concurrency import run_with_retry
from .record_store import products, stock_adjustments
"""
Stock Ledger Invariants (authoritative)

- Product.stock_quantity is never negative after a committed adjustment.
- Every committed quantity change has exactly one StockAdjustment row with
  new_quantity == previous_quantity + quantity_change.
- previous_quantity/new_quantity are the values seen by the precondition
  check, never a re-read taken after the write.
- The quantity write is conditional on the quantity that was checked
  (compare-and-swap). The audit row is inserted only after that write
  matched, and both commit together.
- A conflict restarts the whole read-check-write cycle (bounded by
  STOCK_ADJUST_MAX_ATTEMPTS); exhaustion surfaces ConcurrentModification.
- Bulk adjustments are all-or-nothing: every member is checked before the
  first write, and any conflict rolls back the entire batch.
"""


@dataclass(frozen=True)
class AdjustmentResult:
    product_id: int
    previous_quantity: int
    new_quantity: int
    adjustment: StockAdjustment

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "previous_quantity": self.previous_quantity,
            "new_quantity": self.new_quantity,
            "adjustment": self.adjustment.to_dict(),
        }


@dataclass(frozen=True)
class BulkAdjustmentResult:
    applied: list[AdjustmentResult]
    rejected: list[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "applied": [r.to_dict() for r in self.applied],
            "rejected": list(self.rejected),
        }


def _validate_adjustment(quantity_change, adjustment_type) -> None:
    if isinstance(quantity_change, bool) or not isinstance(quantity_change, int):
        raise InvalidAdjustment("quantity_change must be an integer")
    if quantity_change == 0:
        raise InvalidAdjustment("quantity_change cannot be zero")
    if adjustment_type not in ADJUSTMENT_TYPES:
        raise InvalidAdjustment(
            f"adjustment_type must be one of: {', '.join(ADJUSTMENT_TYPES)}"
        )


def _load_active_product(store_id: int, product_id: int) -> Product:
    product = products.get(product_id, store_id=store_id)
    if not product.is_active:
        raise RecordNotFound(f"products {product_id} is inactive")
    return product


def _write_adjustment(
    *,
    store_id: int,
    product_id: int,
    previous_quantity: int,
    quantity_change: int,
    adjustment_type: str,
    reason: str | None,
    user_id: int | None,
) -> AdjustmentResult:
    """Conditional quantity write followed by the audit insert. No commit."""
    new_quantity = previous_quantity + quantity_change

    products.update(
        product_id,
        {"stock_quantity": new_quantity},
        expected={"stock_quantity": previous_quantity},
    )

    adjustment = stock_adjustments.insert(
        StockAdjustment(
            product_id=product_id,
            store_id=store_id,
            user_id=user_id,
            adjustment_type=adjustment_type,
            quantity_change=quantity_change,
            previous_quantity=previous_quantity,
            new_quantity=new_quantity,
            reason=reason or None,
        )
    )
    return AdjustmentResult(
        product_id=product_id,
        previous_quantity=previous_quantity,
        new_quantity=new_quantity,
        adjustment=adjustment,
    )


def _emit(results: list[AdjustmentResult]) -> None:
    app = current_app._get_current_object()
    for result in results:
        stock_adjusted.send(app, adjustment=result.adjustment)


def apply_adjustment(
    *,
    store_id: int,
    product_id: int,
    quantity_change: int,
    adjustment_type: str = "manual",
    reason: str | None = None,
    user_id: int | None = None,
) -> AdjustmentResult:
    """
    Apply a signed quantity change to one product and record why.

    Raises:
        InvalidAdjustment: zero/non-integer delta or unknown adjustment_type
        RecordNotFound: product missing, inactive, or in another store
        NegativeStockRejected: stock_quantity + quantity_change < 0 (no writes)
        ConcurrentModification: conflicts persisted through every retry
    """
    _validate_adjustment(quantity_change, adjustment_type)

    def _op() -> AdjustmentResult:
        product = _load_active_product(store_id, product_id)
        previous = product.stock_quantity

        if previous + quantity_change < 0:
            raise NegativeStockRejected(product_id, previous, quantity_change)

        result = _write_adjustment(
            store_id=store_id,
            product_id=product_id,
            previous_quantity=previous,
            quantity_change=quantity_change,
            adjustment_type=adjustment_type,
            reason=reason,
            user_id=user_id,
        )
        db.session.commit()
        return result

    try:
        result = run_with_retry(_op)
    except NegativeStockRejected as exc:
        current_app.logger.info("Stock adjustment rejected: %s", exc)
        raise

    current_app.logger.info(
        "Stock adjusted product=%s %s: %d -> %d",
        product_id, adjustment_type, result.previous_quantity, result.new_quantity,
    )
    _emit([result])
    return result


def apply_bulk_adjustment(
    *,
    store_id: int,
    product_ids,
    quantity_change: int,
    adjustment_type: str = "manual",
    reason: str | None = None,
    user_id: int | None = None,
) -> BulkAdjustmentResult:
    """
    Apply the same signed change to several products as one business event.

    All-or-nothing: every product is checked against its own current
    quantity before anything is written. If any would go negative the batch
    is rejected with BulkAdjustmentRejected(rejected_ids) and nothing changes.
    On success each product gets its own StockAdjustment row.
    """
    _validate_adjustment(quantity_change, adjustment_type)

    # Collapse duplicates, keep first-seen order
    ids = list(dict.fromkeys(product_ids or []))
    if not ids:
        raise InvalidAdjustment("no products selected")

    def _op() -> BulkAdjustmentResult:
        snapshot = []
        for pid in ids:
            product = _load_active_product(store_id, pid)
            snapshot.append((pid, product.stock_quantity))

        rejected = [pid for pid, qty in snapshot if qty + quantity_change < 0]
        if rejected:
            raise BulkAdjustmentRejected(rejected)

        applied = [
            _write_adjustment(
                store_id=store_id,
                product_id=pid,
                previous_quantity=qty,
                quantity_change=quantity_change,
                adjustment_type=adjustment_type,
                reason=reason,
                user_id=user_id,
            )
            for pid, qty in snapshot
        ]
        db.session.commit()
        return BulkAdjustmentResult(applied=applied, rejected=[])

    try:
        result = run_with_retry(_op)
    except BulkAdjustmentRejected as exc:
        current_app.logger.info("Bulk stock adjustment rejected: %s", exc)
        raise

    current_app.logger.info(
        "Bulk stock adjustment %s of %d applied to %d products",
        adjustment_type, quantity_change, len(result.applied),
    )
    _emit(result.applied)
    return result


def list_adjustments(*, store_id: int, product_id: int, limit: int = 200) -> list[StockAdjustment]:
    """Adjustment history for one product, newest first."""
    products.get(product_id, store_id=store_id)

    return stock_adjustments.find(
        store_id,
        StockAdjustment.product_id == product_id,
        order_by=(StockAdjustment.created_at.desc(), StockAdjustment.id.desc()),
        limit=limit,
    )
