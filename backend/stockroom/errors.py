# Overview: Caller-visible error taxonomy for the inventory core.

"""
All of these are recoverable conditions. Services raise them; the HTTP layer
translates them to status codes (see routes). None of them is retried except
ConcurrentModification, and only inside run_with_retry.
"""

from __future__ import annotations


class StockroomError(Exception):
    """Base class for inventory core errors."""


class RecordNotFound(StockroomError):
    """Raised when a record does not exist (or is outside the caller's store)."""


class InvalidAdjustment(StockroomError):
    """Raised for malformed adjustments (zero delta, unknown type, empty batch)."""


class NegativeStockRejected(StockroomError):
    """Raised when a single-product adjustment would make stock negative."""

    def __init__(self, product_id: int, current: int, delta: int):
        self.product_id = product_id
        self.current = current
        self.delta = delta
        super().__init__(
            f"adjustment of {delta} would make stock negative for product {product_id} "
            f"(current {current})"
        )


class BulkAdjustmentRejected(StockroomError):
    """Raised when any member of a bulk adjustment would go negative. Nothing is written."""

    def __init__(self, rejected_ids: list[int]):
        self.rejected_ids = list(rejected_ids)
        super().__init__(
            "bulk adjustment rejected; products would have negative stock: "
            + ", ".join(str(pid) for pid in self.rejected_ids)
        )


class ConcurrentModification(StockroomError):
    """Raised when a conditional write found the row changed underneath it."""


class ConstraintViolation(StockroomError):
    """Raised when a delete is blocked by dependent records or a DB constraint fails."""

    def __init__(self, message: str, blocking_count: int = 0):
        self.blocking_count = blocking_count
        super().__init__(message)


class SelectionBusy(StockroomError):
    """Raised when a selection commit is attempted while another is in flight."""
