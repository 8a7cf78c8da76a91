# Overview: Selection/bulk coordinator; tracks selected products within the visible set.

"""
Selection Coordinator

States:
    EMPTY --toggle/select_all--> SELECTING --commit--> COMMITTING
    COMMITTING --success--> EMPTY (selection cleared)
    COMMITTING --failure--> SELECTING (selection kept)
    SELECTING --clear / select_all(False)--> EMPTY

The selection is always a subset of the last visible snapshot passed to
refresh()/select_all(). Changing filters and calling refresh() with the new
visible list narrows the selection to the intersection.

preview() is a render-time check against the snapshot. commit() does not
trust it: apply_bulk_adjustment re-validates every member against fresh
reads before writing.

Nothing here is persisted; a coordinator lives for one session.
"""

from __future__ import annotations

import enum

from ..errors import InvalidAdjustment, SelectionBusy
from ..validation import ValidationError
from .filter_pipeline import field_value
from .stock_ledger import BulkAdjustmentResult, apply_bulk_adjustment


class SelectionState(str, enum.Enum):
    EMPTY = "EMPTY"
    SELECTING = "SELECTING"
    COMMITTING = "COMMITTING"


class SelectionCoordinator:
    def __init__(self, store_id: int):
        self.store_id = store_id
        self._visible: dict = {}
        self._selected: dict = {}
        self._committing = False

    @property
    def state(self) -> SelectionState:
        if self._committing:
            return SelectionState.COMMITTING
        return SelectionState.SELECTING if self._selected else SelectionState.EMPTY

    @property
    def selected_ids(self) -> list:
        return list(self._selected)

    @property
    def selected_products(self) -> list:
        return [self._visible[pid] for pid in self._selected]

    def is_selected(self, product) -> bool:
        return field_value(product, "id") in self._selected

    def _ensure_idle(self) -> None:
        if self._committing:
            raise SelectionBusy("a bulk adjustment is in flight")

    def refresh(self, visible_products) -> None:
        """Replace the visible snapshot and drop selected ids no longer visible."""
        self._ensure_idle()
        self._visible = {field_value(p, "id"): p for p in visible_products}
        self._selected = {pid: None for pid in self._selected if pid in self._visible}

    def select_all(self, visible_products, checked: bool) -> None:
        self.refresh(visible_products)
        if checked:
            self._selected = {pid: None for pid in self._visible}
        else:
            self._selected = {}

    def toggle(self, product, checked: bool) -> None:
        self._ensure_idle()
        pid = field_value(product, "id")
        if checked:
            if pid not in self._visible:
                raise ValidationError(f"product {pid} is not in the visible set")
            self._selected.setdefault(pid, None)
        else:
            self._selected.pop(pid, None)

    def clear(self) -> None:
        self._ensure_idle()
        self._selected = {}

    def cancel(self) -> None:
        """Abandon a pending bulk adjustment. Valid only before commit starts."""
        self._ensure_idle()

    def preview(self, quantity_change: int) -> list[dict]:
        """Per-product current/new quantity for the selection, from the snapshot."""
        rows = []
        for product in self.selected_products:
            current = field_value(product, "stock_quantity", 0) or 0
            new = current + quantity_change
            rows.append({
                "product_id": field_value(product, "id"),
                "name": field_value(product, "name"),
                "current_quantity": current,
                "new_quantity": new,
                "would_go_negative": new < 0,
            })
        return rows

    def blocked_ids(self, quantity_change: int) -> list:
        return [row["product_id"] for row in self.preview(quantity_change) if row["would_go_negative"]]

    def can_commit(self, quantity_change: int) -> bool:
        return (
            not self._committing
            and bool(self._selected)
            and quantity_change != 0
            and not self.blocked_ids(quantity_change)
        )

    def commit(
        self,
        *,
        quantity_change: int,
        adjustment_type: str = "manual",
        reason: str | None = None,
        user_id: int | None = None,
    ) -> BulkAdjustmentResult:
        """
        Apply one bulk adjustment to the selection.

        Clears the selection on success. On any failure the selection is
        kept and the error propagates unchanged.
        """
        self._ensure_idle()
        if not self._selected:
            raise InvalidAdjustment("no products selected")

        self._committing = True
        try:
            result = apply_bulk_adjustment(
                store_id=self.store_id,
                product_ids=list(self._selected),
                quantity_change=quantity_change,
                adjustment_type=adjustment_type,
                reason=reason,
                user_id=user_id,
            )
        finally:
            self._committing = False

        self._selected = {}
        return result
