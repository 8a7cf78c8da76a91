# Overview: Record store adapter; per-entity get/find/insert/update/delete over the SQL session.

"""
Record Store Adapter

The inventory services never touch db.session queries directly for the
entities they mutate; they go through a RecordStore so the contract stays
small:

- get(id)                       -> record, or RecordNotFound
- find(store_id, *criteria)     -> list of records
- count(store_id, *criteria)    -> int
- insert(record)                -> record, or ConstraintViolation
- update(id, fields, expected)  -> record, or ConstraintViolation / ConcurrentModification
- soft_delete(id) / hard_delete(id)

Adapters flush but never commit. The calling service owns the transaction
boundary (commit on success, rollback on failure).

Conditional writes: update(..., expected={"stock_quantity": 7}) issues
UPDATE ... WHERE id = :id AND stock_quantity = 7. When no row matches the
record has changed since it was read and ConcurrentModification is raised.
"""

from __future__ import annotations

from sqlalchemy import func, update as sa_update
from sqlalchemy.exc import IntegrityError

from ..errors import ConcurrentModification, ConstraintViolation, RecordNotFound
from ..extensions import db
from ..models import Category, Product, StockAdjustment, Supplier


class RecordStore:
    def __init__(self, model):
        self.model = model

    @property
    def name(self) -> str:
        return self.model.__tablename__

    def get(self, record_id: int, *, store_id: int | None = None):
        # populate_existing: always reflect the row as it is now, not a cached copy
        record = db.session.get(self.model, record_id, populate_existing=True)
        if record is None:
            raise RecordNotFound(f"{self.name} {record_id} not found")
        if store_id is not None and record.store_id != store_id:
            raise RecordNotFound(f"{self.name} {record_id} not found")
        return record

    def _query(self, store_id: int, *criteria):
        return db.session.query(self.model).filter(self.model.store_id == store_id, *criteria)

    def find(self, store_id: int, *criteria, order_by=None, limit: int | None = None) -> list:
        q = self._query(store_id, *criteria)
        if order_by is not None:
            if not isinstance(order_by, (list, tuple)):
                order_by = (order_by,)
            q = q.order_by(*order_by)
        else:
            q = q.order_by(self.model.id.asc())
        if limit is not None:
            q = q.limit(limit)
        return q.all()

    def count(self, store_id: int, *criteria) -> int:
        q = db.session.query(func.count(self.model.id)).filter(
            self.model.store_id == store_id, *criteria
        )
        return int(q.scalar() or 0)

    def insert(self, record):
        db.session.add(record)
        try:
            db.session.flush()
        except IntegrityError as exc:
            db.session.rollback()
            raise ConstraintViolation(f"{self.name} insert rejected: {exc.orig}") from exc
        return record

    def update(self, record_id: int, fields: dict, expected: dict | None = None):
        stmt = sa_update(self.model).where(self.model.id == record_id)
        values = dict(fields)

        if expected:
            for column, value in expected.items():
                stmt = stmt.where(getattr(self.model, column) == value)
            if hasattr(self.model, "version_id"):
                values["version_id"] = self.model.version_id + 1

        try:
            result = db.session.execute(
                stmt.values(**values).execution_options(synchronize_session=False)
            )
        except IntegrityError as exc:
            db.session.rollback()
            raise ConstraintViolation(f"{self.name} update rejected: {exc.orig}") from exc

        if result.rowcount == 0:
            exists = db.session.query(self.model.id).filter(self.model.id == record_id).first()
            if exists is None:
                raise RecordNotFound(f"{self.name} {record_id} not found")
            raise ConcurrentModification(
                f"{self.name} {record_id} changed since it was read (expected {expected})"
            )

        return self.get(record_id)

    def soft_delete(self, record_id: int) -> None:
        self.update(record_id, {"is_active": False})

    def hard_delete(self, record_id: int) -> None:
        record = self.get(record_id)
        db.session.delete(record)
        try:
            db.session.flush()
        except IntegrityError as exc:
            db.session.rollback()
            raise ConstraintViolation(f"{self.name} delete rejected: {exc.orig}") from exc


products = RecordStore(Product)
categories = RecordStore(Category)
suppliers = RecordStore(Supplier)
stock_adjustments = RecordStore(StockAdjustment)
