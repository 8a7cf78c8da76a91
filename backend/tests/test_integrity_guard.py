# Overview: Pytest coverage for category/supplier removal guards.

import pytest

from stockroom.errors import ConstraintViolation, RecordNotFound
from stockroom.extensions import db
from stockroom.models import Category, Product, Supplier
from stockroom.services.integrity_guard import (
    can_remove_category,
    can_remove_supplier,
    remove_category,
    remove_supplier,
)
from stockroom.signals import category_removed, supplier_removed


class TestCategoryRemoval:
    def test_blocked_by_active_products(self, store_a, category, make_product):
        make_product(category_id=category.id)
        make_product(category_id=category.id)
        make_product(category_id=category.id)
        category_id = category.id

        check = can_remove_category(category_id, store_id=store_a.id)
        assert check.allowed is False
        assert check.blocking_count == 3

        with pytest.raises(ConstraintViolation) as excinfo:
            remove_category(category_id, store_id=store_a.id)

        assert excinfo.value.blocking_count == 3
        assert "3 active products" in str(excinfo.value)
        assert db.session.get(Category, category_id) is not None

    def test_single_blocker_message(self, store_a, category, make_product):
        make_product(category_id=category.id)

        with pytest.raises(ConstraintViolation) as excinfo:
            remove_category(category.id, store_id=store_a.id)

        assert "1 active product." in str(excinfo.value)

    def test_inactive_products_do_not_block(self, store_a, category, make_product):
        make_product(category_id=category.id, is_active=False)
        category_id = category.id

        assert can_remove_category(category_id, store_id=store_a.id).allowed is True
        assert can_remove_category(category_id, store_id=store_a.id).blocking_count == 0

    def test_hard_delete_clears_inactive_references(self, store_a, category, make_product):
        retired = make_product(category_id=category.id, is_active=False)
        category_id = category.id
        retired_id = retired.id

        check = remove_category(category_id, store_id=store_a.id)

        assert check.allowed is True
        db.session.expire_all()
        assert db.session.get(Category, category_id) is None
        assert db.session.get(Product, retired_id).category_id is None

    def test_unblocked_after_reassigning_products(self, store_a, category, make_product):
        product = make_product(category_id=category.id)
        category_id = category.id
        assert can_remove_category(category_id, store_id=store_a.id).allowed is False

        product.category_id = None
        db.session.commit()

        remove_category(category_id, store_id=store_a.id)
        assert db.session.get(Category, category_id) is None

    def test_missing_category(self, store_a, db_session):
        with pytest.raises(RecordNotFound):
            can_remove_category(999, store_id=store_a.id)
        with pytest.raises(RecordNotFound):
            remove_category(999, store_id=store_a.id)

    def test_other_store_category_not_found(self, store_a, store_b, category):
        with pytest.raises(RecordNotFound):
            remove_category(category.id, store_id=store_b.id)
        assert db.session.get(Category, category.id) is not None

    def test_removal_signal(self, app, store_a, category):
        received = []
        category_id = category.id

        def _receiver(sender, category_id, store_id):
            received.append((category_id, store_id))

        with category_removed.connected_to(_receiver):
            remove_category(category_id, store_id=store_a.id)

        assert received == [(category_id, store_a.id)]


class TestSupplierRemoval:
    def test_blocked_by_active_products(self, store_a, supplier, make_product):
        make_product(supplier_id=supplier.id)
        make_product(supplier_id=supplier.id, is_active=False)

        check = can_remove_supplier(supplier.id, store_id=store_a.id)
        assert (check.allowed, check.blocking_count) == (False, 1)

        with pytest.raises(ConstraintViolation) as excinfo:
            remove_supplier(supplier.id, store_id=store_a.id)
        assert excinfo.value.blocking_count == 1

        db.session.expire_all()
        assert db.session.get(Supplier, supplier.id).is_active is True

    def test_soft_delete_keeps_row_and_references(self, store_a, supplier, make_product):
        retired = make_product(supplier_id=supplier.id, is_active=False)
        supplier_id = supplier.id

        remove_supplier(supplier_id, store_id=store_a.id)

        db.session.expire_all()
        row = db.session.get(Supplier, supplier_id)
        assert row is not None
        assert row.is_active is False
        assert db.session.get(Product, retired.id).supplier_id == supplier_id

    def test_missing_supplier(self, store_a, db_session):
        with pytest.raises(RecordNotFound):
            remove_supplier(999, store_id=store_a.id)

    def test_other_store_supplier_not_found(self, store_a, store_b, supplier):
        with pytest.raises(RecordNotFound):
            can_remove_supplier(supplier.id, store_id=store_b.id)
        with pytest.raises(RecordNotFound):
            remove_supplier(supplier.id, store_id=store_b.id)

        db.session.expire_all()
        assert db.session.get(Supplier, supplier.id).is_active is True

    def test_removal_signal(self, app, store_a, supplier):
        received = []

        def _receiver(sender, supplier_id, store_id):
            received.append(supplier_id)

        with supplier_removed.connected_to(_receiver):
            remove_supplier(supplier.id, store_id=store_a.id)

        assert received == [supplier.id]


def test_category_delete_succeeds_after_deactivating_blockers(store_a, category, make_product):
    first = make_product(category_id=category.id)
    second = make_product(category_id=category.id)
    category_id = category.id

    with pytest.raises(ConstraintViolation) as excinfo:
        remove_category(category_id, store_id=store_a.id)
    assert excinfo.value.blocking_count == 2

    first.is_active = False
    second.is_active = False
    db.session.commit()

    check = remove_category(category_id, store_id=store_a.id)

    assert (check.allowed, check.blocking_count) == (True, 0)
    assert db.session.get(Category, category_id) is None
