"""
Pytest fixtures for stockroom backend tests.

Provides an in-memory application, per-test table cleanup, tenant (store)
fixtures and a product factory.
"""

import itertools
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from stockroom import create_app
from stockroom.extensions import db
from stockroom.models import Store, Category, Supplier, Product


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'STOCK_ADJUST_MAX_ATTEMPTS': 3,
        'STOCK_ADJUST_BACKOFF_BASE': 0,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Fresh tables for each test."""
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    db.session.rollback()


@pytest.fixture(scope='function')
def store_a(db_session):
    store = Store(name="Store A", code="A1")
    db_session.add(store)
    db_session.commit()
    return store


@pytest.fixture(scope='function')
def store_b(db_session):
    store = Store(name="Store B", code="B1")
    db_session.add(store)
    db_session.commit()
    return store


@pytest.fixture(scope='function')
def category(db_session, store_a):
    cat = Category(store_id=store_a.id, name="Beverages")
    db_session.add(cat)
    db_session.commit()
    return cat


@pytest.fixture(scope='function')
def supplier(db_session, store_a):
    sup = Supplier(store_id=store_a.id, name="Acme Wholesale", is_active=True)
    db_session.add(sup)
    db_session.commit()
    return sup


@pytest.fixture(scope='function')
def make_product(db_session, store_a):
    """Factory: make_product(stock_quantity=3, ...) -> committed Product in store A."""
    counter = itertools.count(1)
    base_time = datetime(2026, 1, 1, 9, 0, 0)

    def _make(**overrides):
        n = next(counter)
        fields = {
            "store_id": store_a.id,
            "name": f"Product {n}",
            "sku": f"SKU-{n:03d}",
            "price": Decimal("10.00"),
            "stock_quantity": 10,
            "low_stock_threshold": 5,
            "is_active": True,
            "created_at": base_time + timedelta(minutes=n),
        }
        fields.update(overrides)
        product = Product(**fields)
        db_session.add(product)
        db_session.commit()
        return product

    return _make
