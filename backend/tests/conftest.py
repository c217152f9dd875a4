"""
Pytest fixtures for Tillbook backend tests.

Provides an in-memory database, the app's catalog store, terminal sessions
and small record factories.
"""

import pytest

from tillbook import create_app
from tillbook.extensions import db


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'REPORT_EXPORT_DIR': str(tmp_path_factory.mktemp("reports")),
        'SHOP_NAME': 'Family Cake',
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
    """Fresh tables and no open terminals for each test."""
    with app.app_context():
        app.extensions["tillbook"]["sessions"].close_all()

        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()
        app.extensions["tillbook"]["sessions"].close_all()


@pytest.fixture(scope='function')
def store(app, db_session):
    return app.extensions["tillbook"]["store"]


@pytest.fixture(scope='function')
def make_product(store):
    """Factory: create a product and return its record."""
    def _make(name="Butter Cake", stock=10, purchase_price=300, bulk_price=400,
              individual_price=500, category="sweets", supplier="Golden Flour Co."):
        product_id = store.create("products", {
            "name": name,
            "category": category,
            "supplier": supplier,
            "purchase_price": purchase_price,
            "bulk_price": bulk_price,
            "individual_price": individual_price,
            "stock": stock,
            "sales_count": 0,
        })
        return store.get("products", product_id)
    return _make


@pytest.fixture(scope='function')
def make_customer(store):
    def _make(name="Daw Mya", credit=0):
        customer_id = store.create("customers", {
            "name": name,
            "contact": "09-123456",
            "address": "Yangon",
            "credit": credit,
        })
        return store.get("customers", customer_id)
    return _make


@pytest.fixture(scope='function')
def terminal(app, db_session):
    """A cashier's terminal session (not privileged)."""
    return app.extensions["tillbook"]["sessions"].get_or_create("cashier-1", False)


@pytest.fixture(scope='function')
def admin_terminal(app, db_session):
    """An admin's terminal session."""
    return app.extensions["tillbook"]["sessions"].get_or_create("admin-1", True)


CASHIER_HEADERS = {"X-Operator-Id": "cashier-1"}
ADMIN_HEADERS = {"X-Operator-Id": "admin-1", "X-Operator-Privileged": "true"}


@pytest.fixture
def cashier_headers():
    return dict(CASHIER_HEADERS)


@pytest.fixture
def admin_headers():
    return dict(ADMIN_HEADERS)


@pytest.fixture
def no_backoff(monkeypatch):
    """Skip the retry sleeps in write guards."""
    monkeypatch.setattr("tillbook.services.concurrency.time.sleep", lambda seconds: None)
