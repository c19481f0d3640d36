"""
Pytest fixtures for FoodBook backend tests.

Provides an in-memory database, two tenants, a product factory, and
bearer-token headers for every role.
"""

import pytest
from foodbook import create_app
from foodbook.extensions import db
from foodbook.models import Owner, Product
from foodbook.services.session_service import create_session
from foodbook.services.tenant_service import TenantContext


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
        'TAX_RATE_PERCENT': 18,
        'SMTP_HOST': None,
        'SMTP_USER': None,
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
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def owner_a(db_session):
    """Owner A (first tenant)."""
    owner = Owner(email="owner_a@cafe.com", company_name="Cafe A")
    db_session.add(owner)
    db_session.commit()
    return owner


@pytest.fixture(scope='function')
def owner_b(db_session):
    """Owner B (second tenant), no company name set."""
    owner = Owner(email="owner_b@diner.com")
    db_session.add(owner)
    db_session.commit()
    return owner


@pytest.fixture(scope='function')
def tenant_a(owner_a):
    return TenantContext.for_owner(owner_a)


@pytest.fixture(scope='function')
def tenant_b(owner_b):
    return TenantContext.for_owner(owner_b)


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: make_product(owner, name="Coke", price=40, stock=10)."""
    def _make(owner, name="Coke", price=40, stock=10, category="Beverage"):
        product = Product(owner_id=owner.id, name=name, price=price, stock=stock, category=category)
        db_session.add(product)
        db_session.commit()
        return product
    return _make


@pytest.fixture(scope='function')
def headers_for(db_session):
    """Factory: headers_for(owner, role="master") -> Authorization header dict."""
    def _headers(owner, role="master"):
        _, token = create_session(owner.id, role=role)
        return auth_headers(token)
    return _headers


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
