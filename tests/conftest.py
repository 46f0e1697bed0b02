import os
from decimal import Decimal
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    ``app`` builds a module-level application on import, which reads the
    environment, so the environment is set before any test module loads.
    """
    os.environ["ENVIRONMENT"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        # Get the test file path relative to the tests directory
        test_path = Path(item.fspath)

        # Mark tests based on their directory
        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    """Full-strength PBKDF2 makes every registration take a noticeable time."""
    monkeypatch.setattr("identity.user.user.PBKDF2_ITERATIONS", 1_000)


@pytest.fixture()
def database_url(tmp_path):
    # A file database so separate connections (threads, sessions) share state
    return os.environ.get("TEST_DATABASE_URL") or f"sqlite:///{tmp_path / 'storefront.db'}"


@pytest.fixture()
def database(database_url):
    from shared.db import Database, drop_db, setup_db

    db = Database(database_url)
    drop_db(db)
    setup_db(db)

    yield db

    drop_db(db)
    db.dispose()


@pytest.fixture()
def session(database):
    with database.session() as s:
        yield s


@pytest.fixture()
def settings(database_url):
    from shared.config import Settings

    return Settings(
        environment="test",
        database_url=database_url,
        allowed_origins=("https://shop.example.com",),
        create_schema=False,
    )


@pytest.fixture()
def app(settings, database):
    from app import create_app

    return create_app(settings, database)


@pytest.fixture()
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_product(database):
    """Create a product in its own committed transaction."""
    from catalogue.product.creation import create_product

    def _make(product_id="P1", *, stock=5, price="1000.00", **overrides):
        values = {
            "name": f"Product {product_id}",
            "brand": "Maison Arlette",
            "gender": "unisex",
            "categories": ["accessories"],
            "discount_percent": 0,
        }
        values.update(overrides)
        with database.transaction() as s:
            return create_product(s, product_id=product_id, price=Decimal(price), stock=stock, **values)

    return _make


@pytest.fixture()
def make_user(database):
    """Register a user in its own committed transaction."""
    from identity.user.user import Role, register_user

    def _make(email="jane@example.com", *, name="Jane Doe", password="correct-horse", role=Role.USER):
        with database.transaction() as s:
            return register_user(s, email=email, name=name, password=password, role=role)

    return _make


@pytest.fixture()
def login(database):
    """Open a session for a user and return Bearer headers for it."""
    from datetime import timedelta

    from identity.user.session import open_session

    def _login(user):
        with database.transaction() as s:
            token = open_session(s, user, timedelta(hours=1))
        return {"Authorization": f"Bearer {token}"}

    return _login


@pytest.fixture()
def customer(make_user):
    return make_user("customer@example.com", name="Claire Dubois")


@pytest.fixture()
def admin(make_user):
    from identity.user.user import Role

    return make_user("admin@example.com", name="Store Admin", role=Role.ADMIN)


@pytest.fixture()
def customer_headers(customer, login):
    return login(customer)


@pytest.fixture()
def admin_headers(admin, login):
    return login(admin)


@pytest.fixture()
def stock_of(database):
    """Read a product's current stock from a fresh session."""
    from catalogue.product.product import Product

    def _stock_of(product_id):
        with database.session() as s:
            return s.get(Product, product_id).stock

    return _stock_of
