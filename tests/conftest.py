"""
Pytest configuration and fixtures for the decor inventory tests.

The app binds its engine when `decorops` is first imported, so the temporary
SQLite database and test settings are put in the environment here, before any
test module imports the package.
"""
import os
import tempfile

_DB_FD, _DB_PATH = tempfile.mkstemp(suffix=".db")
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_PATH}"
os.environ["RATELIMIT_ENABLED"] = "0"
os.environ["DECOROPS_JWT_SECRET"] = "test-jwt-secret-0123456789abcdef0123456789"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from sqlalchemy.orm import sessionmaker
from decorops.app import app
from decorops.auth import hash_password
from decorops.db import SessionLocal, engine, init_db, drop_db
from decorops.models import Tenant, Customer, InventoryItem

# Fixture data goes through its own sessions so it never touches the scoped
# session the code under test is using.
_Session = sessionmaker(bind=engine, future=True)


def pytest_sessionfinish(session, exitstatus):
    os.close(_DB_FD)
    if os.path.exists(_DB_PATH):
        os.unlink(_DB_PATH)


@pytest.fixture(autouse=True)
def fresh_db():
    """Every test starts from empty tables."""
    init_db()
    yield
    SessionLocal.remove()
    drop_db()


@pytest.fixture
def db():
    """
    A session for driving the service layer directly.

    Do not mix it with `client` requests in the same test: the request
    teardown removes the thread's scoped session.
    """
    s = SessionLocal()
    yield s
    s.close()


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


def _make_tenant(name, password):
    with _Session() as s:
        t = Tenant(name=name, password_hash=hash_password(password), token_salt="salt-" + name.lower())
        s.add(t)
        s.commit()
        return {"id": t.id, "name": t.name, "password": password}


@pytest.fixture
def tenant():
    """Tenant ACME, password acme-pass."""
    return _make_tenant("ACME", "acme-pass")


@pytest.fixture
def other_tenant():
    return _make_tenant("RIVAL", "rival-pass")


@pytest.fixture
def make_customer():
    def _make(tenant_id, name="Jane Wanjiru"):
        with _Session() as s:
            c = Customer(user_id=tenant_id, name=name)
            s.add(c)
            s.commit()
            return c.id
    return _make


@pytest.fixture
def customer(tenant, make_customer):
    return make_customer(tenant["id"])


@pytest.fixture
def make_item():
    """Insert an item with explicit counters and return its id."""
    def _make(tenant_id, category="table_clothes", item_name="White Table Cloth",
              in_store=2, hired=0, damaged=0, price=150):
        with _Session() as s:
            it = InventoryItem(user_id=tenant_id, category=category, item_name=item_name,
                               in_store=in_store, hired=hired, damaged=damaged, price=price)
            s.add(it)
            s.commit()
            return it.id
    return _make


@pytest.fixture
def auth_headers(client, tenant):
    """Bearer headers for ACME, obtained through the login route."""
    resp = client.post("/api/login", json={"tenant": "acme", "password": tenant["password"]})
    assert resp.status_code == 200, resp.get_json()
    return {"Authorization": f"Bearer {resp.get_json()['token']}"}


@pytest.fixture
def counters():
    """Read (in_store, hired, damaged) for an item straight from the database."""
    def _read(item_id):
        with _Session() as s:
            it = s.get(InventoryItem, item_id)
            return (it.in_store, it.hired, it.damaged)
    return _read
