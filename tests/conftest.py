import os
os.environ.setdefault("ENV_FILE", ".env.test")
try:
    from dotenv import load_dotenv
    load_dotenv(os.environ["ENV_FILE"])
except Exception:
    pass

from decimal import Decimal
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from config import get_settings
from database_adapter import DatabaseAdapter
from main import app
from services.access import Actor, Role
from services.database import get_db
from services.notifications import get_notifier
from services.storage import StorageError, get_file_storage


class FakeStorage:
    """In-memory stand-in for Cloudinary; fail=True simulates a rejected upload."""

    def __init__(self):
        self.uploads = []
        self.fail = False

    def upload(self, data, filename, folder, resource_type="auto"):
        if self.fail:
            raise StorageError("File upload failed")
        self.uploads.append((folder, filename, data))
        return f"https://files.test/{folder}/{filename}"


class RecordingNotifier:
    """Collects sent messages instead of emailing them."""

    def __init__(self):
        self.sent = []

    def send(self, recipient, subject, body):
        self.sent.append({"recipient": recipient, "subject": subject, "body": body})


@pytest.fixture(scope="session")
def test_settings():
    """Load test environment settings from ENV_FILE (defaults to .env.test)."""
    return get_settings(os.environ.get("ENV_FILE", ".env.test"))


@pytest.fixture(scope="session")
def test_db(test_settings):
    """SQLite database for testing (no Supabase required)"""
    db = DatabaseAdapter(test_settings)
    db.init()
    yield db
    # Cleanup happens per test


@pytest.fixture
def clean_database(test_db):
    """Clean database before each test"""
    test_db.cleanup()
    yield test_db


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(clean_database, storage, notifier):
    """Test client using SQLite. Auth is driven by Authorization headers."""
    app.dependency_overrides[get_db] = lambda: clean_database
    app.dependency_overrides[get_file_storage] = lambda: storage
    app.dependency_overrides[get_notifier] = lambda: notifier
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Return a factory that builds dev-token Authorization headers for a given user dict."""
    def _make(user: dict):
        return {"Authorization": f"dev-token-{user['id']}"}
    return _make


@pytest.fixture
def actor_for():
    """Return a factory that turns a user row into the Actor workflows expect."""
    def _make(user: dict) -> Actor:
        return Actor(
            id=user["id"],
            role=Role.parse(user["role"]),
            curator_approved=bool(user.get("curator_approved")),
            email=user.get("email"),
            name=user.get("name"),
        )
    return _make


def _create_user(db, role: str, **extra) -> dict:
    user_id = str(uuid4())
    user_data = {
        "id": user_id,
        "email": f"{role}-{user_id[:8]}@example.com",
        "name": f"Test {role.title()}",
        "role": role,
        **extra,
    }
    return db.table("users").insert(user_data).execute().data[0]


@pytest.fixture
def make_user(clean_database):
    """Factory for extra users: make_user("seller", seller_points=5)."""
    def _make(role: str, **extra):
        return _create_user(clean_database, role, **extra)
    return _make


@pytest.fixture
def test_admin(clean_database):
    return _create_user(clean_database, "admin")


@pytest.fixture
def test_seller(clean_database):
    return _create_user(clean_database, "seller")


@pytest.fixture
def test_curator(clean_database):
    """An approved curator holding the onboarding grant."""
    return _create_user(clean_database, "curator", curator_approved=True, curator_points=100)


@pytest.fixture
def pending_curator(clean_database):
    """A curator who registered but has not been approved yet."""
    return _create_user(clean_database, "curator", curator_approved=False)


@pytest.fixture
def test_buyer(clean_database):
    return _create_user(clean_database, "client")


def _create_product(db, seller_id: str, **overrides) -> dict:
    product_data = {
        "seller_id": seller_id,
        "title": "Belajar Python Dasar",
        "description": "Ebook pengantar pemrograman Python",
        "category": "ebook",
        "price": Decimal("75000.00"),
        "stock": 10,
        "status": "pending",
        **overrides,
    }
    return db.table("products").insert(product_data).execute().data[0]


@pytest.fixture
def make_product(clean_database, test_seller):
    """Factory for products owned by test_seller unless seller_id is given."""
    def _make(**overrides):
        overrides.setdefault("seller_id", test_seller["id"])
        return _create_product(clean_database, **overrides)
    return _make


@pytest.fixture
def pending_product(make_product):
    return make_product()


@pytest.fixture
def approved_product(make_product):
    return make_product(status="approved", review_score=Decimal("3.50"))


@pytest.fixture
def fetch_user(clean_database):
    """Re-read a user row (points and flags change under test)."""
    def _fetch(user_id: str) -> dict:
        return clean_database.table("users").select("*").eq("id", user_id).execute().data[0]
    return _fetch


@pytest.fixture
def fetch_product(clean_database):
    def _fetch(product_id: str) -> dict:
        return clean_database.table("products").select("*").eq("id", product_id).execute().data[0]
    return _fetch


@pytest.fixture
def make_order(clean_database):
    """Factory for orders written straight to the table: make_order(buyer, product, "completed")."""
    def _make(customer: dict, product: dict, payment_status: str = "completed", **extra):
        order_data = {
            "customer_id": customer["id"],
            "product_id": product["id"],
            "amount": Decimal(str(product["price"])),
            "payment_status": payment_status,
            "payment_method": "manual",
            "transaction_id": f"TXN-TEST-{uuid4().hex[:12]}",
            **extra,
        }
        return clean_database.table("orders").insert(order_data).execute().data[0]
    return _make
