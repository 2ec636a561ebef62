import os
import tempfile
import uuid

import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

# Settings are read at import time; keep the real database out of tests.
os.environ.setdefault("DATABASE_URL", "mongodb://localhost:27017")
os.environ.setdefault("DATABASE_NAME", "event_registration_test")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("RATE_LIMITING_ENABLED", "false")
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "event-registration-test.log"))

from main import app  # noqa: E402
from app.db import ensure_indexes, get_db  # noqa: E402
from app.core.config import settings  # noqa: E402
from app.core.security import ADMIN_ROLE, create_access_token, get_password_hash  # noqa: E402

ADMIN_EMAIL = "admin@binus.ac.id"
ADMIN_PASSWORD = "correct-horse-battery"


def make_candidate(**overrides):
    candidate = {
        "fullName": "Ada",
        "nim": "111",
        "binusianEmail": "ada@binus.ac.id",
        "privateEmail": "a@x.com",
        "major": "CS",
        "phoneNumber": "0811",
    }
    candidate.update(overrides)
    return candidate


class _StubCollection:
    """Delegates to a real collection except for the methods in `stubs`."""

    def __init__(self, inner, stubs):
        self._inner = inner
        self._stubs = stubs

    def __getattr__(self, name):
        if name in self._stubs:
            return self._stubs[name]
        return getattr(self._inner, name)


class StubDatabase:
    """StubDatabase(db, registrations={"insert_one": raising(...)})"""

    def __init__(self, inner, **stubs_by_collection):
        self._inner = inner
        self._stubs_by_collection = stubs_by_collection

    def __getattr__(self, name):
        return _StubCollection(getattr(self._inner, name), self._stubs_by_collection.get(name, {}))


def raising(error):
    def _raise(*args, **kwargs):
        raise error
    return _raise


@pytest.fixture
def use_db():
    """Points the app at another database object for the rest of the test."""
    def install(database):
        async def _get_db():
            return database
        app.dependency_overrides[get_db] = _get_db
    return install


@pytest.fixture(scope="session")
def admin_password_hash():
    return get_password_hash(ADMIN_PASSWORD)


@pytest.fixture(autouse=True)
def _patch_admins(monkeypatch, admin_password_hash):
    monkeypatch.setattr(settings, "ADMIN_CREDENTIALS", {ADMIN_EMAIL: admin_password_hash})
    yield


@pytest.fixture
async def mock_db():
    # A fresh database per test, with the same indexes production uses.
    client = AsyncMongoMockClient()
    database = client[f"event_registration_{uuid.uuid4().hex}"]
    await ensure_indexes(database)
    return database


@pytest.fixture
async def client(mock_db):
    async def _get_test_db():
        return mock_db

    app.dependency_overrides[get_db] = _get_test_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_token():
    return create_access_token(data={"sub": ADMIN_EMAIL, "role": ADMIN_ROLE})


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}
