import os

import pytest
from fastapi.testclient import TestClient

# Unit and API tests run against the in-memory SQLite engine unless a
# database is requested explicitly.
os.environ.setdefault("PYTEST_RUNNING", "1")

import postboard.db.database as db_module  # noqa: E402
from postboard.api.main import app  # noqa: E402
from postboard.db import models  # noqa: E402
from postboard.utils.settings import refresh_settings_cache  # noqa: E402

_RUNTIME_VARS = (
    "DEV_MODE",
    "ALLOW_DEV_MODE",
    "APP_BASE_URL",
    "DEV_MODE_ALLOWED_HOSTS",
    "POSTS_DEFAULT_PAGE",
    "POSTS_DEFAULT_PAGE_SIZE",
    "POSTS_MIN_PAGE_SIZE",
    "POSTS_MAX_PAGE_SIZE",
    "SESSION_TTL_HOURS",
)

# Session shared between the test body and the app's get_db dependency
_CURRENT_SESSION = None


@pytest.fixture(autouse=True)
def _clean_runtime_env(monkeypatch):
    for var in _RUNTIME_VARS:
        monkeypatch.delenv(var, raising=False)
    refresh_settings_cache()
    yield
    refresh_settings_cache()


@pytest.fixture(autouse=True)
def db_session():
    """Fresh schema per test; the app sees the same session as the test."""
    global _CURRENT_SESSION
    engine = db_module.engine
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)
    session = db_module.SessionLocal()
    _CURRENT_SESSION = session
    try:
        yield session
    finally:
        _CURRENT_SESSION = None
        session.rollback()
        session.close()


def _override_get_db():
    if _CURRENT_SESSION is not None:
        yield _CURRENT_SESSION
        return
    session = db_module.SessionLocal()
    try:
        yield session
    finally:
        session.close()


app.dependency_overrides[db_module.get_db] = _override_get_db


@pytest.fixture
def db(db_session):
    return db_session


@pytest.fixture
def client():
    return TestClient(app)


def auth_headers(user: str) -> dict:
    return {"x-auth-request-user": user, "x-auth-request-email": f"{user}@example.com"}


@pytest.fixture
def alice_headers():
    return auth_headers("alice")


@pytest.fixture
def bob_headers():
    return auth_headers("bob")
