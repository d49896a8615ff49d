"""
Database engine and session management.

Builds the SQLAlchemy engine from environment configuration, falls back to an
in-memory SQLite database under pytest, and exposes the ``get_db`` FastAPI
dependency (one session per request).
"""
import os
import sys
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


def _get_database_url() -> str:
    if os.getenv("DATABASE_URL"):
        return os.getenv("DATABASE_URL")

    parts = {
        "POSTGRES_USER": os.getenv("POSTGRES_USER"),
        "POSTGRES_PASSWORD": os.getenv("POSTGRES_PASSWORD"),
        "POSTGRES_HOST": os.getenv("POSTGRES_HOST"),
        "POSTGRES_PORT": os.getenv("POSTGRES_PORT"),
        "POSTGRES_DB": os.getenv("POSTGRES_DB"),
    }
    missing = [name for name, value in parts.items() if not value]
    if missing:
        raise ValueError(f"Missing required database environment variables: {', '.join(missing)}")
    return (
        f"postgresql://{parts['POSTGRES_USER']}:{parts['POSTGRES_PASSWORD']}"
        f"@{parts['POSTGRES_HOST']}:{parts['POSTGRES_PORT']}/{parts['POSTGRES_DB']}"
    )


def _is_pytest_runtime() -> bool:
    """Best-effort detection that we're executing under pytest.

    ``PYTEST_CURRENT_TEST`` is only set while a test runs, so module import
    during collection is detected through ``sys.modules`` instead.
    """
    if os.getenv("PYTEST_RUNNING") == "1":
        return True
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True
    return "pytest" in sys.modules


def _resolve_engine_config():
    # Test override order:
    # 1. POSTBOARD_TEST_DB
    # 2. TEST_DATABASE_URL (Postgres container tests, never replaced by sqlite)
    # 3. under pytest: in-memory sqlite shared through StaticPool
    explicit_test_db = os.getenv("POSTBOARD_TEST_DB")
    explicit_pg_db = os.getenv("TEST_DATABASE_URL")
    if explicit_test_db:
        kwargs = {"connect_args": {"check_same_thread": False}} if explicit_test_db.startswith("sqlite") else {}
        return explicit_test_db, kwargs
    if explicit_pg_db:
        return explicit_pg_db, {}
    if _is_pytest_runtime():
        return "sqlite+pysqlite:///:memory:", {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return _get_database_url(), {"pool_pre_ping": True}


DATABASE_URL, _engine_kwargs = _resolve_engine_config()

engine = create_engine(DATABASE_URL, **_engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_sqlite_schema(bind=None) -> None:
    """Create all tables on SQLite binds; Postgres schemas come from Alembic."""
    bind = bind or engine
    if not str(bind.url).startswith("sqlite"):
        return
    from postboard.db import models  # local import to avoid circular import at module load
    models.Base.metadata.create_all(bind=bind)


def get_db():
    """Dependency to get a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
