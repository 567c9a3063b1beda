# backend/tests/conftest.py
"""
Pytest configuration for the session engine.

Tests run against an in-memory SQLite database. Each test gets a session
joined to an outer connection-level transaction that is rolled back at the
end, so service-level commits never leak between tests.
"""

import os

# Set testing mode BEFORE any tutorbook imports
os.environ["IS_TESTING"] = "true"
os.environ["DB_DIALECT"] = "sqlite"
os.environ.setdefault("CONTRACT_LOCKS_ENABLED", "false")

from datetime import timedelta
from typing import Callable, Dict, Generator

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from tutorbook.api.dependencies.database import get_db as api_get_db
from tutorbook.auth import create_access_token
from tutorbook.core import contract_lock
from tutorbook.core.config import settings
from tutorbook.core.enums import RoleName
from tutorbook.database import Base, get_db

# Import models so Base.metadata is populated for create_all.
import tutorbook.models  # noqa: F401

from tests.factories.session_builders import EngineBuilder

settings.is_testing = True


@pytest.fixture(scope="session")
def _test_engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # pysqlite defers BEGIN; take over so SAVEPOINT nests inside a real transaction
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(_test_engine: Engine) -> Generator[Session, None, None]:
    """
    Provide a session whose commits become savepoints inside a rolled-back transaction.
    """
    connection = _test_engine.connect()
    transaction = connection.begin()
    session = Session(
        bind=connection,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture(autouse=True)
def _contract_locks_off(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Run without Redis; tests that exercise the mutex patch it explicitly."""
    monkeypatch.setattr(settings, "contract_locks_enabled", False)
    contract_lock.reset_lock_client()
    yield
    contract_lock.reset_lock_client()


@pytest.fixture
def builder(db: Session) -> EngineBuilder:
    return EngineBuilder(db)


@pytest.fixture
def today(builder: EngineBuilder):
    return builder.today


@pytest.fixture
def next_week(today):
    return today + timedelta(days=7)


@pytest.fixture
def client(db: Session) -> Generator[TestClient, None, None]:
    from tutorbook.main import app

    def override_get_db() -> Generator[Session, None, None]:
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[api_get_db] = override_get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> Callable[[str, RoleName], Dict[str, str]]:
    """Build an Authorization header for a user id and role."""

    def _headers(user_id: str, role: RoleName | str) -> Dict[str, str]:
        role_value = role.value if isinstance(role, RoleName) else role
        token = create_access_token({"sub": user_id, "role": role_value})
        return {"Authorization": f"Bearer {token}"}

    return _headers
