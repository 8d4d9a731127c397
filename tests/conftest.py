"""Pytest fixtures and factories.

Important: all model modules must be imported before Base.metadata.create_all(),
otherwise relationship targets might not exist yet.
"""
import os
import secrets
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from liquid_democracy.main import app
from liquid_democracy.database import Base
from liquid_democracy.api import deps
from liquid_democracy.models.db import Poll, Ballot  # noqa: F401  (registers mappers)
from liquid_democracy.services import polls as poll_service

# File-based SQLite so the TestClient's worker thread and the test thread share data.
SQLALCHEMY_TEST_URL = "sqlite+pysqlite:///./test_liquid_democracy.db"
engine = create_engine(
    SQLALCHEMY_TEST_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Health checks open sessions through the module attribute; point it at the test DB.
import liquid_democracy.database as _database  # noqa: E402
_database.SessionLocal = TestingSessionLocal  # type: ignore

@pytest.fixture(scope="session", autouse=True)
def create_test_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    try:
        os.remove("test_liquid_democracy.db")
    except OSError:
        pass

@pytest.fixture()
def db_session():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()

def _override_get_db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()

app.dependency_overrides[deps.get_db] = _override_get_db

@pytest.fixture()
def client():
    return TestClient(app)

# ---------- Data factory helpers ----------

@pytest.fixture()
def poll_factory(db_session):
    def _create(name: str | None = None, description: str | None = None) -> Poll:
        # Poll names are unique across the whole session-scoped DB.
        name = f"{name or 'Poll'} {secrets.token_hex(3)}"
        return poll_service.create_poll(db_session, name, description)
    return _create

EXAMPLE_COMMANDS = [
    "Alice pick Pizza",
    "Bob delegate Carol",
    "Carol pick Salad",
    "Dave delegate Eve",
    "Eve delegate Mallory",
    "Mallory delegate Eve",
]

@pytest.fixture()
def example_commands() -> list[str]:
    """The canonical scenario: Salad 2, Pizza 1, three invalid (Eve/Mallory cycle + Dave)."""
    return list(EXAMPLE_COMMANDS)
