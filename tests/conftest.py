"""
- Spins up a temp in-memory SQLite DB
- Creates tables before tests run
- Provides a db_session fixture and overrides FastAPI's get_db so routes use the test session
- Pins the puzzle clock to 2025-01-01 10:00 (Asia/Kolkata)
- Provides a client fixture (TestClient(app)) with both overrides applied
"""
import os
from datetime import datetime
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Must be set before the app modules are imported
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from cricket_puzzle.clock import FixedClock
from cricket_puzzle.db import Base, get_db
from cricket_puzzle.main import app, get_clock
from cricket_puzzle.repository import DBWordRegistry
from cricket_puzzle.service import PuzzleSessionEngine
from cricket_puzzle.store import InMemorySessionStore, InMemoryWordRegistry
from cricket_puzzle import models  # noqa: F401

TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"
TEST_TZ = "Asia/Kolkata"
TODAY = "2025-01-01"


@pytest.fixture(scope="session")
def engine():
    # StaticPool + check_same_thread=False lets Starlette's TestClient and SQLAlchemy
    # share ONE in-memory SQLite database across threads.
    engine = create_engine(
        TEST_DATABASE_URL,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(engine) -> Generator:
    """Provide a clean session per test with rollback."""
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    db = TestingSessionLocal()
    try:
        yield db
        db.rollback()
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _clean_db(engine):
    """The repository commits inside requests, so wipe rows before each test."""
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM puzzle_attempts"))
        conn.execute(text("DELETE FROM puzzle_sessions"))
        conn.execute(text("DELETE FROM daily_words"))
    yield


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 1, 1, 10, 0, 0), TEST_TZ)


@pytest.fixture(autouse=True)
def override_dep(db_session, clock):
    """Force the app to use our test session and pinned clock for every request."""
    def _get_db_for_tests():
        yield db_session

    app.dependency_overrides[get_db] = _get_db_for_tests
    app.dependency_overrides[get_clock] = lambda: clock
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db_words(db_session):
    """Registry over the test DB; use .add_word(...) to seed a slot."""
    return DBWordRegistry(db_session)


@pytest.fixture
def memory_engine(clock):
    """Session engine over the in-memory stores, scoring on the server."""
    words = InMemoryWordRegistry()
    sessions = InMemorySessionStore()
    return PuzzleSessionEngine(words, sessions, clock=clock, score_mode="server", max_attempts=6, default_points=60)
