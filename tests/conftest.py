"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Generator

import pytest
from sqlalchemy.orm import Session

from src.core.config import Settings
from src.db.database import build_engine, build_session_factory
from src.db.schema import Base
from src.main import Application

# One in-memory SQLite database for the whole test run, built the same way the application builds its own
TEST_SETTINGS = Settings(
    database_url="sqlite:///:memory:", default_token_count=6, log_level="DEBUG"
)
engine = build_engine(TEST_SETTINGS)

TestingSessionLocal = build_session_factory(engine)


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def application() -> Generator[Application, None, None]:
    """Application on the test database. Mock real setup: every unit of work opens its own session on the same engine."""
    Base.metadata.create_all(bind=engine)
    app = Application(TEST_SETTINGS, engine=engine)
    try:
        yield app
    finally:
        app.dispose()
        Base.metadata.drop_all(bind=engine)
