"""Shared pytest fixtures and configuration."""

import os
import pytest
from unittest.mock import MagicMock, patch

# Set test environment variables before listing_api.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("VISIT_OPEN_TIME", "09:00")
os.environ.setdefault("VISIT_CLOSE_TIME", "17:00")
os.environ.setdefault("VISIT_SLOT_STEP_MINUTES", "30")

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from listing_api.database import create_db_engine, get_db, init_db
from listing_api.main import app
from listing_api.services.slots import VisitConfig
from tests.utils.factories import create_property, create_user


@pytest.fixture
def engine(tmp_path):
    """Fresh file-backed SQLite database per test."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'visits.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def mock_redis():
    """Redis client used by the event emitter."""
    client = MagicMock()
    client.rpush.return_value = 1
    with patch("listing_api.services.events.redis_client", client):
        yield client


@pytest.fixture
def visit_config():
    return VisitConfig()


@pytest.fixture
def agent(db):
    return create_user(db, role="agent")


@pytest.fixture
def visitor(db):
    return create_user(db, role="user")


@pytest.fixture
def other_visitor(db):
    return create_user(db, role="user")


@pytest.fixture
def admin(db):
    return create_user(db, role="admin")


@pytest.fixture
def listed_property(db, agent):
    return create_property(db, agent)


@pytest.fixture
def client(session_factory):
    """TestClient bound to the per-test database."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
