# tests/conftest.py

import os
import tempfile
from pathlib import Path

import pytest

from factories import TEST_JWT_SECRET, FakeProvider

# --- Environment must be set before the app (and its settings/engine) is imported ---
_TEST_DB_DIR = tempfile.mkdtemp(prefix="nightlife-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_TEST_DB_DIR) / 'app.db'}"
os.environ["JWT_SECRET"] = TEST_JWT_SECRET
os.environ["YELP_API_KEY"] = "test-yelp-key"
os.environ["SCHEDULER_ENABLED"] = "false"

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from starlette.testclient import TestClient  # noqa: E402

from app.api.deps import get_bus, get_venue_provider  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import engine_kwargs, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Venue  # noqa: E402
from app.realtime.bus import PresenceEventBus  # noqa: E402
from app.services.auth import Identity  # noqa: E402


# --- Database ---
@pytest.fixture
def engine(tmp_path):
    url = f"sqlite:///{tmp_path / 'test.db'}"
    eng = create_engine(url, **engine_kwargs(url))
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def register(db):
    """Register venues directly, as if they had been seen in a search."""

    def _register(*venue_ids):
        for venue_id in venue_ids:
            db.add(Venue(venue_id=venue_id))
        db.commit()

    return _register


# --- Domain doubles ---
@pytest.fixture
def alice():
    return Identity(user_id="u1", display_name="Alice")


@pytest.fixture
def bob():
    return Identity(user_id="u2", display_name="Bob")


@pytest.fixture
def bus():
    return PresenceEventBus()


@pytest.fixture
def provider():
    return FakeProvider()


# --- Test Client ---
@pytest.fixture
def client(session_factory, provider, bus):
    """TestClient on the real app with DB, provider and bus swapped for test instances."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_venue_provider] = lambda: provider
    app.dependency_overrides[get_bus] = lambda: bus

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
