"""
Shared fixtures: an in-memory SQLite store, the services wired to it, and
an HTTP client over the full application.
"""
from typing import Dict

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from myroom.core.events import SnapshotHub
from myroom.core.security import Principal
from myroom.core.utils import MILLIS_PER_DAY
from myroom.db.base import Base, import_models
from myroom.db.init_db import drop_db
from myroom.main import create_app
from myroom.services.listing.listing_service import ListingService
from myroom.services.listing.moderation import ModerationService
from myroom.services.listing.snapshots import StoreSnapshotLoader
from myroom.services.review import ReviewService

START_MILLIS = 1_700_000_000_000


def build_memory_engine():
    # One shared connection so every session sees the same in-memory database
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = START_MILLIS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int = 1000) -> int:
        self.now += millis
        return self.now

    def advance_days(self, days: float) -> int:
        return self.advance(int(days * MILLIS_PER_DAY))


@pytest.fixture
def engine():
    engine = build_memory_engine()
    import_models()
    Base.metadata.create_all(bind=engine)
    yield engine
    drop_db(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def hub(session_factory, clock):
    return SnapshotHub(StoreSnapshotLoader(session_factory, clock=clock))


@pytest.fixture
def listing_service(session_factory, hub, clock):
    return ListingService(session_factory, hub, clock=clock)


@pytest.fixture
def moderation_service(session_factory, hub, clock):
    return ModerationService(session_factory, hub, clock=clock)


@pytest.fixture
def review_service(session_factory, hub, clock):
    return ReviewService(session_factory, hub, clock=clock)


@pytest.fixture
def owner():
    return Principal(user_id="owner-1")


@pytest.fixture
def other_owner():
    return Principal(user_id="owner-2")


@pytest.fixture
def student():
    return Principal(user_id="student-1")


@pytest.fixture
def admin():
    return Principal(user_id="admin-1", is_admin=True)


@pytest.fixture
def listing_data() -> Dict[str, str]:
    return {
        "title": "Sunny room near VIT",
        "rent": "4000",
        "amenities": "WiFi, CCTV, Security guard",
        "contact_info": "+919876543210",
        "location": "Katpadi, near VIT Vellore",
        "description": "Second floor, attached bathroom",
    }


@pytest.fixture
def app(session_factory, engine, tmp_path):
    return create_app(
        session_factory=session_factory,
        engine=engine,
        upload_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(app):
    """Build bearer headers for any user id, optionally with the admin flag."""

    def _headers(user_id: str, is_admin: bool = False) -> Dict[str, str]:
        token = app.state.jwt_manager.create_access_token(user_id, is_admin=is_admin)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def owner_headers(auth_headers):
    return auth_headers("owner-1")


@pytest.fixture
def student_headers(auth_headers):
    return auth_headers("student-1")


@pytest.fixture
def admin_headers(auth_headers):
    return auth_headers("admin-1", is_admin=True)
