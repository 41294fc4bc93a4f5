# tests/conftest.py
from __future__ import annotations

import os
import tempfile
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ADMIN_PASSWORD", "correct-horse")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="codeshare-uploads-"))
os.environ.setdefault("STORE_BACKEND", "database")
# Individual tests switch the limiter on; the rest of the suite shares one client address.
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from codeshare.api.v1.dependencies import get_visitor_identity
from codeshare.core.security import create_access_token
from codeshare.db.session import Base
from codeshare.main import app as fastapi_app
from codeshare.models import BoardSnapshot
from codeshare.services.broadcaster import Broadcaster, get_broadcaster
from codeshare.services.engine import EngagementEngine
from codeshare.services.events import BoardEvent
from codeshare.services.identity import NetworkAddressIdentity
from codeshare.services.store import SqlSnapshotStore, get_store

TEST_DB_URL = "sqlite://"
ADMIN_PASSWORD = os.environ["ADMIN_PASSWORD"]


class RecordingPublisher:
    """Collects published events for assertions."""

    def __init__(self) -> None:
        self.events: list[BoardEvent] = []

    def publish(self, event: BoardEvent) -> None:
        self.events.append(event)

    @property
    def names(self) -> list[str]:
        return [event.name for event in self.events]


class SteppingClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(seconds=1)
        return value


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def store(engine: Engine) -> SqlSnapshotStore:
    """Return a database-backed store starting from an empty board."""
    with engine.begin() as connection:
        connection.execute(BoardSnapshot.__table__.delete())
    session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    return SqlSnapshotStore(session_factory)


@pytest.fixture()
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture()
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture()
def board(
    store: SqlSnapshotStore,
    publisher: RecordingPublisher,
    clock: SteppingClock,
) -> EngagementEngine:
    """Engine over the test store with recorded events and a stepping clock."""
    return EngagementEngine(store, publisher, clock=clock)


@pytest.fixture()
def broadcaster() -> Broadcaster:
    return Broadcaster(queue_size=16)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    store: SqlSnapshotStore,
    broadcaster: Broadcaster,
) -> Iterator[None]:
    """Point the API at the per-test store and broadcaster.

    Visitor identity honours ``X-Forwarded-For`` so tests can act as several
    visitors from one client.
    """
    overrides: dict[Callable[..., Any], Callable[[], Any]] = {
        get_store: lambda: store,
        get_broadcaster: lambda: broadcaster,
        get_visitor_identity: lambda: NetworkAddressIdentity(trust_forwarded_for=True),
    }
    app.dependency_overrides.update(overrides)
    try:
        yield
    finally:
        for dependency in overrides:
            app.dependency_overrides.pop(dependency, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def admin_headers() -> dict[str, str]:
    """Return authorization headers carrying a valid admin token."""
    return {"Authorization": f"Bearer {create_access_token()}"}


@pytest.fixture()
def make_post(client: TestClient, admin_headers: dict[str, str]) -> Callable[..., dict[str, Any]]:
    """Create a post through the API and return its JSON."""

    def _make_post(**fields: Any) -> dict[str, Any]:
        payload = {"title": "Hello", "code": "print(1)", "author": "Admin", **fields}
        response = client.post("/api/posts", json=payload, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json()["post"]

    return _make_post

