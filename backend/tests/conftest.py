"""
Shared fixtures for the presence test suite.

Every test gets its own in-memory SQLite database, so catalogs and segments
never leak between tests. Tests that need the baseline catalog request the
``seeded_catalog`` fixture.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from helpdesk.database import Base

# Import models so Base.metadata is populated for create_all.
import helpdesk.models  # noqa: F401
from helpdesk.services.presence_catalog_service import PresenceCatalogService
from helpdesk.services.presence_registry import PresenceRegistry

TEST_TZ = "America/Los_Angeles"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    SessionLocal = sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False, future=True
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock) -> PresenceRegistry:
    return PresenceRegistry(ttl_seconds=60.0, clock=clock)


@pytest.fixture
def seeded_catalog(db, registry):
    """Baseline statuses (AVAILABLE requires an office) and the NEWPORT_BEACH office."""
    PresenceCatalogService(db, registry).seed_defaults()
    return registry


@pytest.fixture
def tz_name() -> str:
    return TEST_TZ
