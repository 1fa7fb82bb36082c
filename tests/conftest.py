"""
Pytest configuration.

Each test gets its own SQLite file database (aiosqlite) built from the ORM
metadata, a fixed clock, and an httpx client wired to the FastAPI app with
the session and clock dependencies overridden.
"""
import os

# Must be set before any app import
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BUSINESS_TIMEZONE"] = "UTC"
os.environ["LOG_FORMAT"] = "text"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./gymdesk_test.db")

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.clock import get_clock, local_date
from app.core.database import Base, build_engine, build_sessionmaker, get_session
from app.desk import models as desk_models  # noqa: F401
from app.portal import models as portal_models  # noqa: F401

# Wednesday, 09:00 UTC
NOW = datetime(2026, 10, 21, 9, 0, tzinfo=timezone.utc)
WEDNESDAY = 3


class FixedClock:
    """Clock that only moves when told to"""

    def __init__(self, now: datetime):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs) -> None:
        self._now = self._now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def today():
    return local_date(NOW)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'gymdesk.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory, clock):
    from app.main import app

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_clock] = lambda: clock

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
