import pytest
from sqlalchemy.exc import OperationalError

from app.core import database
from app.core.database import db_retry


def _locked():
    return OperationalError("SELECT 1", {}, Exception("database is locked"))


@pytest.fixture
def sleeps(monkeypatch):
    recorded = []

    async def fake_sleep(seconds):
        recorded.append(seconds)

    monkeypatch.setattr(database.asyncio, "sleep", fake_sleep)
    return recorded


def _flaky(failures):
    calls = []

    async def operation():
        calls.append(1)
        if len(calls) <= failures:
            raise _locked()
        return "ok"

    return operation, calls


@pytest.mark.asyncio
async def test_retry_delay_grows_by_configured_factor(monkeypatch, sleeps):
    monkeypatch.setattr(database, "DB_RETRY_BACKOFF_FACTOR", 3.0)
    operation, calls = _flaky(failures=2)

    result = await db_retry(max_attempts=3, delay=0.5)(operation)()

    assert result == "ok"
    assert len(calls) == 3
    assert sleeps == [0.5, 1.5]


@pytest.mark.asyncio
async def test_explicit_backoff_factor_wins_over_config(monkeypatch, sleeps):
    monkeypatch.setattr(database, "DB_RETRY_BACKOFF_FACTOR", 3.0)
    operation, _ = _flaky(failures=2)

    await db_retry(max_attempts=3, delay=1.0, backoff_factor=1.0)(operation)()

    assert sleeps == [1.0, 1.0]


@pytest.mark.asyncio
async def test_retry_gives_up_after_max_attempts(sleeps):
    operation, calls = _flaky(failures=5)

    with pytest.raises(OperationalError):
        await db_retry(max_attempts=2, delay=0.1)(operation)()

    assert len(calls) == 2
    assert sleeps == [0.1]
