"""Shared test fixtures and configuration.

Sets up fake environment variables before any src import, and provides
a temp key-value DB, a controllable clock and a data manager.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "fake-token-for-tests")
os.environ.setdefault("ALLOWED_USER_IDS", "12345")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("CREDENTIAL_BACKEND", "env")
os.environ.setdefault("ADVICE_API_KEY", "")
os.environ.setdefault("OPENAI_API_KEY", "")

from datetime import datetime, timedelta, timezone

import pytest

NOW = datetime(2026, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_lifetune.db")


@pytest.fixture
def kv_db(tmp_db_path):
    """Return a KeyValueDB instance backed by a temp file."""
    from src.data.db import KeyValueDB
    return KeyValueDB(db_path=tmp_db_path)


@pytest.fixture
def manager(kv_db, clock):
    """Return a LifeDataManager over the temp DB with a fixed clock."""
    from src.core.life_manager import LifeDataManager
    return LifeDataManager(kv_db, clock=clock)


@pytest.fixture
def japan_male(manager):
    """Manager with a Japanese male profile born 1990-01-01."""
    result = manager.initialize_profile(
        birth_date=datetime(1990, 1, 1, tzinfo=timezone.utc),
        gender="male",
        country="日本",
    )
    assert result.success
    return manager
