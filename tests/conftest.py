# =============================================================================
# Shared Test Fixtures
# =============================================================================
#
# Store-backed tests run against a fresh in-memory SQLite database per test
# (aiosqlite driver), so the real SqlRecordStore, filter builder and sort
# ordering are exercised without a PostgreSQL server.
#
# Usage inside a test:
#
#   async def scenario():
#       async with open_store([make_person(1), make_person(2)]) as store:
#           ...
#   _run(scenario())
# =============================================================================

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import UTC, date, datetime, timedelta

import pytest

from app.config import Settings
from app.db.engine import build_engine, build_session_factory, create_tables
from app.db.models import Gender, Person, PersonStatus
from app.services.record_store import SqlRecordStore

SQLITE_MEMORY_URL = "sqlite+aiosqlite:///:memory:"

BASE_TIME = datetime(2024, 1, 1, 9, 0, tzinfo=UTC)


def _make_person(index: int, **overrides) -> Person:
    """A valid Person; `index` keeps emails unique and created_at increasing."""
    created = overrides.pop("created_at", BASE_TIME + timedelta(minutes=index))
    values = {
        "first_name": f"Person{index}",
        "last_name": "Tester",
        "email": f"person{index}@acme.org",
        "phone": f"90000000{index:02d}",
        "date_of_birth": date(1990, 1, 15),
        "gender": Gender.MALE,
        "street": "1 Main Road",
        "city": "Pune",
        "state": "MH",
        "zip_code": "411001",
        "country": "India",
        "status": PersonStatus.ACTIVE,
        "created_at": created,
        "updated_at": created,
    }
    values.update(overrides)
    return Person(**values)


@asynccontextmanager
async def _open_store(people=()):
    engine = build_engine(Settings(database_url=SQLITE_MEMORY_URL))
    await create_tables(engine)
    factory = build_session_factory(engine)
    try:
        async with factory() as session:
            # One flush per record so ids follow list order
            for person in people:
                session.add(person)
                await session.flush()
            await session.commit()
            yield SqlRecordStore(session)
    finally:
        await engine.dispose()


@pytest.fixture
def make_person():
    return _make_person


@pytest.fixture
def open_store():
    return _open_store


@pytest.fixture
def sqlite_settings() -> Settings:
    return Settings(
        database_url=SQLITE_MEMORY_URL,
        create_tables_on_startup=True,
        log_level="WARNING",
    )
