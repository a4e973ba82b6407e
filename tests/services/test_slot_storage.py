"""Slot Storage — tests for the SQL-backed slot and the database session manager.

Invariants:
    - Unwritten key reads None; write then read returns the same text
    - A second write replaces the row, never adds one
    - SQLAlchemy failures surface as StorageError

Design Decisions:
    - File-backed SQLite under tmp_path: each connection sees the same database
      (":memory:" would give every pooled connection its own empty one)
"""

import pytest
from sqlalchemy import func, select

from teacherhub.core.errors import StorageError
from teacherhub.infrastructure.database import DatabaseSessionManager
from teacherhub.infrastructure.slot_storage import SqlSlotStorage
from teacherhub.models.storage_slot import StorageSlot
from teacherhub.services.persistence import PersistenceAdapter
from tests.factories import seeded_dataset


@pytest.fixture
async def db_manager(tmp_path):
    manager = DatabaseSessionManager(f"sqlite+aiosqlite:///{tmp_path / 'slots.db'}")
    await manager.create_tables()
    yield manager
    await manager.dispose()


async def test_read_unwritten_key_is_none(db_manager):
    assert await SqlSlotStorage(db_manager).read("teacherHubData") is None


async def test_write_then_read(db_manager):
    storage = SqlSlotStorage(db_manager)

    await storage.write("teacherHubData", '{"students": []}')
    assert await storage.read("teacherHubData") == '{"students": []}'


async def test_second_write_overwrites_single_row(db_manager):
    storage = SqlSlotStorage(db_manager)
    await storage.write("teacherHubData", "first")
    await storage.write("teacherHubData", "second")

    async with db_manager.session() as db:
        count = await db.scalar(select(func.count()).select_from(StorageSlot))
    assert count == 1
    assert await storage.read("teacherHubData") == "second"


async def test_keys_are_independent(db_manager):
    storage = SqlSlotStorage(db_manager)
    await storage.write("a", "1")

    assert await storage.read("b") is None


async def test_persistence_round_trip_through_sql(db_manager):
    adapter = PersistenceAdapter(SqlSlotStorage(db_manager), "teacherHubData")

    assert await adapter.save(seeded_dataset()) is True
    assert await adapter.load() == seeded_dataset()


async def test_health_check(db_manager):
    assert await SqlSlotStorage(db_manager).health_check() is True


async def test_missing_table_maps_to_storage_error(tmp_path):
    manager = DatabaseSessionManager(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    try:
        with pytest.raises(StorageError):
            await SqlSlotStorage(manager).read("teacherHubData")
    finally:
        await manager.dispose()
