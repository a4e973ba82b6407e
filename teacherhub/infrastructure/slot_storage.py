"""Slot Storage — durable key-value slots implementing core SlotStorage.

Invariants:
    - write replaces the whole slot value; read returns exactly what was written
    - read of a never-written key returns None
    - SQL failures surface as StorageError (mapped by DatabaseSessionManager)

Design Decisions:
    - SqlSlotStorage is the production slot (one row in storage_slots)
    - InMemorySlotStorage keeps the same async contract for tests and embedding;
      it is a real implementation, not a mock
"""

from teacherhub.infrastructure.database import DatabaseSessionManager
from teacherhub.models.storage_slot import StorageSlot


class SqlSlotStorage:
    """Slots stored as rows through an async SQLAlchemy session."""

    def __init__(self, db_manager: DatabaseSessionManager):
        self._db_manager = db_manager

    async def read(self, key: str) -> str | None:
        async with self._db_manager.session() as db:
            slot = await db.get(StorageSlot, key)
            return slot.payload if slot else None

    async def write(self, key: str, value: str) -> None:
        async with self._db_manager.session() as db:
            slot = await db.get(StorageSlot, key)
            if slot:
                slot.payload = value
            else:
                db.add(StorageSlot(key=key, payload=value))
            await db.commit()

    async def health_check(self) -> bool:
        return await self._db_manager.health_check()


class InMemorySlotStorage:
    """Process-local slots. Contents lost when the object goes away."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.slots: dict[str, str] = dict(initial or {})

    async def read(self, key: str) -> str | None:
        return self.slots.get(key)

    async def write(self, key: str, value: str) -> None:
        self.slots[key] = value

    async def health_check(self) -> bool:
        return True
