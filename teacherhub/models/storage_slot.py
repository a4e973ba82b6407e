"""StorageSlot ORM — one row per named key-value slot.

Invariants:
    - key is the primary key; a slot is overwritten, never appended
    - payload holds the full serialized snapshot text

Design Decisions:
    - Text column, not JSON: the slot stores exactly what was serialized, so a
      corrupt value survives to be handled by the snapshot codec, not the driver
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from teacherhub.db.base import Base


class StorageSlot(Base):
    """Durable slot. The whole dataset lives in one row."""
    __tablename__ = "storage_slots"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
