"""ORM Models — SQLAlchemy declarative models.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - Entities are NOT tables: the dataset is persisted whole as one slot payload,
      so the only table is storage_slots
    - Models imported here so Base.metadata knows them before create_all runs
"""

from teacherhub.models.storage_slot import StorageSlot  # noqa: F401
