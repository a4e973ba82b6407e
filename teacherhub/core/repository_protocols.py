"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - The whole dataset lives in ONE named slot as one text value
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: implementations do IO, but the pure functions that
      produce/consume the slot text are never async themselves
"""

from typing import Protocol


class SlotStorage(Protocol):
    """Durable key-value slot, implemented by infrastructure.

    read returns None when the slot has never been written.
    Failures surface as StorageError.
    """
    async def read(self, key: str) -> str | None: ...
    async def write(self, key: str, value: str) -> None: ...
    async def health_check(self) -> bool: ...
