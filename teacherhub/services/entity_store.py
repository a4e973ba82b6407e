"""Entity Store — holds the latest snapshot, applies actions, triggers saves.

Invariants:
    - One action fully applied AND saved before the next one starts (asyncio.Lock)
    - Every dispatch saves, whatever its outcome (no-ops included)
    - A failed save never rolls back the in-memory snapshot
    - A dispatch guard sees the same snapshot the action is applied to
    - The snapshot is replaced wholesale; readers holding an older one are unaffected

Design Decisions:
    - Store instance owned by the composition root and passed explicitly, no
      module-level singleton
    - Mutation logic lives in core/mutations.py; this class only sequences
      apply -> swap -> save (imperative shell around the pure core)
"""

import asyncio
import logging
from collections.abc import Callable

from teacherhub.core.actions import Action, ClearDataset, ReplaceDataset
from teacherhub.core.entities import EMPTY_DATASET, Dataset
from teacherhub.core.mutations import DEFAULT_ENV, MutationEnv, MutationResult, apply_action
from teacherhub.services.persistence import ExportArtifact, PersistenceAdapter

logger = logging.getLogger(__name__)

Guard = Callable[[Dataset, Action], None]


class EntityStore:
    """Single-writer store over the persisted dataset."""

    def __init__(self, persistence: PersistenceAdapter, env: MutationEnv = DEFAULT_ENV):
        self._persistence = persistence
        self._env = env
        self._dataset: Dataset = EMPTY_DATASET
        self._lock = asyncio.Lock()

    @property
    def snapshot(self) -> Dataset:
        """Latest snapshot. Re-read after every dispatch."""
        return self._dataset

    async def load(self) -> Dataset:
        """Initialise from the durable slot."""
        async with self._lock:
            self._dataset = await self._persistence.load()
        logger.info(
            f"Dataset loaded ({len(self._dataset.students)} students, "
            f"{len(self._dataset.groups)} groups)",
        )
        return self._dataset

    async def dispatch(self, action: Action, guard: Guard | None = None) -> MutationResult:
        """Apply one action and persist the result.

        guard(snapshot, action) runs under the lock against the snapshot the action
        will be applied to; whatever it raises propagates and nothing is saved.
        """
        async with self._lock:
            if guard is not None:
                guard(self._dataset, action)
            return await self._apply_and_save(action)

    async def clear(self) -> MutationResult:
        return await self.dispatch(ClearDataset())

    async def export_snapshot(self) -> ExportArtifact:
        async with self._lock:
            return await self._persistence.export_snapshot()

    async def import_snapshot(self, raw: str) -> bool:
        """Replace slot and snapshot with raw JSON text. False leaves both untouched."""
        async with self._lock:
            dataset = await self._persistence.import_snapshot(raw)
            if dataset is None:
                return False
            # Slot already holds this dataset; swap without a second save or re-read
            self._dataset = apply_action(
                self._dataset, ReplaceDataset(dataset), self._env,
            ).dataset
        logger.info("Dataset imported", extra={"action": "ReplaceDataset"})
        return True

    async def _apply_and_save(self, action: Action) -> MutationResult:
        result = apply_action(self._dataset, action, self._env)
        self._dataset = result.dataset
        await self._persistence.save(result.dataset)
        logger.debug(
            f"Applied {type(action).__name__}: {result.outcome.value}",
            extra={"action": type(action).__name__, "outcome": result.outcome.value},
        )
        return result
