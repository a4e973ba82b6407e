"""Persistence Adapter — saves and restores the whole dataset through one storage slot.

Invariants:
    - load() never raises: absent, unreadable, non-JSON or non-object data -> empty
      dataset; defective collections -> empty individually; bad records dropped
    - save() never raises: failures are logged and reported as False, the caller's
      in-memory snapshot is untouched
    - import_snapshot() writes only after the text parsed to a JSON object; on any
      failure the slot keeps its previous bytes. Success returns the written dataset
    - Export content is the currently PERSISTED dataset, not an in-memory one

Design Decisions:
    - Corruption degrades to "empty or partially empty" instead of failing startup
      (availability over strictness for a single-user local tool)
    - Today's date injected for the export filename so tests can pin it
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from teacherhub.core.dataset_snapshot import (
    dataset_from_snapshot, dataset_to_json, parse_snapshot_text,
)
from teacherhub.core.entities import Dataset
from teacherhub.core.errors import SnapshotFormatError, StorageError
from teacherhub.core.repository_protocols import SlotStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportArtifact:
    """Downloadable backup of the persisted dataset."""
    filename: str
    content: str
    media_type: str = "application/json"


class PersistenceAdapter:
    """Serializes the dataset into a durable slot and restores it defensively."""

    def __init__(
        self, storage: SlotStorage, key: str,
        filename_prefix: str = "teacherhub-backup",
        today: Callable[[], date] = date.today,
    ):
        self._storage = storage
        self._key = key
        self._filename_prefix = filename_prefix
        self._today = today

    async def load(self) -> Dataset:
        """Read the slot. Always returns a usable dataset."""
        try:
            raw = await self._storage.read(self._key)
        except StorageError as e:
            logger.error(
                f"Failed to read dataset: {e}",
                extra={"storage_key": self._key, "error_code": e.code},
            )
            return Dataset()
        if raw is None:
            return Dataset()
        try:
            data = parse_snapshot_text(raw)
        except SnapshotFormatError as e:
            logger.warning(
                f"Persisted dataset unusable, starting empty: {e.message}",
                extra={"storage_key": self._key, "error_code": e.code},
            )
            return Dataset()
        return self._decode(data)

    async def save(self, dataset: Dataset) -> bool:
        """Write the full snapshot. Failures logged, never raised."""
        payload = ""
        try:
            payload = dataset_to_json(dataset)
            await self._storage.write(self._key, payload)
        except Exception as e:
            logger.error(
                f"Failed to save dataset: {e}",
                extra={"storage_key": self._key, "bytes": len(payload)},
                exc_info=True,
            )
            return False
        return True

    async def export_snapshot(self) -> ExportArtifact:
        dataset = await self.load()
        filename = f"{self._filename_prefix}-{self._today().isoformat()}.json"
        return ExportArtifact(
            filename=filename, content=dataset_to_json(dataset, indent=2),
        )

    async def import_snapshot(self, raw: str) -> Dataset | None:
        """Replace the slot with the coerced contents of raw. None on failure."""
        try:
            data = parse_snapshot_text(raw)
        except SnapshotFormatError as e:
            logger.warning(
                f"Import rejected: {e.message}",
                extra={"storage_key": self._key, "error_code": e.code},
            )
            return None
        dataset = self._decode(data)
        if not await self.save(dataset):
            return None
        return dataset

    def _decode(self, data: dict) -> Dataset:
        dataset, rejected = dataset_from_snapshot(data)
        if rejected:
            logger.warning(
                f"Dropped {rejected} malformed record(s) from snapshot",
                extra={"storage_key": self._key, "rejected_records": rejected},
            )
        return dataset
