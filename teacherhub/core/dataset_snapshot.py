"""Dataset Snapshot — serialization / deserialization for Dataset.

Invariants:
    - dataset_to_snapshot produces a JSON-safe dict (no tuples, no Enums, no None)
    - Snapshot keys are camelCase; all nine collection fields always present
    - dataset_from_snapshot never raises on a dict: a missing or non-list collection
      becomes empty, independently of the other collections
    - A record that is not an object, lacks a required field, or has a wrong-typed
      value is dropped and counted; unknown record keys are ignored
    - NaN and Infinity are wrong-typed numbers: they never enter a Dataset and
      dataset_to_json refuses to write them
    - parse_snapshot_text raises SnapshotFormatError for non-JSON or non-object text

Design Decisions:
    - Field mappings derived from the dataclasses (snake_case -> camelCase) instead of
      nine hand-written encoders
    - Optional fields omitted when None, matching how the browser client wrote them
    - Integers stay integers: 87 round-trips as 87, not 87.0
"""

import json
import math
from dataclasses import MISSING, fields
from enum import Enum

from teacherhub.core.entities import (
    COLLECTION_FIELDS, Assessment, AttendanceRecord, Dataset, Grade, Group,
    PaymentRecord, Session, SessionReport, Student, StudentGroup,
)
from teacherhub.core.errors import SnapshotFormatError

_RECORD_TYPES: dict[str, type] = {
    "students": Student,
    "groups": Group,
    "student_groups": StudentGroup,
    "sessions": Session,
    "attendance_records": AttendanceRecord,
    "session_reports": SessionReport,
    "assessments": Assessment,
    "grades": Grade,
    "payment_records": PaymentRecord,
}


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


# --- Encoding ------------------------------------------------------------------

def record_to_dict(record) -> dict:
    """One entity -> camelCase JSON-safe dict. Pure, no IO."""
    data = {}
    for f in fields(record):
        value = getattr(record, f.name)
        if value is None:
            continue
        data[to_camel(f.name)] = value.value if isinstance(value, Enum) else value
    return data


def dataset_to_snapshot(dataset: Dataset) -> dict:
    """Serialize every collection. Pure, no IO."""
    return {
        to_camel(name): [record_to_dict(r) for r in getattr(dataset, name)]
        for name in COLLECTION_FIELDS
    }


def dataset_to_json(dataset: Dataset, indent: int | None = None) -> str:
    return json.dumps(
        dataset_to_snapshot(dataset), indent=indent, ensure_ascii=False, allow_nan=False,
    )


# --- Decoding ------------------------------------------------------------------

def _convert(field_type, value):
    """Check/convert one raw value against the declared field type."""
    if isinstance(field_type, type) and issubclass(field_type, Enum):
        return field_type(value)
    if field_type is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"expected number, got {type(value).__name__}")
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError(f"expected a finite number, got {value}")
        return value
    if not isinstance(value, str):
        raise ValueError(f"expected string, got {type(value).__name__}")
    return value


def _optional_inner(field_type):
    """`str | None` -> str; anything else unchanged."""
    args = getattr(field_type, "__args__", None)
    if args and type(None) in args:
        return next(a for a in args if a is not type(None))
    return field_type


def record_from_dict(record_type: type, raw: object):
    """camelCase dict -> entity. Raises ValueError when the record is unusable."""
    if not isinstance(raw, dict):
        raise ValueError("record is not an object")
    values = {}
    for f in fields(record_type):
        value = raw.get(to_camel(f.name))
        if value is None:
            if f.default is MISSING:
                raise ValueError(f"missing field '{to_camel(f.name)}'")
            continue
        values[f.name] = _convert(_optional_inner(f.type), value)
    return record_type(**values)


def _decode_collection(record_type: type, raw: object) -> tuple[tuple, int]:
    """Decode the usable records of one collection; count the rejected ones."""
    if not isinstance(raw, list):
        return (), 0
    records, rejected = [], 0
    for item in raw:
        try:
            records.append(record_from_dict(record_type, item))
        except ValueError:
            rejected += 1
    return tuple(records), rejected


def dataset_from_snapshot(data: object) -> tuple[Dataset, int]:
    """Reconstruct a Dataset from any parsed JSON value. Pure, no IO.

    Returns the dataset and the number of records that had to be dropped.
    Anything that is not a dict yields the empty dataset.
    """
    if not isinstance(data, dict):
        return Dataset(), 0
    collections, rejected = {}, 0
    for name, record_type in _RECORD_TYPES.items():
        records, dropped = _decode_collection(record_type, data.get(to_camel(name)))
        collections[name] = records
        rejected += dropped
    return Dataset(**collections), rejected


def parse_snapshot_text(raw: str) -> dict:
    """Raw text -> snapshot dict. Raises SnapshotFormatError when unusable."""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise SnapshotFormatError(f"Snapshot is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise SnapshotFormatError(
            f"Snapshot must be a JSON object, got {type(data).__name__}",
        )
    return data
