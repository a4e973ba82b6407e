"""Structured Logging — JSON and text formatters plus one-shot setup.

Invariants:
    - Every line carries timestamp, level, logger name and message
    - Domain extras (action, outcome, storage_key, rejected_records, error_code,
      path, bytes) are emitted only when the call site passed them
    - setup_logging replaces its own previous handler, so calling it twice
      (app restarted in-process, tests) never duplicates lines

Design Decisions:
    - Standard logging + a small formatter over a logging library: the extras are
      a fixed, short list
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_KEYS = (
    "action", "outcome", "storage_key", "rejected_records",
    "error_code", "path", "bytes",
)

_HANDLER_NAME = "teacherhub"


def _extras(record: logging.LogRecord) -> dict:
    return {
        key: record.__dict__[key]
        for key in EXTRA_KEYS
        if record.__dict__.get(key) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_extras(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable line with extras appended as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)-7s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = _extras(record)
        if extras:
            line += " " + " ".join(f"{k}={v}" for k, v in extras.items())
        return line


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
