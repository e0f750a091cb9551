from __future__ import annotations

import json
import os
import threading
import time
from typing import Any, Dict, Optional, TextIO


class TelemetryLogger:
    """Structured JSONL logger for arena telemetry.

    Thread-safe, append-only logging of dict records, one JSON object per line.
    Every record gets a wall-clock ``ts`` field unless it already has one.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        self._lock = threading.Lock()
        self._fp: Optional[TextIO] = open(self.path, "a", encoding="utf-8")

    def log_step(self, record: Dict[str, Any]) -> None:
        """Append a single telemetry record to the JSONL file."""
        if self._fp is None:
            return
        record.setdefault("ts", time.time())
        line = json.dumps(record, separators=(",", ":"))
        with self._lock:
            self._fp.write(line + "\n")
            self._fp.flush()

    def log_event(self, kind: str, **fields: Any) -> None:
        """Append a record tagged with an event kind (e.g. "collision")."""
        record: Dict[str, Any] = {"event": kind}
        record.update(fields)
        self.log_step(record)

    def close(self) -> None:
        if self._fp is not None:
            self._fp.close()
            self._fp = None

    def __enter__(self) -> "TelemetryLogger":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
