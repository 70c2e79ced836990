"""In-memory ring buffer of recent log entries, tagged with the bound owner."""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone

from water_monitor.logging.context import current_owner


@dataclass(frozen=True)
class BufferedRecord:
    timestamp: str
    level: str
    logger_name: str
    message: str
    owner_id: str | None  # None for startup, storage and other system records

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "level": self.level,
            "logger": self.logger_name,
            "owner_id": self.owner_id,
            "message": self.message,
        }


class RingBufferHandler(logging.Handler):
    """Keeps the last *capacity* records so owners can see what happened to their data."""

    def __init__(self, capacity: int = 500):
        super().__init__()
        self._buffer: deque[BufferedRecord] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = BufferedRecord(
                timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
                level=record.levelname,
                logger_name=record.name,
                message=self.format(record),
                owner_id=current_owner(),
            )
            with self._lock:
                self._buffer.append(entry)
        except Exception:
            self.handleError(record)

    def get_records(
        self,
        limit: int = 200,
        level: str | None = None,
        owner_id: str | None = None,
    ) -> list[dict]:
        """Newest-first records.

        With *owner_id*, records bound to any other owner are left out;
        system records (no owner) are always visible.
        """
        with self._lock:
            records = list(self._buffer)
        if level:
            level_upper = level.upper()
            records = [r for r in records if r.level == level_upper]
        if owner_id is not None:
            records = [r for r in records if r.owner_id in (None, owner_id)]
        records.reverse()
        return [r.to_dict() for r in records[:limit]]

    def clear(self) -> None:
        with self._lock:
            self._buffer.clear()


log_buffer = RingBufferHandler(capacity=1000)
log_buffer.setFormatter(logging.Formatter("%(message)s"))
