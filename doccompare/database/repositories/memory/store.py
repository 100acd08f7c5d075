import copy
import threading
from datetime import datetime, timezone
from typing import Any, TypeVar

T = TypeVar("T")

TABLES: tuple[str, ...] = ("documents", "comparisons", "processing_queue")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def detached(entity: T) -> T:
    """Return a deep copy so callers cannot mutate stored rows."""
    return copy.deepcopy(entity)


class MemoryStore:
    """Process-local tables shared by the in-memory repositories.

    One dict and one monotonically increasing id counter per table, all
    guarded by a single re-entrant lock. Ids are never reused, not even
    after ``clear()``.
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._tables: dict[str, dict[int, Any]] = {name: {} for name in TABLES}
        self._counters: dict[str, int] = {name: 0 for name in TABLES}

    def table(self, name: str) -> dict[int, Any]:
        return self._tables[name]

    def next_id(self, name: str) -> int:
        with self.lock:
            self._counters[name] += 1
            return self._counters[name]

    def clear(self) -> None:
        with self.lock:
            for rows in self._tables.values():
                rows.clear()
