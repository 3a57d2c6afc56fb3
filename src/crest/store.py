"""Session scoped storage for option overrides.

A store keeps ``(session, resource, category, key) -> value`` records so
option overrides can outlive a single resource tree, e.g. one tree per
incoming request sharing overrides per user session.
"""

from __future__ import annotations

import threading
from typing import Any, Iterator, NamedTuple, Protocol


class OptionRecord(NamedTuple):
    category: str
    key: str
    value: Any


class OptionStore(Protocol):
    def set_option(
        self,
        session_id: str,
        resource: str,
        category: str,
        key: str,
        value: Any,
    ) -> None: ...

    def find(
        self, session_id: str, resource: str
    ) -> Iterator[OptionRecord]: ...


class InMemoryOptionStore:
    """Process local option store.

    Writes are upserts on ``(session, resource, category, key)``; reads
    return records in insertion order.
    """

    def __init__(self) -> None:
        self._records: dict[tuple[str, str, str, str], Any] = {}
        self._lock = threading.Lock()

    def set_option(
        self,
        session_id: str,
        resource: str,
        category: str,
        key: str,
        value: Any,
    ) -> None:
        with self._lock:
            self._records[(session_id, resource, category, key)] = value

    def find(self, session_id: str, resource: str) -> Iterator[OptionRecord]:
        with self._lock:
            matches = [
                OptionRecord(category, key, value)
                for (session, path, category, key), value in (
                    self._records.items()
                )
                if session == session_id and path == resource
            ]
        return iter(matches)

    def clear(self, session_id: str | None = None) -> None:
        """Drop every record, or only those of one session."""
        with self._lock:
            if session_id is None:
                self._records.clear()
                return
            for record_key in [k for k in self._records if k[0] == session_id]:
                del self._records[record_key]

    def __len__(self) -> int:
        return len(self._records)
