from __future__ import annotations

import logging
import threading
from collections import OrderedDict

from app.application.ports.processed_store import ProcessedMessageStorePort
from app.application.ports.session_store import SessionStorePort
from app.domain.entities.processed_message import ProcessedMessageRecord
from app.domain.entities.session import Session


class MemorySessionStore(SessionStorePort):
    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def get(self, correspondent_id: str) -> Session | None:
        with self._lock:
            return self._sessions.get(correspondent_id)

    def put(self, correspondent_id: str, session: Session) -> None:
        with self._lock:
            self._sessions[correspondent_id] = session

    def delete(self, correspondent_id: str) -> None:
        with self._lock:
            self._sessions.pop(correspondent_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


class MemoryProcessedMessageStore(ProcessedMessageStorePort):
    """
    Processed-message keys with a time-to-live and a hard entry cap.
    Insertion order equals seen_at order, so the oldest record is always first.
    """

    def __init__(self, ttl_seconds: float = 3600.0, max_entries: int = 10_000) -> None:
        if ttl_seconds <= 0 or max_entries <= 0:
            raise ValueError("ttl_seconds and max_entries must be positive")
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._records: OrderedDict[str, ProcessedMessageRecord] = OrderedDict()
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def add_if_absent(self, key: str, seen_at: float) -> bool:
        with self._lock:
            self._purge_locked(seen_at)
            if key in self._records:
                return False
            while len(self._records) >= self._max_entries:
                evicted_key, _ = self._records.popitem(last=False)
                self._logger.debug("Processed store full, evicted %s", evicted_key)
            self._records[key] = ProcessedMessageRecord(key=key, seen_at=seen_at)
            return True

    def contains(self, key: str, now_ts: float) -> bool:
        with self._lock:
            record = self._records.get(key)
            return record is not None and now_ts - record.seen_at < self._ttl

    def purge_expired(self, now_ts: float) -> int:
        with self._lock:
            return self._purge_locked(now_ts)

    def _purge_locked(self, now_ts: float) -> int:
        removed = 0
        while self._records:
            oldest = next(iter(self._records.values()))
            if now_ts - oldest.seen_at < self._ttl:
                break
            self._records.popitem(last=False)
            removed += 1
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
