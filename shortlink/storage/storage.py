"""
Storage module for Shortlink (in-memory implementation).

Responsibilities:
    - Allocate sequence values per counter name
    - Save short URL records and look them up by code or id
    - Track visit counts
    - Soft-delete records, releasing their code

Design:
    - In-memory reference implementation of both storage contracts.
    - A process-local mutex plays the part of the database transaction, so
      allocations and increments are atomic across threads of one process.
      It is not durable and not shared between processes; use the sqlite or
      postgres backend for that.
    - Records are copied on the way in and out, so callers cannot mutate
      stored state behind the lock.
"""

import threading
from typing import Dict, List, Optional

from ..errors import DuplicateCode
from .base import BaseSequenceAllocator, BaseStorage
from .models import ShortUrlRecord, utcnow


class SequenceAllocator(BaseSequenceAllocator):
    def __init__(self):
        """
        Internal schema:
            self.sequences = {name: last_value}
        """
        self.sequences: Dict[str, int] = {}
        self._lock = threading.Lock()

    def next_value(self, name: str) -> int:
        with self._lock:
            value = self.sequences.get(name, 0) + 1
            self.sequences[name] = value
            return value


class Storage(BaseStorage):
    def __init__(self):
        """
        Initialize empty storage.

        Internal schema:
            self.records      = {record_id: ShortUrlRecord}
            self.active_codes = {code: record_id}   # active records only
        """
        self.records: Dict[str, ShortUrlRecord] = {}
        self.active_codes: Dict[str, str] = {}
        self._lock = threading.Lock()

    def insert(self, record: ShortUrlRecord) -> ShortUrlRecord:
        """
        Save a new record.

        Rules:
            - An active record must not already own the code.
            - Soft-deleted records do not block their old code.
        """
        with self._lock:
            if record.code in self.active_codes:
                raise DuplicateCode(record.code)
            stored = record.copy()
            self.records[stored.id] = stored
            if stored.is_active:
                self.active_codes[stored.code] = stored.id
            return stored.copy()

    def find_active_by_code(self, code: str) -> Optional[ShortUrlRecord]:
        with self._lock:
            record_id = self.active_codes.get(code)
            if record_id is None:
                return None
            return self.records[record_id].copy()

    def find_active_by_id(self, record_id: str) -> Optional[ShortUrlRecord]:
        with self._lock:
            record = self.records.get(record_id)
            if record is None or not record.is_active:
                return None
            return record.copy()

    def increment_visit_count(self, record_id: str) -> bool:
        with self._lock:
            record = self.records.get(record_id)
            if record is None:
                return False
            record.visit_count += 1
            return True

    def soft_delete(self, record_id: str) -> bool:
        with self._lock:
            record = self.records.get(record_id)
            if record is None or not record.is_active:
                return False
            now = utcnow()
            record.deleted_at = now
            record.updated_at = now
            self.active_codes.pop(record.code, None)
            return True

    def update_original_url(self, record_id: str, original_url: str) -> Optional[ShortUrlRecord]:
        with self._lock:
            record = self.records.get(record_id)
            if record is None or not record.is_active:
                return None
            record.original_url = original_url
            record.updated_at = utcnow()
            return record.copy()

    def list_active_by_owner(self, owner_id: str, offset: int = 0, limit: int = 10) -> List[ShortUrlRecord]:
        with self._lock:
            # Newest first; ties keep reverse insertion order (sort is stable).
            owned = [r for r in reversed(list(self.records.values())) if r.is_active and r.owner_id == owner_id]
            owned.sort(key=lambda r: r.created_at, reverse=True)
            return [r.copy() for r in owned[offset:offset + limit]]

    def count_active_by_owner(self, owner_id: str) -> int:
        with self._lock:
            return sum(1 for r in self.records.values() if r.is_active and r.owner_id == owner_id)
