"""
SQLite-backed storage for Shortlink
==================================

Durable single-host backend: sequences and records survive restarts, and
several worker processes on one machine can share the database file.

Key Design Points
-----------------
- **Allocation**: `BEGIN IMMEDIATE` takes SQLite's reserved (writer) lock before
  the counter is read, so concurrent allocators queue on the lock and each one
  sees the previous commit. Any error rolls back; the counter is unchanged.
- **Visit counts**: a single `UPDATE ... SET visit_count = visit_count + 1` in
  autocommit mode; no read-modify-write in Python.
- **Uniqueness**: a partial unique index on `code WHERE deleted_at IS NULL`
  rejects duplicate active codes; soft-deleted rows keep their code but do
  not reserve it.
- **Connections**: one short-lived connection per call, autocommit
  (`isolation_level=None`) with explicit BEGIN where a transaction is needed.
  `timeout` is the busy wait on a locked database.
"""

import contextlib
import logging
import sqlite3
from datetime import datetime
from typing import List, Optional

from ..errors import AllocationFailure, DuplicateCode, StorageError
from .base import BaseSequenceAllocator, BaseStorage
from .models import ShortUrlRecord, utcnow

log = logging.getLogger("shortlink.storage.sqlite")

SCHEMA = """
CREATE TABLE IF NOT EXISTS sequences (
    name  TEXT PRIMARY KEY,
    value INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS short_urls (
    id           TEXT PRIMARY KEY,
    owner_id     TEXT,
    original_url TEXT NOT NULL,
    code         TEXT NOT NULL,
    visit_count  INTEGER NOT NULL DEFAULT 0,
    created_at   TEXT NOT NULL,
    updated_at   TEXT NOT NULL,
    deleted_at   TEXT
);

CREATE UNIQUE INDEX IF NOT EXISTS ux_short_urls_code_active
    ON short_urls (code) WHERE deleted_at IS NULL;

CREATE INDEX IF NOT EXISTS ix_short_urls_owner_active
    ON short_urls (owner_id) WHERE deleted_at IS NULL;
"""

_COLUMNS = "id, owner_id, original_url, code, visit_count, created_at, updated_at, deleted_at"


def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(timespec="microseconds") if value is not None else None


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _row_to_record(row: sqlite3.Row) -> ShortUrlRecord:
    return ShortUrlRecord(
        id=row["id"],
        owner_id=row["owner_id"],
        original_url=row["original_url"],
        code=row["code"],
        visit_count=row["visit_count"],
        created_at=_parse_ts(row["created_at"]),
        updated_at=_parse_ts(row["updated_at"]),
        deleted_at=_parse_ts(row["deleted_at"]),
    )


class _SQLiteBase:
    """Connection handling and schema bootstrap shared by both SQLite classes."""

    def __init__(self, path: str = "shortlink.db", timeout: float = 30.0) -> None:
        self.path = path
        self.timeout = timeout
        self._init_database()

    @contextlib.contextmanager
    def _conn(self):
        """Context manager creating an autocommit sqlite3 connection."""
        log.debug("Opening sqlite connection to %s", self.path)
        con = sqlite3.connect(self.path, timeout=self.timeout, isolation_level=None)
        con.row_factory = sqlite3.Row
        try:
            yield con
        finally:
            con.close()

    def _init_database(self) -> None:
        """Create tables and indexes if they don't exist."""
        with self._conn() as con:
            con.executescript(SCHEMA)


class SQLiteSequenceAllocator(_SQLiteBase, BaseSequenceAllocator):
    """SQLite implementation of the sequence allocator."""

    def next_value(self, name: str) -> int:
        try:
            with self._conn() as con:
                try:
                    con.execute("BEGIN IMMEDIATE")
                    row = con.execute("SELECT value FROM sequences WHERE name = ?", (name,)).fetchone()
                    if row is None:
                        value = 1
                        con.execute("INSERT INTO sequences (name, value) VALUES (?, ?)", (name, value))
                    else:
                        value = row["value"] + 1
                        con.execute("UPDATE sequences SET value = ? WHERE name = ?", (value, name))
                    con.execute("COMMIT")
                except sqlite3.Error:
                    if con.in_transaction:
                        con.execute("ROLLBACK")
                    raise
        except sqlite3.Error as exc:
            raise AllocationFailure(f"Could not allocate from sequence {name!r}: {exc}") from exc
        return value


class SQLiteStorage(_SQLiteBase, BaseStorage):
    """SQLite implementation of the record store."""

    def insert(self, record: ShortUrlRecord) -> ShortUrlRecord:
        try:
            with self._conn() as con:
                con.execute(
                    f"INSERT INTO short_urls ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        record.id,
                        record.owner_id,
                        record.original_url,
                        record.code,
                        record.visit_count,
                        _ts(record.created_at),
                        _ts(record.updated_at),
                        _ts(record.deleted_at),
                    ),
                )
        except sqlite3.IntegrityError as exc:
            # Only the active-code index signals a duplicate code.
            if "short_urls.code" in str(exc):
                raise DuplicateCode(record.code) from exc
            raise StorageError(f"Could not insert record {record.id}: {exc}") from exc
        except sqlite3.Error as exc:
            raise StorageError(f"Could not insert record {record.id}: {exc}") from exc
        return record.copy()

    def _fetch_one(self, where: str, params: tuple) -> Optional[ShortUrlRecord]:
        try:
            with self._conn() as con:
                row = con.execute(f"SELECT {_COLUMNS} FROM short_urls WHERE {where}", params).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Lookup failed: {exc}") from exc
        return _row_to_record(row) if row else None

    def find_active_by_code(self, code: str) -> Optional[ShortUrlRecord]:
        return self._fetch_one("code = ? AND deleted_at IS NULL", (code,))

    def find_active_by_id(self, record_id: str) -> Optional[ShortUrlRecord]:
        return self._fetch_one("id = ? AND deleted_at IS NULL", (record_id,))

    def _execute_write(self, sql: str, params: tuple) -> int:
        try:
            with self._conn() as con:
                cur = con.execute(sql, params)
                return cur.rowcount
        except sqlite3.Error as exc:
            raise StorageError(f"Write failed: {exc}") from exc

    def increment_visit_count(self, record_id: str) -> bool:
        return self._execute_write(
            "UPDATE short_urls SET visit_count = visit_count + 1 WHERE id = ?",
            (record_id,),
        ) == 1

    def soft_delete(self, record_id: str) -> bool:
        now = _ts(utcnow())
        return self._execute_write(
            "UPDATE short_urls SET deleted_at = ?, updated_at = ? WHERE id = ? AND deleted_at IS NULL",
            (now, now, record_id),
        ) == 1

    def update_original_url(self, record_id: str, original_url: str) -> Optional[ShortUrlRecord]:
        updated = self._execute_write(
            "UPDATE short_urls SET original_url = ?, updated_at = ? WHERE id = ? AND deleted_at IS NULL",
            (original_url, _ts(utcnow()), record_id),
        )
        if updated != 1:
            return None
        return self.find_active_by_id(record_id)

    def list_active_by_owner(self, owner_id: str, offset: int = 0, limit: int = 10) -> List[ShortUrlRecord]:
        try:
            with self._conn() as con:
                rows = con.execute(
                    f"""
                    SELECT {_COLUMNS} FROM short_urls
                    WHERE owner_id = ? AND deleted_at IS NULL
                    ORDER BY created_at DESC, rowid DESC
                    LIMIT ? OFFSET ?
                    """,
                    (owner_id, limit, offset),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"Listing failed: {exc}") from exc
        return [_row_to_record(row) for row in rows]

    def count_active_by_owner(self, owner_id: str) -> int:
        try:
            with self._conn() as con:
                row = con.execute(
                    "SELECT COUNT(*) FROM short_urls WHERE owner_id = ? AND deleted_at IS NULL",
                    (owner_id,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Count failed: {exc}") from exc
        return int(row[0])
