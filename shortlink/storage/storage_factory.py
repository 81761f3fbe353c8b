"""
Storage factory – switch storage backend from config (lazy env version)
======================================================================

This module centralizes selection of the storage backend so the rest of the
app can stay ignorant of where data lives. Each backend provides a record
store and a sequence allocator; both factories below resolve the same
backend name the same way.

- Reads environment **at call time** to avoid stale values in tests.
- Imports a DB backend **only if** it is selected.

Environment variables
---------------------
- SHORTLINK_STORAGE_BACKEND: "memory" (default), "sqlite" or "postgres"
- SHORTLINK_DB_DSN:          DSN string if backend=="postgres"
- SHORTLINK_SQLITE_PATH:     database file if backend=="sqlite"
- SHORTLINK_SQLITE_TIMEOUT:  busy timeout in seconds if backend=="sqlite"
"""

from typing import Optional, Tuple
import logging
import os

# In-memory storage always available/lightweight
from .storage import SequenceAllocator, Storage
from .base import BaseSequenceAllocator, BaseStorage

log = logging.getLogger("shortlink.storage")

BACKENDS = ("memory", "sqlite", "postgres")


def _resolve_backend(backend: Optional[str]) -> str:
    be = (backend or os.getenv("SHORTLINK_STORAGE_BACKEND", "memory")).strip().lower()
    if be not in BACKENDS:
        raise ValueError(f"Unknown storage backend: {be!r}")
    return be


def _dsn(kwargs) -> str:
    dsn = kwargs.get("dsn") or os.getenv("SHORTLINK_DB_DSN", "")
    if not dsn:
        raise ValueError("DB_DSN is required for postgres backend (env SHORTLINK_DB_DSN)")
    return dsn


def _sqlite_args(kwargs) -> Tuple[str, float]:
    path = kwargs.get("path") or os.getenv("SHORTLINK_SQLITE_PATH", "shortlink.db")
    timeout = float(kwargs.get("timeout") or os.getenv("SHORTLINK_SQLITE_TIMEOUT", "30"))
    return path, timeout


def get_storage(backend: Optional[str] = None, **kwargs) -> BaseStorage:
    """
    Return a record store based on configuration.

    Parameters
    ----------
    backend : str, optional
        "memory", "sqlite" or "postgres". If omitted, reads SHORTLINK_STORAGE_BACKEND.
    kwargs : dict
        Extra args for the backend: dsn="..." for postgres, path="..." /
        timeout=... for sqlite.
    """
    be = _resolve_backend(backend)
    log.info("Selected storage backend: %s", be)

    if be == "memory":
        return Storage()

    if be == "sqlite":
        from .sqlite_storage import SQLiteStorage
        path, timeout = _sqlite_args(kwargs)
        return SQLiteStorage(path=path, timeout=timeout)

    # Local import to avoid hard dependency when not using postgres
    from .db_storage import DBStorage
    return DBStorage(dsn=_dsn(kwargs))


def get_sequence_allocator(backend: Optional[str] = None, **kwargs) -> BaseSequenceAllocator:
    """
    Return a sequence allocator for the same backend choices as `get_storage`.
    """
    be = _resolve_backend(backend)

    if be == "memory":
        return SequenceAllocator()

    if be == "sqlite":
        from .sqlite_storage import SQLiteSequenceAllocator
        path, timeout = _sqlite_args(kwargs)
        return SQLiteSequenceAllocator(path=path, timeout=timeout)

    from .db_storage import PostgresSequenceAllocator
    return PostgresSequenceAllocator(dsn=_dsn(kwargs))
