"""
Error taxonomy for Shortlink.

Services raise these; the API layer maps them to HTTP status codes in one
place (see `main.create_app`). Storage backends translate driver errors
(sqlite3, psycopg) into `AllocationFailure`, `StorageError` or
`DuplicateCode` and chain the original exception.
"""

__all__ = [
    "ShortlinkError",
    "AllocationFailure",
    "StorageError",
    "DuplicateCode",
    "NotFound",
    "Forbidden",
    "InvalidCode",
    "InvalidURL",
    "CapacityExceeded",
]


class ShortlinkError(Exception):
    """Base class for every error raised by the shortlink package."""


class AllocationFailure(ShortlinkError):
    """The sequence transaction could not commit. Nothing was persisted; safe to retry."""


class StorageError(ShortlinkError):
    """The record store failed to read or write."""


class DuplicateCode(StorageError):
    """An active record already uses this code (allocator or codec bug)."""

    def __init__(self, code: str):
        super().__init__(f"Duplicate short code: {code}")
        self.code = code


class NotFound(ShortlinkError):
    """No active record matches the given code or id."""


class Forbidden(ShortlinkError):
    """The caller does not own the record."""


class InvalidCode(ShortlinkError, ValueError):
    """A code contains characters outside the Base62 alphabet."""


class InvalidURL(ShortlinkError, ValueError):
    """The destination is not an absolute http/https URL."""


class CapacityExceeded(ShortlinkError):
    """A sequence value does not fit in the fixed code width."""
