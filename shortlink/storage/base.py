"""
Base storage interfaces for Shortlink.

Purpose:
    Define two small, stable contracts that every backend (in-memory, SQLite,
    Postgres) implements, so the services never depend on where data lives:

    - BaseSequenceAllocator: the durable, named, strictly increasing counter
      that makes short codes unique.
    - BaseStorage: the record store mapping codes to destinations and visit
      counts, with soft deletion.

Testing & Coverage:
    These are abstract methods and are not executed directly in tests.
    We annotate them with `# pragma: no cover` so coverage tools don't
    penalize the project for un-runnable abstract declarations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .models import ShortUrlRecord


class BaseSequenceAllocator(ABC):
    """Abstract base class for sequence allocators."""

    @abstractmethod  # pragma: no cover
    def next_value(self, name: str) -> int:
        """
        Allocate the next value of the counter `name`.

        The whole read-increment-write runs in one unit of work that excludes
        concurrent allocators for the same name until it commits. The first
        allocation for a name returns 1.

        Returns:
            int: A value strictly greater than every value previously
            returned for `name`.

        Raises:
            AllocationFailure: The unit of work could not commit. The counter
            is unchanged.
        """
        raise NotImplementedError


class BaseStorage(ABC):
    """Abstract base class for short URL record stores."""

    @abstractmethod  # pragma: no cover
    def insert(self, record: ShortUrlRecord) -> ShortUrlRecord:
        """
        Persist a new record.

        Raises:
            DuplicateCode: An active record already uses `record.code`.
            StorageError: Any other backend failure.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def find_active_by_code(self, code: str) -> Optional[ShortUrlRecord]:
        """Return the active record for `code`, or None."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def find_active_by_id(self, record_id: str) -> Optional[ShortUrlRecord]:
        """Return the active record with this id, or None."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def increment_visit_count(self, record_id: str) -> bool:
        """
        Atomically add one to the record's visit count.

        Must be a single atomic operation at the storage layer (never a
        separate read then write), so concurrent redirects are each counted.

        Returns:
            bool: False if the record does not exist.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def soft_delete(self, record_id: str) -> bool:
        """
        Mark an active record deleted.

        Returns:
            bool: False if no active record has this id.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def update_original_url(self, record_id: str, original_url: str) -> Optional[ShortUrlRecord]:
        """Point an active record at a new destination; None if it is not active."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def list_active_by_owner(self, owner_id: str, offset: int = 0, limit: int = 10) -> List[ShortUrlRecord]:
        """Active records of `owner_id`, newest first."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def count_active_by_owner(self, owner_id: str) -> int:
        """Number of active records of `owner_id`."""
        raise NotImplementedError
