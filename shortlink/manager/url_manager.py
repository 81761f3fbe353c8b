"""
UrlManager module for Shortlink.

Owner-scoped operations on existing records: paginated listing, changing the
destination, and soft deletion. The ownership rule is a plain equality check
(`record.owner_id == caller`) made here, at the service boundary, and never
inside storage. Records created anonymously (owner_id None) cannot be changed
by anyone.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List

from ..errors import Forbidden, NotFound
from ..storage.base import BaseStorage
from ..storage.models import ShortUrlRecord
from .shortening import validate_url

log = logging.getLogger("shortlink.manager.urls")


@dataclass
class Page:
    """One page of an owner's records."""
    page: int
    limit: int
    total: int
    items: List[ShortUrlRecord] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0


class UrlManager:
    def __init__(self, storage: BaseStorage, max_limit: int = 100):
        self.storage = storage
        self.max_limit = max_limit

    def get_owned(self, record_id: str, owner_id: str) -> ShortUrlRecord:
        """
        Return an active record the caller owns.

        Raises:
            NotFound: No active record with this id.
            Forbidden: The record belongs to someone else (or to nobody).
        """
        record = self.storage.find_active_by_id(record_id)
        if record is None:
            raise NotFound(f"URL {record_id} not found")
        if record.owner_id is None or record.owner_id != owner_id:
            log.info("Owner check failed for %s: caller=%s", record_id, owner_id)
            raise Forbidden("You do not have permission to modify this URL")
        return record

    def list_for_owner(self, owner_id: str, page: int = 1, limit: int = 10) -> Page:
        """List the caller's active records, newest first."""
        page = max(1, int(page))
        limit = max(1, min(self.max_limit, int(limit)))
        total = self.storage.count_active_by_owner(owner_id)
        items = self.storage.list_active_by_owner(owner_id, offset=(page - 1) * limit, limit=limit)
        return Page(page=page, limit=limit, total=total, items=items)

    def update(self, record_id: str, owner_id: str, original_url: str) -> ShortUrlRecord:
        """Point the caller's record at a new destination. The code is kept."""
        validate_url(original_url)
        self.get_owned(record_id, owner_id)
        updated = self.storage.update_original_url(record_id, original_url)
        if updated is None:
            # Deleted between the ownership check and the write.
            raise NotFound(f"URL {record_id} not found")
        log.info("Updated %s -> %s", updated.code, original_url)
        return updated

    def remove(self, record_id: str, owner_id: str) -> None:
        """Soft-delete the caller's record; its code stops resolving."""
        record = self.get_owned(record_id, owner_id)
        if not self.storage.soft_delete(record_id):
            raise NotFound(f"URL {record_id} not found")
        log.info("Soft-deleted %s (id=%s)", record.code, record_id)
