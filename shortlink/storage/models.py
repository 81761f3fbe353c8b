"""
Record types shared by all storage backends.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

STATUS_ACTIVE = "active"
STATUS_DELETED = "deleted"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_record_id() -> str:
    return str(uuid.uuid4())


@dataclass
class ShortUrlRecord:
    """
    One shortening: a code, its destination and a visit counter.

    `deleted_at` is the soft-delete marker. A record with it set keeps its row
    but no longer resolves and no longer reserves its code.
    """
    original_url: str
    code: str
    owner_id: Optional[str] = None
    id: str = field(default_factory=new_record_id)
    visit_count: int = 0
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    deleted_at: Optional[datetime] = None

    @property
    def status(self) -> str:
        return STATUS_DELETED if self.deleted_at is not None else STATUS_ACTIVE

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None

    def copy(self) -> "ShortUrlRecord":
        """Detached copy, so callers never hold a backend's live object."""
        return replace(self)
