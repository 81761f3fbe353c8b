"""
Pydantic request/response models for the Shortlink HTTP API.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .config import settings
from .manager.url_manager import Page
from .storage.models import ShortUrlRecord


class ShortenRequest(BaseModel):
    """Request payload for creating a new short URL."""
    url: str = Field(..., description="Absolute http/https URL to shorten")


class UpdateUrlRequest(BaseModel):
    """Request payload for pointing an existing short URL somewhere else."""
    url: str = Field(..., description="New absolute http/https destination")


class ShortUrlOut(BaseModel):
    id: str
    short_code: str
    short_url: str
    original_url: str
    visit_count: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_record(cls, record: ShortUrlRecord) -> "ShortUrlOut":
        return cls(
            id=record.id,
            short_code=record.code,
            short_url=build_short_url(record.code),
            original_url=record.original_url,
            visit_count=record.visit_count,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class ShortUrlDetail(ShortUrlOut):
    """Owner view of a record, with the sequence value behind its code."""
    sequence: Optional[int] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ShortUrlPage(BaseModel):
    data: List[ShortUrlOut]
    pagination: Pagination

    @classmethod
    def from_page(cls, page: Page) -> "ShortUrlPage":
        return cls(
            data=[ShortUrlOut.from_record(r) for r in page.items],
            pagination=Pagination(
                page=page.page,
                limit=page.limit,
                total=page.total,
                total_pages=page.total_pages,
            ),
        )


def build_short_url(code: str) -> str:
    """Public short URL for a code, e.g. "http://localhost:8000/00000b"."""
    return f"{settings.DOMAIN}/{code}"
