"""
ShorteningService module for Shortlink.

Responsibilities:
    - Validate destination URLs
    - Allocate the next sequence value and encode it as a short code
    - Persist the new record

Design notes:
    - Uniqueness comes from the allocator alone: values never repeat and the
      codec is a bijection, so two shortenings can never produce the same code.
      The store's duplicate check is a safety net; if it fires, something is
      broken and the error is logged at CRITICAL and surfaced, not retried.
    - No retries here. Allocation failures leave nothing persisted, and the
      caller decides whether to try again.
    - Storage and allocator are injected dependencies.
"""

import logging
from typing import Optional
from urllib.parse import urlparse

from ..errors import AllocationFailure, DuplicateCode, InvalidURL
from ..storage.base import BaseSequenceAllocator, BaseStorage
from ..storage.models import ShortUrlRecord
from . import codec

log = logging.getLogger("shortlink.manager.shortening")

DEFAULT_SEQUENCE_NAME = "short_url"


def validate_url(url: str) -> None:
    """
    Validate that a URL has an http/https scheme and a netloc.

    Raises:
        InvalidURL: If the URL is malformed.
    """
    if not url or not isinstance(url, str):
        raise InvalidURL("Invalid URL format")
    try:
        parsed = urlparse(url)
    except ValueError as exc:
        # e.g. an unbalanced IPv6 bracket: "http://[::1"
        raise InvalidURL("Invalid URL format") from exc
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise InvalidURL("Invalid URL format")


class ShorteningService:
    def __init__(
        self,
        allocator: BaseSequenceAllocator,
        storage: BaseStorage,
        sequence_name: str = DEFAULT_SEQUENCE_NAME,
    ):
        """
        Args:
            allocator (BaseSequenceAllocator): Source of unique sequence values.
            storage (BaseStorage): Record store.
            sequence_name (str): Counter every process in a deployment shares.
        """
        self.allocator = allocator
        self.storage = storage
        self.sequence_name = sequence_name

    def shorten(self, original_url: str, owner_id: Optional[str] = None) -> ShortUrlRecord:
        """
        Create a short code for `original_url`.

        Every call creates a new record, even for a URL that was shortened
        before.

        Returns:
            ShortUrlRecord: The persisted record (visit_count == 0).

        Raises:
            InvalidURL: On a malformed URL.
            AllocationFailure: The sequence could not be advanced.
            CapacityExceeded: The sequence outgrew the code width.
            DuplicateCode: The store already has an active record with the code.
            StorageError: The insert failed.
        """
        validate_url(original_url)

        try:
            value = self.allocator.next_value(self.sequence_name)
        except AllocationFailure:
            log.error("Sequence allocation failed for %r", self.sequence_name, exc_info=True)
            raise

        code = codec.encode(value)
        record = ShortUrlRecord(original_url=original_url, code=code, owner_id=owner_id)

        try:
            saved = self.storage.insert(record)
        except DuplicateCode:
            log.critical(
                "Duplicate short code %s for sequence %r value %d; allocator or codec is broken",
                code, self.sequence_name, value,
            )
            raise

        log.info("Shortened %s -> %s (id=%s)", original_url, saved.code, saved.id)
        return saved
