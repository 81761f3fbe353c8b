"""
RedirectService module for Shortlink.

Resolves a short code to its destination and counts the visit.

The increment is decoupled from the response: `resolve` returns the URL as
soon as the lookup succeeds and hands the increment to `schedule` (for
example FastAPI's `BackgroundTasks.add_task`). Without a scheduler the
increment runs inline before returning. Either way a failed increment never
fails the redirect; it is logged and recorded in analytics so lost counts are
visible.
"""

import logging
from typing import Any, Callable, Optional

from ..analytics.base import BaseAnalytics
from ..errors import NotFound, ShortlinkError
from ..storage.base import BaseStorage

log = logging.getLogger("shortlink.manager.redirect")

Scheduler = Callable[..., Any]  # schedule(fn, *args)


class RedirectService:
    def __init__(self, storage: BaseStorage, analytics: Optional[BaseAnalytics] = None):
        self.storage = storage
        self.analytics = analytics

    def resolve(self, code: str, schedule: Optional[Scheduler] = None, source: str = "browser") -> str:
        """
        Look up `code` and return its destination URL.

        The code is used as given; no normalization.

        Raises:
            NotFound: No active record has this code.
            StorageError: The lookup itself failed.
        """
        record = self.storage.find_active_by_code(code)
        if record is None:
            log.info("Short code not found: %s", code)
            if self.analytics is not None:
                self.analytics.log_visit(code, source=source, valid=False)
            raise NotFound(f"Short code {code!r} not found")

        if self.analytics is not None:
            self.analytics.log_visit(code, source=source, valid=True)

        if schedule is None:
            self.record_visit(record.id, code)
        else:
            schedule(self.record_visit, record.id, code)
        return record.original_url

    def record_visit(self, record_id: str, code: str) -> bool:
        """
        Add one to the stored visit count. Never raises.

        Returns:
            bool: True if the visit was counted.
        """
        try:
            counted = self.storage.increment_visit_count(record_id)
        except ShortlinkError as exc:
            log.error("Visit count increment failed for %s (id=%s): %s", code, record_id, exc, exc_info=True)
            self._count_failure(code, f"storage error: {exc}")
            return False

        if not counted:
            log.warning("Visit count increment matched no record for %s (id=%s)", code, record_id)
            self._count_failure(code, "record missing")
        return counted

    def _count_failure(self, code: str, reason: str) -> None:
        if self.analytics is not None:
            self.analytics.log_count_failure(code, reason)
