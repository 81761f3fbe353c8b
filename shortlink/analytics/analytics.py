"""
Analytics module for Shortlink.

Responsibilities:
    - Track redirect attempts per short code
    - Track source of the visit (browser or API)
    - Track validity (resolved vs. not found)
    - Track visit-count increment failures, which otherwise under-count silently
    - Provide summary statistics

Attributes:
    visit_logs (Dict[str, List[Dict]]): Maps code -> list of visit events
    count_failures (Dict[str, List[Dict]]): Maps code -> list of failed increments

This is process-local and in-memory; the durable visit count lives in storage.
"""

import threading
import time
from typing import Dict, List

from .base import BaseAnalytics


class Analytics(BaseAnalytics):
    def __init__(self):
        """
        Initialize empty logs.

        visit_logs structure:
        { code: [ {"timestamp": float, "source": str, "valid": bool}, ... ] }

        count_failures structure:
        { code: [ {"timestamp": float, "reason": str}, ... ] }
        """
        self.visit_logs: Dict[str, List[Dict]] = {}
        self.count_failures: Dict[str, List[Dict]] = {}
        self._lock = threading.Lock()

    def log_visit(self, code: str, source: str = "browser", valid: bool = True) -> None:
        """
        Log a visit event for a short code.

        Args:
            code (str): The short code requested.
            source (str): Source of the visit ('browser' or 'api').
            valid (bool): Whether the code resolved (exists and is active).
        """
        with self._lock:
            self.visit_logs.setdefault(code, []).append({
                "timestamp": time.time(),
                "source": source,
                "valid": valid,
            })

    def log_count_failure(self, code: str, reason: str) -> None:
        with self._lock:
            self.count_failures.setdefault(code, []).append({
                "timestamp": time.time(),
                "reason": reason,
            })

    def get_visits(self, code: str, only_valid: bool = False) -> List[Dict]:
        """
        Get all visit events for a given code.

        Args:
            code (str): Short code to query.
            only_valid (bool): If True, return only visits where valid=True.

        Returns:
            List[Dict]: List of visit events, empty if none exist.
        """
        with self._lock:
            logs = list(self.visit_logs.get(code, []))
        if only_valid:
            logs = [log for log in logs if log.get("valid", True)]
        return logs

    def total_count_failures(self) -> int:
        with self._lock:
            return sum(len(v) for v in self.count_failures.values())

    def summary(self, only_valid: bool = False) -> Dict[str, Dict]:
        """
        Get a summary of visit events for all codes.

        Args:
            only_valid (bool): If True, include only valid visits in summary.

        Returns:
            Dict[str, Dict]: Dictionary mapping code -> summary including:
                - total_visits: int
                - last_visit: float timestamp or None
                - sources: dict with source counts
                - valid_visits: int (total valid visits)
                - count_failures: int (visits not added to the stored count)

        Example:
            {
                "00000b": {
                    "total_visits": 5,
                    "last_visit": 1755835287.5517154,
                    "sources": {"browser": 3, "api": 2},
                    "valid_visits": 4,
                    "count_failures": 0
                }
            }
        """
        with self._lock:
            visit_logs = {code: list(logs) for code, logs in self.visit_logs.items()}
            failures = {code: len(items) for code, items in self.count_failures.items()}

        summary_data: Dict[str, Dict] = {}
        for code, logs in visit_logs.items():
            filtered_logs = [log for log in logs if log.get("valid", True)] if only_valid else logs

            # Skip entries if only_valid=True and no valid visits
            if only_valid and not filtered_logs:
                continue

            sources_count: Dict[str, int] = {}
            for log in filtered_logs:
                src = log["source"]
                sources_count[src] = sources_count.get(src, 0) + 1

            summary_data[code] = {
                "total_visits": len(filtered_logs),
                "last_visit": filtered_logs[-1]["timestamp"] if filtered_logs else None,
                "sources": sources_count,
                "valid_visits": sum(1 for log in logs if log.get("valid", True)),
                "count_failures": failures.get(code, 0),
            }
        return summary_data
