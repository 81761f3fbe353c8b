"""
Abstract Base Class for Analytics Backends.

Responsibilities:
    - Define required methods for any visit analytics implementation
    - Support easy substitution (e.g., in-memory, event stream, external metrics)
"""

from abc import ABC, abstractmethod

__all__ = ["BaseAnalytics"]


class BaseAnalytics(ABC):
    """Abstract base for pluggable analytics backends."""

    @abstractmethod
    def log_visit(self, code: str, source: str, valid: bool) -> None:  # pragma: no cover
        """
        Log a redirect attempt for a given short code.

        Args:
            code (str): The short code requested.
            source (str): Source of the visit ("api" or "browser").
            valid (bool): Whether the code resolved to an active record.
        """
        raise NotImplementedError

    @abstractmethod
    def log_count_failure(self, code: str, reason: str) -> None:  # pragma: no cover
        """
        Record that a resolved visit could not be added to the stored visit count.

        Args:
            code (str): The short code whose counter was not incremented.
            reason (str): Short description of the failure.
        """
        raise NotImplementedError

    @abstractmethod
    def summary(self, only_valid: bool = False) -> dict:  # pragma: no cover
        """
        Provide analytics summary.

        Args:
            only_valid (bool): If True, include only valid visits.

        Returns:
            dict: Aggregated analytics data.
        """
        raise NotImplementedError
