from __future__ import annotations

"""Outcome and error taxonomy for crawl attempts.

Codes are written to structured log lines and run telemetry so a finished run
can explain why a date was left undone. Every non-completed outcome simply
means "retry on the next run".
"""

from enum import Enum


class ErrorCode:
    DISCOVERY = "discovery_failed"
    NO_LINK = "day_link_missing"
    NO_REPORT = "report_unavailable"
    EXTRACTION = "extraction_failed"
    NAVIGATION = "navigation_error"


class DateOutcome(str, Enum):
    COMPLETED = "completed"
    SKIPPED_NO_LINK = "skipped_no_link"
    SKIPPED_NO_REPORT = "skipped_no_report"
    FAILED = "failed"

    @property
    def is_skip(self) -> bool:
        return self in (DateOutcome.SKIPPED_NO_LINK, DateOutcome.SKIPPED_NO_REPORT)


class ExtractionError(ValueError):
    """Raised when a report page cannot be parsed in full."""


class DayLinkMissing(LookupError):
    """Raised when the requested day has no link after a fresh page load."""


class ReportUnavailable(RuntimeError):
    """Raised when the "view report" control does not appear in time."""


__all__ = [
    "ErrorCode",
    "DateOutcome",
    "ExtractionError",
    "DayLinkMissing",
    "ReportUnavailable",
]
