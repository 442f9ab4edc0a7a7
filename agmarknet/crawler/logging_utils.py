from __future__ import annotations

from enum import Enum
from typing import Any

from .models import CalendarDate
from .utils import log_line

# Where/when fields lead every event so lines for one date line up in the log.
_LEADING_FIELDS = ("region", "date", "month", "year")


def _format_value(value: Any) -> str:
    if isinstance(value, CalendarDate):
        return repr(str(value))
    if isinstance(value, Enum):
        return repr(value.value)
    return repr(value)


def _crawler_event(label: str = "", *, phase: str | None = None, **fields: Any) -> None:
    """Emit a ``[CRAWLER][LABEL] key=value, ...`` line.

    ``phase`` stands in for a missing label and is otherwise kept as a field.
    Region and date fields come first, the rest are sorted, and fields left as
    ``None`` are omitted. Dates and outcomes may be passed as-is.
    """

    try:
        tag = (label or phase or "event").upper()
        if phase and label:
            fields.setdefault("phase", phase)
        keys = [key for key in _LEADING_FIELDS if key in fields]
        keys += sorted(key for key in fields if key not in _LEADING_FIELDS)
        payload = ", ".join(
            f"{key}={_format_value(fields[key])}" for key in keys if fields[key] is not None
        )
        log_line(f"[CRAWLER][{tag}] {payload}".rstrip())
    except Exception:
        # Never let logging break the crawl.
        return


__all__ = ["_crawler_event"]
