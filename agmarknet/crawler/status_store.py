"""Durable record of which (region, date) crawls have completed."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

from .logging_utils import _crawler_event
from .models import CalendarDate
from .utils import load_json_file, log_line, save_json_file


class StatusStore:
    """Map of region -> completed ``CalendarDate`` values.

    The whole map is the unit of durability: ``save`` rewrites the file in
    full and swaps it into place, so a killed process leaves either the
    previous or the new document on disk.
    """

    def __init__(self, path: Path, completed: Dict[str, List[CalendarDate]] | None = None) -> None:
        self.path = Path(path)
        self._completed: Dict[str, List[CalendarDate]] = {}
        self._index: Dict[str, set] = {}
        for region, dates in (completed or {}).items():
            for date in dates:
                self.mark_done(region, date)

    @classmethod
    def load(cls, path: Path) -> "StatusStore":
        """Load the persisted store, falling back to empty on any problem."""

        path = Path(path)
        if not path.exists():
            log_line(f"[STATUS] No status file at {path}; starting empty")
            return cls(path)

        payload = load_json_file(path, default=None)
        if not isinstance(payload, dict):
            _crawler_event("error", phase="status", step="load_malformed", path=str(path))
            return cls(path)

        store = cls(path)
        dropped = 0
        for region, entry in payload.items():
            dates = entry.get("completed") if isinstance(entry, dict) else None
            if not isinstance(dates, list):
                dropped += 1
                continue
            for raw in dates:
                try:
                    store.mark_done(str(region), CalendarDate.from_dict(raw))
                except (KeyError, TypeError, ValueError):
                    dropped += 1

        _crawler_event(
            "status",
            step="loaded",
            path=str(path),
            regions=len(store._completed),
            completed=store.total_completed(),
            dropped=dropped,
        )
        return store

    def is_done(self, region: str, date: CalendarDate) -> bool:
        return date in self._index.get(region, ())

    def mark_done(self, region: str, date: CalendarDate) -> None:
        seen = self._index.setdefault(region, set())
        if date in seen:
            return
        seen.add(date)
        self._completed.setdefault(region, []).append(date)

    def completed(self, region: str) -> List[CalendarDate]:
        return list(self._completed.get(region, []))

    def regions(self) -> List[str]:
        return list(self._completed)

    def total_completed(self) -> int:
        return sum(len(dates) for dates in self._completed.values())

    def summary(self) -> Dict[str, int]:
        """Return completed-date counts per region."""

        return {region: len(dates) for region, dates in self._completed.items()}

    def to_payload(self) -> Dict[str, Any]:
        return {
            region: {"completed": [date.to_dict() for date in dates]}
            for region, dates in self._completed.items()
        }

    def save(self) -> None:
        save_json_file(self.path, self.to_payload())


__all__ = ["StatusStore"]
