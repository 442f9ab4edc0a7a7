"""Append-only per-year CSV output."""

from __future__ import annotations

import csv
import os
from pathlib import Path
from typing import Callable, Sequence

from . import config
from .models import Record


class YearlyCsvSink:
    """Append records to one CSV file per year.

    Files are never rewritten and carry no header. Each call to ``append``
    writes one date's batch followed by a blank separator line, and is
    flushed to disk before returning.
    """

    def __init__(self, path_for_year: Callable[[int], Path] | None = None) -> None:
        self._path_for_year = path_for_year or config.output_path

    def path(self, year: int) -> Path:
        return Path(self._path_for_year(year))

    def append(self, year: int, records: Sequence[Record]) -> int:
        path = self.path(year)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.writer(handle, lineterminator="\n")
            for record in records:
                writer.writerow(record.as_row())
            handle.write("\n")
            handle.flush()
            os.fsync(handle.fileno())
        return len(records)


__all__ = ["YearlyCsvSink"]
