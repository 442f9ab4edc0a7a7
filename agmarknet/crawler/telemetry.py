"""Run telemetry and analytics helpers."""

from __future__ import annotations

import json
import time
import uuid
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import config


def runs_dir() -> Path:
    return config.DATA_DIR / "runs"


def exports_dir() -> Path:
    return config.DATA_DIR / "exports"


MAX_EXPORTS = 5


def _ts() -> str:
    return time.strftime("%Y%m%d_%H%M%S")


class RunTelemetry:
    """Collect per-run telemetry for analytics and export."""

    def __init__(self, mode: str = "crawl") -> None:
        self.run_id = f"{_ts()}_{uuid.uuid4().hex[:8]}"
        self.mode = mode
        self.started_at = time.time()
        self.entries: List[Dict[str, Any]] = []
        self.summary: Dict[str, Any] = defaultdict(int)

    def add(self, status: str, reason: str, meta: Dict[str, Any]) -> None:
        self.entries.append(
            {
                "status": status,
                "reason": reason,
                **meta,
            }
        )
        self.summary[f"count_{status}"] += 1

    def finalize(self, extra: Optional[Dict[str, Any]] = None) -> Path:
        payload = {
            "run_id": self.run_id,
            "mode": self.mode,
            "started_at": self.started_at,
            "ended_at": time.time(),
            "summary": dict(self.summary),
            "entries": self.entries,
            **(extra or {}),
        }
        target_dir = runs_dir()
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / f"run_{self.run_id}.json"
        with path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False, indent=2)
        return path


def latest_run_path() -> Optional[Path]:
    """Return the most recent run telemetry JSON path, if any."""

    target_dir = runs_dir()
    if not target_dir.is_dir():
        return None
    runs = sorted(target_dir.glob("run_*.json"))
    return runs[-1] if runs else None


def prune_old_exports() -> None:
    files = sorted(exports_dir().glob("*.xlsx"))
    while len(files) > MAX_EXPORTS:
        old = files.pop(0)
        try:
            old.unlink()
        except OSError:
            continue


__all__ = [
    "RunTelemetry",
    "latest_run_path",
    "prune_old_exports",
    "runs_dir",
    "exports_dir",
]
