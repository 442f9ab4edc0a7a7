"""Excel export helpers for run telemetry."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import pandas as pd

from .telemetry import exports_dir, latest_run_path, prune_old_exports


def export_latest_run_to_excel(dest_path: Optional[Path] = None) -> Path:
    """Create an Excel workbook from the most recent telemetry payload."""

    run_path = latest_run_path()
    if not run_path:
        raise FileNotFoundError("No run telemetry available to export")

    with run_path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)

    df = pd.DataFrame(payload.get("entries", []))
    if df.empty:
        df = pd.DataFrame([{"info": "No entries in latest run"}])
        has_status = False
    else:
        has_status = "status" in df.columns

    def by_status(*statuses: str) -> pd.DataFrame:
        if not has_status:
            return pd.DataFrame()
        return df[df["status"].isin(statuses)].copy()

    completed = by_status("completed")
    skipped = by_status("skipped_no_link", "skipped_no_report")
    failed = by_status("failed", "discovery_failed")

    def safe_pivot(frame, by):
        if frame.empty or any(column not in frame.columns for column in by):
            return pd.DataFrame()
        return frame.groupby(by).size().reset_index(name="count").sort_values("count", ascending=False)

    summary_status = safe_pivot(df, ["status"]) if has_status else pd.DataFrame()
    summary_region = safe_pivot(df, ["region", "status"]) if has_status else pd.DataFrame()

    if dest_path is None:
        target_dir = exports_dir()
        target_dir.mkdir(parents=True, exist_ok=True)
        dest_path = target_dir / f"crawl_{payload['run_id']}.xlsx"

    with pd.ExcelWriter(dest_path, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="All")
        completed.to_excel(writer, index=False, sheet_name="Completed")
        skipped.to_excel(writer, index=False, sheet_name="Skipped")
        failed.to_excel(writer, index=False, sheet_name="Failed")
        summary_status.to_excel(writer, index=False, sheet_name="Summary_Status")
        if not summary_region.empty:
            summary_region.to_excel(writer, index=False, sheet_name="Summary_Region")

    prune_old_exports()
    return Path(dest_path)


if __name__ == "__main__":  # pragma: no cover
    print(export_latest_run_to_excel())


__all__ = ["export_latest_run_to_excel"]
