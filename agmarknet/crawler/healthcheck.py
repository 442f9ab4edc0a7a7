from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from . import config
from .config_validation import validate_runtime_config
from .logging_utils import _crawler_event
from .utils import ensure_dirs, load_json_file, log_line


@dataclass
class HealthResult:
    ok: bool
    checks: dict[str, dict[str, Any]]


def run_health_checks(entrypoint: str = "cli") -> HealthResult:
    checks: dict[str, dict[str, Any]] = {}

    try:
        validate_runtime_config(entrypoint or "cli")
        checks["config"] = {"ok": True}
    except ValueError as exc:
        checks["config"] = {"ok": False, "error": str(exc)}

    try:
        ensure_dirs()
        writable = os.access(config.DATA_DIR, os.W_OK)
        checks["filesystem"] = {"ok": writable, "data_dir": str(config.DATA_DIR)}
    except OSError as exc:
        checks["filesystem"] = {"ok": False, "data_dir": str(config.DATA_DIR), "error": str(exc)}

    # A missing status file is a fresh start; an unreadable one will be
    # replaced by an empty store on the next run, which loses progress.
    status_path = config.STATUS_FILE
    if not status_path.exists():
        checks["status_file"] = {"ok": True, "path": str(status_path), "exists": False}
    else:
        payload = load_json_file(status_path, default=None)
        checks["status_file"] = {
            "ok": isinstance(payload, dict),
            "path": str(status_path),
            "exists": True,
        }

    overall_ok = all(check.get("ok", False) for check in checks.values())

    _crawler_event(
        "state" if overall_ok else "error",
        phase="health",
        context="healthcheck",
        ok=overall_ok,
        checks=checks,
    )

    return HealthResult(ok=overall_ok, checks=checks)


if __name__ == "__main__":  # pragma: no cover
    result = run_health_checks(entrypoint="cli")
    for name, info in result.checks.items():
        status = "OK" if info.get("ok") else "FAIL"
        log_line(f"[HEALTH] {name}: {status} {info}")
    raise SystemExit(0 if result.ok else 1)
