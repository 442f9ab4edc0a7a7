from __future__ import annotations

from flask import Flask, jsonify, request, send_file

from agmarknet.crawler import config
from agmarknet.crawler.export_excel import export_latest_run_to_excel
from agmarknet.crawler.healthcheck import run_health_checks
from agmarknet.crawler.status_store import StatusStore
from agmarknet.crawler.telemetry import latest_run_path
from agmarknet.crawler.utils import latest_crawl_log_path, load_json_file, tail_lines

app = Flask(__name__)


@app.get("/api/status")
def api_status():
    """Return completed-date counts per state from the status file."""

    store = StatusStore.load(config.STATUS_FILE)
    per_region = store.summary()
    return jsonify(
        {
            "status_file": str(config.STATUS_FILE),
            "total_completed": store.total_completed(),
            "regions": [
                {"region": region, "completed": per_region.get(region, 0)}
                for region in config.REGIONS
            ],
            "last_summary": load_json_file(config.SUMMARY_FILE, default=None),
        }
    )


@app.get("/api/health")
def api_health():
    result = run_health_checks(entrypoint="ui")
    status_code = 200 if result.ok else 503
    return jsonify({"ok": result.ok, "checks": result.checks}), status_code


@app.get("/api/runs/latest")
def api_latest_run():
    path = latest_run_path()
    if path is None:
        return jsonify({"error": "no runs recorded"}), 404
    return jsonify(load_json_file(path, default={}))


@app.get("/api/export.xlsx")
def api_export():
    try:
        path = export_latest_run_to_excel()
    except FileNotFoundError as exc:
        return jsonify({"error": str(exc)}), 404
    return send_file(path, as_attachment=True, download_name=path.name)


@app.get("/api/logs/tail")
def api_log_tail():
    try:
        limit = max(1, min(int(request.args.get("limit", 150)), 2000))
    except ValueError:
        limit = 150
    return jsonify({"lines": tail_lines(latest_crawl_log_path(), limit)})
