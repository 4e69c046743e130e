"""Flask app exposing runners, target achievements, validation and reports.

Every read goes through :class:`ReportService` so that a failing store
answers with an empty collection and ``"degraded": true`` instead of a 500.
"""

from __future__ import annotations

import logging
from datetime import datetime
from io import BytesIO

from flask import Flask, jsonify, request, send_file
from flask.typing import ResponseReturnValue

from .config import DASHBOARD_RECENT_LIMIT, REPORT_TITLES
from .errors import NotFoundError
from .exporter import MIME_TYPES, export_report, normalize_format
from .metrics import format_pace, format_time
from .models import Runner, RunnerDetail, TargetAchievement
from .report_rows import (
    REPORT_TYPES,
    filter_runners,
    join_runners,
    runner_detail,
    summarize_targets,
    target_sort_key,
)
from .services import ReportService, ReportServiceConfig
from .status import classify
from .utils import format_date_id
from .validation import validate

LOGGER = logging.getLogger(__name__)

DEGRADED_HEADER = "X-Report-Degraded"


def runner_view(runner: Runner) -> dict:
    return {
        "id": runner.id,
        "name": runner.name,
        "rank": runner.rank,
        "unit": runner.unit,
        "totalDistance": runner.total_distance,
        "totalSessions": runner.total_sessions,
        "createdAt": runner.created_at.isoformat() if runner.created_at else None,
        "status": classify(runner.total_distance),
    }


def target_view(target: TargetAchievement) -> dict:
    view = target.to_dict()
    view["time_taken"] = format_time(target.duration_sec)
    view["pace"] = format_pace(target.duration_sec, target.distance_km)
    return view


def runner_detail_view(detail: RunnerDetail) -> dict:
    latest = detail.latest
    view = runner_view(detail.runner)
    view.update(
        {
            "achievedDate": latest.achieved_date.isoformat()
            if latest and latest.achieved_date
            else None,
            "achievedDateLabel": format_date_id(latest.achieved_date) if latest else "-",
            "latestTime": format_time(latest.duration_sec) if latest else "-",
            "latestPace": format_pace(latest.duration_sec, latest.distance_km)
            if latest
            else "-",
            "history": [target_view(t) for t in detail.history],
        }
    )
    return view


def _newest_first(targets: list[TargetAchievement]) -> list[TargetAchievement]:
    return sorted(targets, key=target_sort_key)


def _listing(data, degraded: bool) -> ResponseReturnValue:
    response = jsonify({"data": data, "degraded": degraded})
    if degraded:
        response.headers[DEGRADED_HEADER] = "1"
    return response


def create_app(store) -> Flask:
    """Build the app around ``store`` (``InMemoryStore`` or ``WorkbookStore``)."""

    app = Flask(__name__)
    reports = ReportService(
        ReportServiceConfig(
            runner_fetcher=store.list_runners,
            target_fetcher=store.list_targets,
        )
    )

    def joined_targets() -> tuple[list[TargetAchievement], list[Runner], bool]:
        targets, degraded = reports.fetch_targets()
        runners, runners_degraded = reports.fetch_runners()
        if not runners_degraded:
            targets = join_runners(targets, runners)
        return _newest_first(targets), runners, degraded or runners_degraded

    @app.get("/")
    def health() -> ResponseReturnValue:
        return jsonify({"ok": True})

    @app.get("/api/runners")
    def list_runners() -> ResponseReturnValue:
        runners, degraded = reports.fetch_runners()
        try:
            selected = filter_runners(
                runners,
                search=request.args.get("search"),
                status=request.args.get("status"),
                unit=request.args.get("unit"),
            )
        except ValueError as exc:
            return jsonify({"message": str(exc)}), 400
        selected.sort(key=lambda r: r.id)
        return _listing([runner_view(r) for r in selected], degraded)

    @app.get("/api/runners/<runner_id>")
    def get_runner(runner_id: str) -> ResponseReturnValue:
        runners, degraded = reports.fetch_runners()
        if degraded:
            return jsonify({"message": "Runner data unavailable", "degraded": True}), 503
        targets, targets_degraded = reports.fetch_targets()
        try:
            detail = runner_detail(runners, targets, runner_id)
        except NotFoundError:
            return jsonify({"message": "Runner not found"}), 404
        return _listing(runner_detail_view(detail), targets_degraded)

    @app.get("/api/targets/14km")
    def list_targets() -> ResponseReturnValue:
        targets, _, degraded = joined_targets()
        return _listing([target_view(t) for t in targets], degraded)

    @app.post("/api/targets/14km/validate/<target_id>")
    def validate_target(target_id: str) -> ResponseReturnValue:
        try:
            record = validate(store, target_id)
        except NotFoundError:
            return jsonify({"message": "Target record not found"}), 404
        return jsonify({"data": target_view(record)})

    @app.get("/api/dashboard")
    def dashboard() -> ResponseReturnValue:
        targets, runners, degraded = joined_targets()
        summary = summarize_targets(targets)
        summary["runners_total"] = len(runners)
        return _listing(
            {
                "summary": summary,
                "recent": [target_view(t) for t in targets[:DASHBOARD_RECENT_LIMIT]],
            },
            degraded,
        )

    @app.get("/api/reports/<report_type>")
    def download_report(report_type: str) -> ResponseReturnValue:
        if report_type not in REPORT_TYPES:
            return jsonify({"message": f"Unknown report type '{report_type}'"}), 404
        try:
            fmt = normalize_format(request.args.get("format", "pdf"))
            dataset = reports.build(
                report_type,
                period=request.args.get("period"),
                search=request.args.get("search"),
                status=request.args.get("status"),
                unit=request.args.get("unit"),
            )
        except ValueError as exc:
            return jsonify({"message": str(exc)}), 400
        payload = export_report(
            dataset.rows,
            REPORT_TITLES[report_type],
            generated_at=datetime.now(),
            fmt=fmt,
            period=dataset.period,
        )
        response = send_file(
            BytesIO(payload),
            mimetype=MIME_TYPES[fmt],
            as_attachment=True,
            download_name=dataset.filename(fmt),
        )
        if dataset.degraded:
            response.headers[DEGRADED_HEADER] = "1"
        return response

    return app


__all__ = ["create_app", "runner_view", "target_view", "runner_detail_view"]
