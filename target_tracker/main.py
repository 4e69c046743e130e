from __future__ import annotations

import argparse
import logging
from typing import Sequence

from .config import INPUT_FILE, OUTPUT_DIR, SERVER_HOST, SERVER_PORT
from .data_client import TrackerClient
from .errors import ExcelFormatError, NotFoundError, TrackerError
from .exporter import FORMATS
from .models import ACHIEVEMENT_STATUSES, VALIDATION_STATES
from .periods import PERIODS
from .report_rows import REPORT_TYPES
from .services import ReportService, ReportServiceConfig
from .validation import validate
from .workbook_store import WorkbookStore


def _setup_logging(verbose: bool = False) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="target_tracker",
        description="14 KM target tracking: reports, validation and API server",
    )
    parser.add_argument(
        "--input", default=INPUT_FILE, help="Operator workbook (default: %(default)s)"
    )
    parser.add_argument(
        "--api",
        metavar="URL",
        help="Read from / validate against a running API instead of the workbook",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    report = sub.add_parser("report", help="Export a report")
    report.add_argument("type", choices=REPORT_TYPES)
    report.add_argument("--period", default="all", choices=PERIODS)
    report.add_argument("--format", dest="fmt", default="pdf", choices=FORMATS)
    report.add_argument("--search", default=None)
    report.add_argument(
        "--status",
        default=None,
        choices=VALIDATION_STATES + ACHIEVEMENT_STATUSES,
        help="Validation state (14km) or achievement status (active, target)",
    )
    report.add_argument("--unit", default=None, help="Runner reports: keep one unit")
    report.add_argument("--output-dir", default=OUTPUT_DIR)

    validate_cmd = sub.add_parser("validate", help="Validate a target achievement")
    validate_cmd.add_argument("target_id")

    serve = sub.add_parser("serve", help="Serve the HTTP API over the workbook")
    serve.add_argument("--host", default=SERVER_HOST)
    serve.add_argument("--port", type=int, default=SERVER_PORT)
    return parser.parse_args(argv)


def _report_service(args: argparse.Namespace) -> ReportService:
    if args.api:
        client = TrackerClient(base_url=args.api)
        return ReportService(
            ReportServiceConfig(
                runner_fetcher=client.fetch_runners,
                target_fetcher=client.fetch_targets,
            )
        )
    store = WorkbookStore(args.input)
    return ReportService(
        ReportServiceConfig(
            runner_fetcher=store.list_runners,
            target_fetcher=store.list_targets,
        )
    )


def _run_report(args: argparse.Namespace) -> int:
    service = _report_service(args)
    dataset = service.build(
        args.type,
        period=args.period,
        search=args.search,
        status=args.status,
        unit=args.unit,
    )
    if dataset.degraded:
        logging.warning("Data source unavailable; exporting an empty report")
    path = service.export(dataset, args.fmt, output_dir=args.output_dir)
    logging.info("Report saved to %s (rows=%d)", path, len(dataset.rows))
    return 0


def _run_validate(args: argparse.Namespace) -> int:
    try:
        if args.api:
            record = TrackerClient(base_url=args.api).validate_target(args.target_id)
        else:
            record = validate(WorkbookStore(args.input), args.target_id)
    except NotFoundError as exc:
        logging.error("%s", exc)
        return 1
    logging.info(
        "Target %s (%s) is %s", record.id, record.name, record.validation_status
    )
    return 0


def _run_serve(args: argparse.Namespace) -> int:
    from .api import create_app

    app = create_app(WorkbookStore(args.input))
    logging.info("Serving %s on http://%s:%s", args.input, args.host, args.port)
    app.run(host=args.host, port=args.port)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    _setup_logging(args.verbose)
    handlers = {
        "report": _run_report,
        "validate": _run_validate,
        "serve": _run_serve,
    }
    try:
        return handlers[args.command](args)
    except (ExcelFormatError, FileNotFoundError) as exc:
        logging.error("Failed to load input workbook '%s': %s", args.input, exc)
        return 2
    except (TrackerError, ValueError) as exc:
        logging.error("%s failed: %s", args.command, exc)
        return 1
