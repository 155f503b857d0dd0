"""CLI entrypoint for civic service request metrics."""

from __future__ import annotations

import argparse
import json
import sys
import time
from datetime import datetime, timedelta
from pathlib import Path

from civic_requests.analysis.bottlenecks import request_bottleneck_analysis
from civic_requests.common.config_loader import load_analysis_config
from civic_requests.common.constants import COMMANDS, EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS
from civic_requests.common.dates import parse_date
from civic_requests.common.errors import AnalysisServiceError, ConfigError, PipelineError
from civic_requests.common.ids import generate_session_id
from civic_requests.common.logging import build_logger, log_event
from civic_requests.pipeline.decode import SUPPORTED_FORMATS
from civic_requests.pipeline.export import write_records_csv
from civic_requests.pipeline.mapping import parse_mapping_args
from civic_requests.pipeline.reports import write_dashboard
from civic_requests.pipeline.session import RequestSession


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("input", help="CSV or JSON file of service requests")
    parser.add_argument("--format", default=None, choices=SUPPORTED_FORMATS)
    parser.add_argument("--map", action="append", default=[], metavar="FIELD=COLUMN")
    parser.add_argument("--accept-suggested", action="store_true")
    parser.add_argument("--from", dest="date_from", default=None)
    parser.add_argument("--to", dest="date_to", default=None)
    parser.add_argument("--out", default=None)
    parser.add_argument("--records-out", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--session-id", default=None)
    parser.add_argument("--log-dir", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    return parser.parse_args(argv)


def _emit(payload) -> None:
    sys.stdout.write(json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True))
    sys.stdout.write("\n")


def _parse_bound(value: str | None, *, end_of_day: bool = False) -> datetime | None:
    if value is None:
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise ConfigError(f"Could not parse date bound: {value}")
    # A bare date as the upper bound covers the whole day.
    if end_of_day and len(value.strip()) <= 10 and parsed.time() == datetime.min.time():
        parsed = parsed + timedelta(days=1) - timedelta(microseconds=1)
    return parsed


def _parse_range(args: argparse.Namespace) -> tuple[datetime, datetime] | None:
    start = _parse_bound(args.date_from)
    end = _parse_bound(args.date_to, end_of_day=True)
    if start is None and end is None:
        return None
    if start is None or end is None:
        raise ConfigError("Both --from and --to are required to filter by created date.")
    return start, end


def run_headers(args: argparse.Namespace) -> int:
    session = RequestSession()
    table = session.load_file(Path(args.input), fmt=args.format)
    _emit(
        {
            "headers": table.headers,
            "row_count": len(table.rows),
            "suggested_mapping": session.suggested_mapping,
        }
    )
    return EXIT_SUCCESS


def run_report(args: argparse.Namespace, logger, session_id: str) -> int:
    started = time.monotonic()
    try:
        overrides = parse_mapping_args(args.map)
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc
    date_range = _parse_range(args)

    session = RequestSession()
    table = session.load_file(Path(args.input), fmt=args.format)
    log_event(logger, "decoded input", session_id=session_id, stage="decode", event="STAGE_END", status="ok", rows_out=len(table.rows))

    mapping = dict(session.suggested_mapping) if args.accept_suggested else {}
    mapping.update(overrides)
    records = session.apply_mapping(mapping)
    log_event(
        logger,
        "transformed rows",
        session_id=session_id,
        stage="transform",
        event="STAGE_END",
        status="ok",
        rows_in=len(table.rows),
        rows_out=len(records),
    )

    if date_range is not None:
        session.set_date_range(*date_range)

    payload = session.metrics()
    if args.out:
        write_dashboard(Path(args.out), payload)
    else:
        _emit(payload)
    if args.records_out:
        write_records_csv(Path(args.records_out), records)

    log_event(
        logger,
        "report built",
        session_id=session_id,
        stage="aggregate",
        event="STAGE_END",
        status="ok",
        rows_in=len(records),
        rows_out=payload["filtered_count"],
        duration_ms=int((time.monotonic() - started) * 1000),
    )
    return EXIT_SUCCESS


def run_analyze(args: argparse.Namespace, logger, session_id: str) -> int:
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    config = load_analysis_config(Path(args.config_dir), overlay_config_dir=overlay_config_dir)
    session = RequestSession()
    session.load_file(Path(args.input), fmt=args.format)

    started = time.monotonic()
    try:
        analysis = request_bottleneck_analysis(session.raw_text, config)
    except AnalysisServiceError as exc:
        log_event(
            logger,
            "bottleneck analysis failed",
            session_id=session_id,
            stage="analyze",
            source=config.endpoint,
            event="STAGE_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        _emit({"error": str(exc)})
        return EXIT_PARTIAL

    log_event(
        logger,
        "bottleneck analysis received",
        session_id=session_id,
        stage="analyze",
        source=config.endpoint,
        event="STAGE_END",
        status="ok",
        duration_ms=int((time.monotonic() - started) * 1000),
    )
    _emit({"analysis": analysis})
    return EXIT_SUCCESS


def run_command(args: argparse.Namespace) -> int:
    session_id = args.session_id or generate_session_id()
    log_dir = Path(args.log_dir) if args.log_dir else None
    logger = build_logger(session_id, log_dir=log_dir, level=args.log_level)

    log_event(logger, "command start", session_id=session_id, stage=args.command, event="STAGE_START", status="ok")
    try:
        if args.command == "headers":
            return run_headers(args)
        if args.command == "report":
            return run_report(args, logger, session_id)
        if args.command == "analyze":
            return run_analyze(args, logger, session_id)
        raise ValueError(f"Unknown command: {args.command}")
    except PipelineError as exc:
        log_event(
            logger,
            str(exc),
            session_id=session_id,
            stage=args.command,
            event="STAGE_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        _emit({"error": str(exc), "error_code": exc.error_code})
        return EXIT_HARD_FAIL


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
