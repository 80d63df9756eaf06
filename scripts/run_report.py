#!/usr/bin/env python3
"""
Compute a report from the local DuckDB store and print it as JSON.

Usage:
    python scripts/run_report.py --type sales --period month
    python scripts/run_report.py --type financial --start-date 2026-01-01 --end-date 2026-03-31
    python scripts/run_report.py --type all --period last_week --branch-id B1
"""
import asyncio
import argparse
import sys
from pathlib import Path

import orjson

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from reporting.assembler import ReportEngine
from reporting.config import REPORT_FAMILIES, validate_config, ConfigurationError
from reporting.exceptions import RecordSourceError, ValidationError
from reporting.filters import PERIODS, parse_period
from reporting.models import ReportFilter
from reporting.observability import setup_logging, get_logger
from reporting.store import DuckDBRecordSource
from reporting.validators import validate_date_range, validate_identifier, validate_period

logger = get_logger("run_report")


def build_filter(args: argparse.Namespace) -> ReportFilter:
    validate_period(args.period)
    if args.period is None and (args.start_date or args.end_date):
        validate_date_range(args.start_date or "", args.end_date or "")

    date_range = parse_period(args.period, args.start_date, args.end_date)
    return ReportFilter.for_dates(
        date_range.start,
        date_range.end,
        status=validate_identifier(args.status, "status"),
        branch_id=validate_identifier(args.branch_id, "branch_id"),
        pos_id=validate_identifier(args.pos_id, "pos_id"),
        category=validate_identifier(args.category, "category"),
    )


async def main(args: argparse.Namespace) -> int:
    try:
        validate_config()
        report_filter = build_filter(args)
    except (ConfigurationError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    store = DuckDBRecordSource(args.db) if args.db else DuckDBRecordSource()
    engine = ReportEngine(store)

    try:
        if args.type == "all":
            payload = await engine.compute_all(report_filter)
        else:
            payload = await engine.compute_report(args.type, report_filter)
    except RecordSourceError as e:
        logger.error(f"Report failed: {e}")
        return 1
    finally:
        await store.close()

    options = orjson.OPT_INDENT_2 if args.pretty else 0
    sys.stdout.write(orjson.dumps(payload, option=options).decode() + "\n")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Compute a POS report")
    parser.add_argument(
        "--type",
        choices=list(REPORT_FAMILIES) + ["all"],
        default="sales",
        help="Report family (default: sales)",
    )
    parser.add_argument("--period", choices=PERIODS, help="Period shortcut")
    parser.add_argument("--start-date", help="Start date YYYY-MM-DD")
    parser.add_argument("--end-date", help="End date YYYY-MM-DD")
    parser.add_argument("--status", help="Sale status filter")
    parser.add_argument("--branch-id", help="Branch filter")
    parser.add_argument("--pos-id", help="POS terminal filter")
    parser.add_argument("--category", help="Product category filter")
    parser.add_argument("--db", help="DuckDB path (default: REPORTS_DB_PATH)")
    parser.add_argument("--pretty", action="store_true", help="Indent JSON output")
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    args = parser.parse_args()

    setup_logging(level=args.log_level)
    sys.exit(asyncio.run(main(args)))
