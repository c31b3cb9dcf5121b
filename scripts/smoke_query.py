"""Local read-only smoke test for sls-toolkit.

Usage:
    py scripts/smoke_query.py --health
    py scripts/smoke_query.py --query "* | select ..." --format TimeSeries
    py scripts/smoke_query.py --query "status: 500" --minutes 60
"""

from __future__ import annotations

import argparse
from datetime import UTC, datetime, timedelta
import json
import logging
import sys

from sls_toolkit import DataQuery, SlsDatasource, from_env, get_client


def _config_from_env():
    cfg = from_env()
    missing = [name for name in ("endpoint", "project", "logstore") if not getattr(cfg, name)]
    if missing:
        raise ValueError(
            "SLS_ENDPOINT, SLS_PROJECT and SLS_LOGSTORE are required for the smoke test "
            f"(missing: {', '.join(missing)})"
        )
    return cfg


def _build_query(args: argparse.Namespace) -> DataQuery:
    end = datetime.now(UTC)
    start = end - timedelta(minutes=args.minutes)
    payload = {
        "queryText": args.query,
        "format": args.format,
        "timeField": args.time_field,
    }
    if args.timezone:
        payload["timezone"] = args.timezone
    return DataQuery(
        ref_id="A",
        payload=json.dumps(payload),
        time_from=start,
        time_to=end,
        max_data_points=args.lines,
    )


def run(args: argparse.Namespace) -> int:
    cfg = _config_from_env()
    client = get_client(cfg)
    datasource = SlsDatasource(client, max_lines=cfg.max_lines)
    try:
        health = datasource.check_health()
        print(f"health ok={health.ok} message={health.message}")
        if args.health or not health.ok:
            return 0 if health.ok else 1

        response = datasource.query_data([_build_query(args)])["A"]
        if response.error is not None:
            print(f"query failed: {response.error}", file=sys.stderr)
            return 1
        if not response.frames:
            print("No frame returned.")
            return 0
        frame = response.frames[0]
        print(f"shape={frame.shape.value} rows={frame.row_count} columns={len(frame.column_names)}")
        df = frame.to_dataframe()
        if not df.empty:
            print(df.head(args.head).to_string(index=False))
    finally:
        client.close()

    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Run a read-only smoke query against SLS")
    parser.add_argument("--query", default="*", help="Search/analytics statement")
    parser.add_argument("--format", default="TimeSeries", choices=["Table", "TimeSeries"])
    parser.add_argument("--time-field", default="time", help="Field holding the timestamp")
    parser.add_argument("--timezone", default=None, help="IANA timezone of the time field")
    parser.add_argument("--minutes", type=int, default=15, help="Look-back window in minutes")
    parser.add_argument("--lines", type=int, default=100, help="Maximum records to fetch")
    parser.add_argument("--head", type=int, default=5, help="Rows to print")
    parser.add_argument("--health", action="store_true", help="Only run the health check")
    parser.add_argument("--log-level", default="WARNING", help="Python logging level")
    args = parser.parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))
    try:
        return run(args)
    except Exception as exc:
        print(f"Smoke test failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
