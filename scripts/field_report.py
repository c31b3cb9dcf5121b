"""Generate a markdown report of how a query's fields are classified.

Usage:
    py scripts/field_report.py --query "* | select ..."
    py scripts/field_report.py --query "*" --minutes 60 --output docs/field_report.md
"""

from __future__ import annotations

import argparse
from datetime import UTC, datetime, timedelta
from pathlib import Path
import sys
from typing import Iterable, List, Mapping


PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from sls_toolkit import from_env, get_client  # noqa: E402
from sls_toolkit.classifier import classify_records  # noqa: E402
from sls_toolkit.models import ClassifiedRecords, FieldKind, RawRecord  # noqa: E402
from sls_toolkit.payload import parse_payload  # noqa: E402


def _as_csv(items: Iterable[str], limit: int = 5) -> str:
    values = [str(x) for x in items if x]
    if not values:
        return "-"
    if len(values) <= limit:
        return ", ".join(values)
    return ", ".join(values[:limit]) + ", ..."


def _sample_values(records: Iterable[RawRecord], field: str, limit: int = 5) -> List[str]:
    seen: List[str] = []
    for record in records:
        value = record.get(field)
        if value is not None and value not in seen:
            seen.append(value)
        if len(seen) >= limit:
            break
    return seen


def _field_lines(classified: ClassifiedRecords, records: List[RawRecord]) -> List[str]:
    lines = [
        f"- retained records: `{len(classified.records)}`",
        f"- dropped records: `{classified.dropped}`",
        "",
        "| Field | Kind | Sample values |",
        "|---|---|---|",
    ]
    for field, kind in classified.classification.items():
        samples = _as_csv(_sample_values(records, field))
        lines.append(f"| `{field}` | {kind.value} | {samples} |")
    return lines


def _summary(classification: Mapping[str, FieldKind]) -> List[str]:
    numeric = [name for name, kind in classification.items() if kind is FieldKind.NUMERIC]
    categorical = [name for name, kind in classification.items() if kind is FieldKind.CATEGORICAL]
    return [
        f"- numeric fields: {_as_csv(numeric, limit=20)}",
        f"- categorical fields: {_as_csv(categorical, limit=20)}",
    ]


def _build_report(query: str, records: List[RawRecord], classified: ClassifiedRecords) -> str:
    now = datetime.now(UTC).isoformat()
    lines = [
        "# Field Classification Report",
        "",
        "## Run Info",
        f"- generated_at_utc: `{now}`",
        f"- query: `{query}`",
        f"- fetched records: `{len(records)}`",
        "- source: `scripts/field_report.py`",
        "",
        "## Fields",
    ]
    lines.extend(_summary(classified.classification))
    lines.extend(_field_lines(classified, records))
    return "\n".join(lines) + "\n"


def main() -> int:
    parser = argparse.ArgumentParser(description="Report numeric/categorical fields of an SLS query.")
    parser.add_argument("--query", default="*", help="Search/analytics statement")
    parser.add_argument("--time-field", default="time", help="Field holding the timestamp")
    parser.add_argument("--time-format", default=None, help="Token pattern, e.g. yyyy-MM-dd HH:mm:ss")
    parser.add_argument("--minutes", type=int, default=15, help="Look-back window in minutes")
    parser.add_argument("--lines", type=int, default=100, help="Maximum records to fetch")
    parser.add_argument("--output", default="docs/field_report.md", help="Output markdown path")
    args = parser.parse_args()

    end = datetime.now(UTC)
    start = end - timedelta(minutes=args.minutes)
    raw = {"queryText": args.query, "format": "TimeSeries", "timeField": args.time_field}
    if args.time_format:
        raw["timeFormat"] = args.time_format
    payload = parse_payload(raw, start, end, args.lines)

    client = get_client(from_env())
    try:
        records = client.get_logs(payload.query, payload.window_start, payload.window_end, args.lines)
    finally:
        client.close()

    classified = classify_records(records, payload)
    content = _build_report(args.query, records, classified)

    output_path = (PROJECT_ROOT / args.output).resolve()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content, encoding="utf-8")
    print(f"wrote {output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
