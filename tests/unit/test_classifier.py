from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from sls_toolkit.classifier import (
    classify_fields,
    classify_records,
    coerce_record,
    is_decimal,
    is_reserved,
    parse_record_times,
)
from sls_toolkit.models import FieldKind, QueryPayload

SHANGHAI = timezone(timedelta(hours=8))


def _payload(**overrides) -> QueryPayload:
    values = {
        "query": "*",
        "format": "TimeSeries",
        "time_field": "time",
        "timezone": "Asia/Shanghai",
        "time_format": "%Y-%m-%d %H:%M:%S",
        "window_start": 0,
        "window_end": 0,
    }
    values.update(overrides)
    return QueryPayload(**values)


@pytest.mark.parametrize("value", ["1", "-2", "+3.5", "0.25", ".5", "5.", "1e3", "2.5E-2"])
def test_is_decimal_accepts_plain_numbers(value: str) -> None:
    assert is_decimal(value) is True


@pytest.mark.parametrize("value", ["", " 1", "1 ", "n/a", "nan", "inf", "0x10", "1_000", "1,5", None])
def test_is_decimal_rejects_everything_else(value) -> None:
    assert is_decimal(value) is False


def test_is_reserved() -> None:
    assert is_reserved("__source__") is True
    assert is_reserved("_single") is False


def test_parse_record_times_localizes_and_drops_failures() -> None:
    records = [
        {"time": "2023-01-01 10:00:00", "v": "1"},
        {"time": "garbage", "v": "2"},
        {"v": "3"},
        {"time": "2023-01-01 10:00:05", "v": "4"},
    ]
    kept = parse_record_times(records, _payload())

    assert [record["v"] for _, record in kept] == ["1", "4"]
    first = kept[0][0]
    assert first.utcoffset() == timedelta(hours=8)
    assert first == datetime(2023, 1, 1, 10, 0, 0, tzinfo=SHANGHAI)


def test_parse_record_times_uses_custom_format_and_field() -> None:
    payload = _payload(time_field="ts", time_format="%d/%m/%Y %H:%M", timezone="UTC")
    kept = parse_record_times([{"ts": "31/12/2022 23:59"}], payload)

    assert len(kept) == 1
    assert kept[0][0] == datetime(2022, 12, 31, 23, 59, tzinfo=timezone.utc)


def test_parse_record_times_keeps_dst_transition_times() -> None:
    payload = _payload(timezone="America/New_York")
    records = [
        {"time": "2023-11-05 01:30:00", "v": "repeated"},
        {"time": "2023-03-12 02:30:00", "v": "skipped"},
    ]
    kept = parse_record_times(records, payload)

    assert [record["v"] for _, record in kept] == ["repeated", "skipped"]
    assert kept[0][0] == datetime(2023, 11, 5, 5, 30, tzinfo=timezone.utc)
    assert kept[1][0] == datetime(2023, 3, 12, 7, 0, tzinfo=timezone.utc)


def test_parse_record_times_empty_input() -> None:
    assert parse_record_times([], _payload()) == []


def test_parse_record_times_all_failures() -> None:
    records = [{"time": "x"}, {"time": "y"}, {}]
    assert parse_record_times(records, _payload()) == []


def test_classify_numeric_only_when_every_value_parses() -> None:
    records = [
        {"time": "t", "latency": "10", "cpu": "1.5", "host": "a"},
        {"time": "t", "latency": "n/a", "cpu": "2", "host": "b"},
        {"time": "t", "__topic__": "x", "mem": "7"},
    ]
    classification = classify_fields(records, "time")

    assert classification == {
        "cpu": FieldKind.NUMERIC,
        "host": FieldKind.CATEGORICAL,
        "latency": FieldKind.CATEGORICAL,
        "mem": FieldKind.NUMERIC,
    }
    assert list(classification) == sorted(classification)


def test_classification_is_read_only() -> None:
    classification = classify_fields([{"a": "1"}], "time")
    with pytest.raises(TypeError):
        classification["a"] = FieldKind.CATEGORICAL  # type: ignore[index]


def test_classification_does_not_depend_on_record_order() -> None:
    records = [{"x": "1"}, {"x": "oops"}, {"y": "2"}]
    assert classify_fields(records, "time") == classify_fields(list(reversed(records)), "time")


def test_coerce_record_splits_fields_by_kind() -> None:
    ts = datetime(2023, 1, 1, tzinfo=SHANGHAI)
    classification = {"cpu": FieldKind.NUMERIC, "host": FieldKind.CATEGORICAL}
    typed = coerce_record(ts, {"time": "ignored", "__source__": "s", "cpu": "1.5", "host": "a"}, classification)

    assert typed.time == ts
    assert typed.numeric_fields == {"cpu": 1.5}
    assert typed.categorical_fields == {"host": "a"}


def test_coerce_record_stores_none_for_bad_numeric_value() -> None:
    ts = datetime(2023, 1, 1, tzinfo=SHANGHAI)
    typed = coerce_record(ts, {"cpu": "broken"}, {"cpu": FieldKind.NUMERIC})
    assert typed.numeric_fields == {"cpu": None}


def test_classify_records_mixed_field_keeps_strings_verbatim() -> None:
    records = [
        {"time": "2023-01-01 10:00:00", "latency": "10"},
        {"time": "2023-01-01 10:00:01", "latency": "n/a"},
    ]
    result = classify_records(records, _payload())

    assert result.classification == {"latency": FieldKind.CATEGORICAL}
    assert [r.categorical_fields["latency"] for r in result.records] == ["10", "n/a"]
    assert all(r.numeric_fields == {} for r in result.records)
    assert result.dropped == 0


def test_classify_records_ignores_dropped_records_for_classification() -> None:
    records = [
        {"time": "2023-01-01 10:00:00", "cpu": "1"},
        {"time": "bad", "cpu": "not a number"},
    ]
    result = classify_records(records, _payload())

    assert result.dropped == 1
    assert result.classification == {"cpu": FieldKind.NUMERIC}
    assert result.records[0].numeric_fields == {"cpu": 1.0}
