from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sls_toolkit.models import TypedRecord
from sls_toolkit.pivot import column_name, pivot_table, pivot_time_series, series_key

TZ = timezone(timedelta(hours=8))
T1 = datetime(2023, 1, 1, 10, 0, 0, tzinfo=TZ)
T2 = T1 + timedelta(seconds=1)
T3 = T1 + timedelta(seconds=2)


def _rec(ts, numeric=None, categorical=None) -> TypedRecord:
    return TypedRecord(time=ts, numeric_fields=numeric or {}, categorical_fields=categorical or {})


def test_series_key_is_independent_of_field_order() -> None:
    a = {"region": "us", "host": "h1"}
    b = {"host": "h1", "region": "us"}
    assert series_key(a) == series_key(b) == "h1,us"


def test_series_key_without_categorical_fields_is_empty() -> None:
    assert series_key({}) == ""


def test_column_name() -> None:
    assert column_name("us", "cpu") == "us cpu"
    assert column_name("", "cpu") == "cpu"


def test_time_series_split_aligns_sparse_values() -> None:
    records = [
        _rec(T1, {"cpu": 1.5}, {"region": "us"}),
        _rec(T1, {"cpu": 2.0}, {"region": "eu"}),
        _rec(T2, {"cpu": 1.7}, {"region": "us"}),
    ]
    out = pivot_time_series(records)

    assert out.time_column == [T1, T1, T2]
    assert out.value_columns == {
        "eu cpu": [None, 2.0, None],
        "us cpu": [1.5, None, 1.7],
    }


def test_records_are_sorted_by_time_and_ties_keep_input_order() -> None:
    records = [
        _rec(T3, {"v": 3.0}, {"k": "a"}),
        _rec(T1, {"v": 1.0}, {"k": "b"}),
        _rec(T1, {"v": 2.0}, {"k": "a"}),
    ]
    out = pivot_time_series(records)

    assert out.time_column == [T1, T1, T3]
    assert out.value_columns["b v"] == [1.0, None, None]
    assert out.value_columns["a v"] == [None, 2.0, 3.0]


def test_every_column_matches_axis_length_and_missing_fields_are_none() -> None:
    records = [
        _rec(T1, {"cpu": 1.0, "mem": 5.0}, {"host": "a"}),
        _rec(T2, {"cpu": 2.0}, {"host": "a"}),
        _rec(T3, {"disk": 9.0}, {"host": "b"}),
    ]
    out = pivot_time_series(records)

    assert list(out.value_columns) == ["a cpu", "a mem", "b disk"]
    for values in out.value_columns.values():
        assert len(values) == len(out.time_column)
    assert out.value_columns["a mem"] == [5.0, None, None]
    assert out.value_columns["b disk"] == [None, None, 9.0]


def test_null_numeric_value_still_allocates_column() -> None:
    out = pivot_time_series([_rec(T1, {"cpu": None}, {"host": "a"})])
    assert out.value_columns == {"a cpu": [None]}


def test_records_without_dimensions_use_bare_field_names() -> None:
    out = pivot_time_series([_rec(T1, {"count": 3.0}), _rec(T2, {"count": 4.0})])
    assert out.value_columns == {"count": [3.0, 4.0]}


def test_colliding_column_names_are_suffixed(caplog) -> None:
    records = [
        _rec(T1, {"x cpu": 5.0}),
        _rec(T2, {"cpu": 7.0}, {"host": "x"}),
    ]
    with caplog.at_level("WARNING", logger="sls_toolkit.pivot"):
        out = pivot_time_series(records)

    assert out.value_columns == {"x cpu": [5.0, None], "x cpu #2": [None, 7.0]}
    assert "collides" in caplog.text


def test_empty_input_gives_empty_axis() -> None:
    out = pivot_time_series([])
    assert out.time_column == []
    assert out.value_columns == {}


def test_pivot_table_keeps_raw_strings_in_record_order() -> None:
    records = [
        {"time": "2023-01-01 10:00:00", "host": "a", "code": "200"},
        {"time": "2023-01-01 10:00:01", "host": "b", "code": "500", "__source__": "x"},
        {"time": "2023-01-01 10:00:02", "host": "c"},
    ]
    out = pivot_table(records, "time")

    assert list(out) == ["code", "host"]
    assert out["host"] == ["a", "b", "c"]
    assert out["code"] == ["200", "500", ""]


def test_pivot_table_empty() -> None:
    assert pivot_table([], "time") == {}
