"""Row-to-column pivot of typed log records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple
import logging

from .classifier import is_reserved
from .models import RawRecord, TypedRecord

logger = logging.getLogger(__name__)

SERIES_KEY_DELIMITER = ","
COLUMN_NAME_SEPARATOR = " "


@dataclass(frozen=True)
class SeriesColumns:
    """Time axis plus position-aligned value columns keyed by column name."""

    time_column: List[datetime] = field(default_factory=list)
    value_columns: Dict[str, List[Optional[float]]] = field(default_factory=dict)


def series_key(categorical_fields: Mapping[str, str]) -> str:
    """Identity of a series: categorical values joined in field-name order."""
    return SERIES_KEY_DELIMITER.join(categorical_fields[name] for name in sorted(categorical_fields))


def column_name(key: str, field_name: str) -> str:
    if not key:
        return field_name
    return f"{key}{COLUMN_NAME_SEPARATOR}{field_name}"


def pivot_time_series(records: Sequence[TypedRecord]) -> SeriesColumns:
    """Split records into series and align their numeric values on one time axis.

    The axis holds one entry per record, sorted by time (stable for ties).
    Every ``(series key, numeric field)`` pair seen anywhere gets a column of
    the axis length; positions where that series did not report the field
    stay ``None``.
    """
    ordered = sorted(records, key=lambda record: record.time)
    axis = [record.time for record in ordered]
    keys = [series_key(record.categorical_fields) for record in ordered]

    pairs: Set[Tuple[str, str]] = set()
    for key, record in zip(keys, ordered):
        pairs.update((key, name) for name in record.numeric_fields)

    columns: Dict[Tuple[str, str], List[Optional[float]]] = {
        pair: [None] * len(axis) for pair in sorted(pairs)
    }
    for position, (key, record) in enumerate(zip(keys, ordered)):
        for name, value in record.numeric_fields.items():
            columns[(key, name)][position] = value

    value_columns: Dict[str, List[Optional[float]]] = {}
    for (key, name), values in columns.items():
        label = column_name(key, name)
        if label in value_columns:
            label = _unique_label(label, value_columns)
            logger.warning(
                "column name for series %r field %r collides, using %r", key, name, label
            )
        value_columns[label] = values

    return SeriesColumns(time_column=axis, value_columns=value_columns)


def pivot_table(records: Iterable[RawRecord], time_field: str) -> Dict[str, List[str]]:
    """One string column per field, one row per record in input order.

    Values are passed through verbatim; absent fields become ``""``.
    """
    records = list(records)
    names = sorted(
        {
            name
            for record in records
            for name in record
            if name != time_field and not is_reserved(name)
        }
    )
    return {name: [record.get(name, "") for record in records] for name in names}


def _unique_label(label: str, taken: Mapping[str, object]) -> str:
    suffix = 2
    while f"{label} #{suffix}" in taken:
        suffix += 1
    return f"{label} #{suffix}"
