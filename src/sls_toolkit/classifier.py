"""Record classification and value coercion.

Log records arrive as flat string maps with no schema. Which fields are
numeric is only known after the whole result set has been seen, so the work
is split in two passes:

1. ``classify_fields`` scans every retained record and freezes a
   ``name -> FieldKind`` mapping.
2. ``coerce_record`` converts each record using that frozen mapping.

Records whose timestamp is missing or unparseable are dropped before either
pass runs.
"""

from __future__ import annotations

from datetime import datetime
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple
import logging
import re

import numpy as np
import pandas as pd

from .models import ClassifiedRecords, FieldKind, QueryPayload, RawRecord, TypedRecord

logger = logging.getLogger(__name__)

RESERVED_PREFIX = "__"

_DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def is_reserved(name: str) -> bool:
    """Metadata fields such as ``__source__`` or ``__topic__``."""
    return name.startswith(RESERVED_PREFIX)


def is_decimal(value: object) -> bool:
    """True for plain decimal literals; ``nan``, ``inf`` and padded text are not numbers."""
    return isinstance(value, str) and _DECIMAL_RE.fullmatch(value) is not None


def parse_record_times(
    records: Iterable[RawRecord], payload: QueryPayload
) -> List[Tuple[datetime, RawRecord]]:
    """Parse the time field of each record, keeping only records that parse.

    Order of the surviving records is preserved.
    """
    records = list(records)
    if not records:
        return []
    raw_times = pd.Series([record.get(payload.time_field) for record in records], dtype="object")
    parsed = pd.to_datetime(raw_times, format=payload.time_format, errors="coerce")
    if parsed.dt.tz is None:
        # Repeated wall-clock times take the first (DST) occurrence; skipped ones move forward.
        parsed = parsed.dt.tz_localize(
            payload.timezone,
            ambiguous=np.ones(len(parsed), dtype=bool),
            nonexistent="shift_forward",
        )
    else:
        parsed = parsed.dt.tz_convert(payload.timezone)

    kept: List[Tuple[datetime, RawRecord]] = []
    for index, (ts, record) in enumerate(zip(parsed, records)):
        if pd.isna(ts):
            logger.debug(
                "dropping record %d: %s=%r does not match %r",
                index,
                payload.time_field,
                record.get(payload.time_field),
                payload.time_format,
            )
            continue
        kept.append((ts.to_pydatetime(), record))

    dropped = len(records) - len(kept)
    if dropped:
        logger.warning(
            "dropped %d of %d records with missing or unparseable %r",
            dropped,
            len(records),
            payload.time_field,
        )
    return kept


def classify_fields(records: Iterable[RawRecord], time_field: str) -> Mapping[str, FieldKind]:
    """Classify every field seen in ``records`` as numeric or categorical.

    A field is numeric only if each of its values parses as a decimal number.
    The returned mapping is read-only and ordered by field name.
    """
    saw_non_numeric: Dict[str, bool] = {}
    for record in records:
        for name, value in record.items():
            if name == time_field or is_reserved(name):
                continue
            saw_non_numeric[name] = saw_non_numeric.get(name, False) or not is_decimal(value)
    return MappingProxyType(
        {
            name: FieldKind.CATEGORICAL if saw_non_numeric[name] else FieldKind.NUMERIC
            for name in sorted(saw_non_numeric)
        }
    )


def coerce_record(
    time: datetime, record: RawRecord, classification: Mapping[str, FieldKind]
) -> TypedRecord:
    numeric: Dict[str, Optional[float]] = {}
    categorical: Dict[str, str] = {}
    for name in sorted(record):
        kind = classification.get(name)
        if kind is None:
            continue
        value = record[name]
        if kind is FieldKind.NUMERIC:
            numeric[name] = _to_float(name, value)
        else:
            categorical[name] = value
    return TypedRecord(time=time, numeric_fields=numeric, categorical_fields=categorical)


def classify_records(records: Iterable[RawRecord], payload: QueryPayload) -> ClassifiedRecords:
    """Run time parsing, classification and coercion for one query's records."""
    records = list(records)
    timed = parse_record_times(records, payload)
    classification = classify_fields((record for _, record in timed), payload.time_field)
    typed = [coerce_record(ts, record, classification) for ts, record in timed]
    return ClassifiedRecords(
        records=typed,
        classification=classification,
        dropped=len(records) - len(timed),
    )


def _to_float(name: str, value: object) -> Optional[float]:
    if not is_decimal(value):
        logger.debug("field %s: %r is not numeric, storing None", name, value)
        return None
    return float(value)
