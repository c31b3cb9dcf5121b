"""Assemble output frames from raw log records."""

from __future__ import annotations

from typing import Iterable, Optional
import logging

from .classifier import classify_records, parse_record_times
from .models import FrameShape, OutputFrame, QueryFormat, QueryPayload, RawRecord
from .pivot import pivot_table, pivot_time_series

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = frozenset(fmt.value for fmt in QueryFormat)


def is_supported_format(value: str) -> bool:
    return value in SUPPORTED_FORMATS


def assemble_frame(
    ref_id: str, payload: QueryPayload, records: Iterable[RawRecord]
) -> Optional[OutputFrame]:
    """Build the frame for one query, or ``None`` when there is nothing to show.

    Hidden queries and unsupported formats give ``None``. An empty record set,
    or one where no timestamp parses, gives a zero-row frame.
    """
    if payload.hidden:
        return None
    if not is_supported_format(payload.format):
        logger.warning("query %s: unsupported format %r, returning no frame", ref_id, payload.format)
        return None

    if payload.format == QueryFormat.TABLE.value:
        timed = parse_record_times(records, payload)
        columns = pivot_table((record for _, record in timed), payload.time_field)
        return OutputFrame(
            name=ref_id,
            shape=FrameShape.TABLE,
            time_field=payload.time_field,
            string_columns=columns,
        )

    classified = classify_records(records, payload)
    series = pivot_time_series(classified.records)
    logger.debug(
        "query %s: %d rows, %d value columns, %d fields classified",
        ref_id,
        len(series.time_column),
        len(series.value_columns),
        len(classified.classification),
    )
    return OutputFrame(
        name=ref_id,
        shape=FrameShape.WIDE,
        time_field=payload.time_field,
        time_column=series.time_column,
        value_columns=series.value_columns,
    )
