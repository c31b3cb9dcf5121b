"""Query payload parsing and defaults."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Mapping, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import json
import logging

from .exceptions import InvalidPayloadError
from .models import QueryFormat, QueryPayload

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = QueryFormat.TABLE.value
DEFAULT_TIME_FIELD = "time"
DEFAULT_TIMEZONE = "Asia/Shanghai"
DEFAULT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Applied in order.
TIME_FORMAT_TOKENS = (
    ("yyyy", "%Y"),
    ("MM", "%m"),
    ("dd", "%d"),
    ("HH", "%H"),
    ("hh", "%I"),
    ("mm", "%M"),
    ("ss", "%S"),
)

_STRING_KEYS = ("queryText", "format", "timeField", "timezone", "timeFormat")


def parse_payload(
    raw: Union[bytes, str, Mapping[str, Any]],
    time_from: datetime,
    time_to: datetime,
    max_data_points: int = 0,
) -> QueryPayload:
    """Decode a query's raw JSON payload into a fully populated QueryPayload."""
    data = _decode(raw)
    for key in _STRING_KEYS:
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            raise InvalidPayloadError(f"{key} must be a string, got {type(value).__name__}")
    hidden = data.get("hide", False)
    if hidden is None:
        hidden = False
    if not isinstance(hidden, bool):
        raise InvalidPayloadError(f"hide must be a boolean, got {type(hidden).__name__}")
    payload_points = data.get("maxDataPoints", 0) or 0
    if isinstance(payload_points, bool) or not isinstance(payload_points, int):
        raise InvalidPayloadError("maxDataPoints must be an integer")

    timezone = data.get("timezone") or DEFAULT_TIMEZONE
    _ensure_timezone(timezone)
    time_format = data.get("timeFormat")

    payload = QueryPayload(
        query=data.get("queryText") or "",
        format=data.get("format") or DEFAULT_FORMAT,
        time_field=data.get("timeField") or DEFAULT_TIME_FIELD,
        timezone=timezone,
        time_format=translate_time_format(time_format) if time_format else DEFAULT_TIME_FORMAT,
        window_start=to_epoch_seconds(time_from),
        window_end=to_epoch_seconds(time_to),
        point_limit=int(max_data_points or payload_points),
        hidden=hidden,
    )
    logger.info(
        "parse_payload query=%r format=%s time_field=%s timezone=%s time_format=%r "
        "from=%d to=%d point_limit=%d hidden=%s",
        payload.query,
        payload.format,
        payload.time_field,
        payload.timezone,
        payload.time_format,
        payload.window_start,
        payload.window_end,
        payload.point_limit,
        payload.hidden,
    )
    return payload


def translate_time_format(pattern: str) -> str:
    """Translate ``yyyy-MM-dd HH:mm:ss`` style tokens into a strptime pattern.

    Text that is not a known token is kept as is.
    """
    out = pattern.replace("%", "%%")
    for token, directive in TIME_FORMAT_TOKENS:
        out = out.replace(token, directive)
    return out


def to_epoch_seconds(value: datetime) -> int:
    """Truncate a datetime to whole epoch seconds; naive values are UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return int(value.timestamp())


def _decode(raw: Union[bytes, str, Mapping[str, Any], None]) -> Mapping[str, Any]:
    if raw is None or raw == b"" or raw == "":
        return {}
    if isinstance(raw, Mapping):
        return raw
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidPayloadError(f"could not decode query payload: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidPayloadError(f"query payload must be a JSON object, got {type(data).__name__}")
    return data


def _ensure_timezone(name: str) -> None:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidPayloadError(f"unknown timezone: {name}") from exc
