"""Data models for sls_toolkit."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union
import pandas as pd

from .exceptions import SlsError

RawRecord = Mapping[str, str]


class QueryFormat(str, Enum):
    TABLE = "Table"
    TIME_SERIES = "TimeSeries"


class FieldKind(str, Enum):
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"


class FrameShape(str, Enum):
    WIDE = "wide"
    TABLE = "table"


@dataclass(frozen=True)
class QueryPayload:
    """Normalized query options; every option has a value after parsing."""

    query: str
    format: str
    time_field: str
    timezone: str
    time_format: str
    window_start: int
    window_end: int
    point_limit: int = 0
    hidden: bool = False


@dataclass(frozen=True)
class DataQuery:
    """One query of a batch as handed over by the host."""

    ref_id: str
    payload: Union[bytes, str, Mapping[str, Any]]
    time_from: datetime
    time_to: datetime
    max_data_points: int = 0
    query_type: str = ""


@dataclass(frozen=True)
class TypedRecord:
    """A record whose timestamp parsed, with its fields split by kind."""

    time: datetime
    numeric_fields: Dict[str, Optional[float]]
    categorical_fields: Dict[str, str]


@dataclass(frozen=True)
class ClassifiedRecords:
    """Output of the two-pass classifier for one query."""

    records: List[TypedRecord]
    classification: Mapping[str, FieldKind]
    dropped: int = 0


@dataclass(frozen=True)
class OutputFrame:
    """Columnar result of one query.

    WIDE frames carry ``time_column`` plus position-aligned ``value_columns``.
    TABLE frames carry only ``string_columns``.
    """

    name: str
    shape: FrameShape
    time_field: str = "time"
    time_column: List[datetime] = field(default_factory=list)
    value_columns: Dict[str, List[Optional[float]]] = field(default_factory=dict)
    string_columns: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def row_count(self) -> int:
        if self.shape is FrameShape.WIDE:
            return len(self.time_column)
        for values in self.string_columns.values():
            return len(values)
        return 0

    @property
    def column_names(self) -> List[str]:
        if self.shape is FrameShape.WIDE:
            return [self.time_field] + list(self.value_columns)
        return list(self.string_columns)

    def to_dataframe(self) -> pd.DataFrame:
        if self.shape is FrameShape.TABLE:
            return pd.DataFrame(self.string_columns, columns=list(self.string_columns))
        data: Dict[str, Any] = {self.time_field: pd.Series(pd.to_datetime(self.time_column))}
        for name, values in self.value_columns.items():
            data[name] = pd.Series(values, dtype="float64")
        return pd.DataFrame(data, columns=self.column_names)


@dataclass(frozen=True)
class QueryResponse:
    """Result for one ref id: frames, or the error that stopped the query."""

    ref_id: str
    frames: List[OutputFrame] = field(default_factory=list)
    error: Optional[SlsError] = None


@dataclass(frozen=True)
class HealthResult:
    ok: bool
    message: str
