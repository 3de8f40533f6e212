"""
Value types for dataset analyses and their local previews.

Snapshots are immutable: operations build new snapshots and reuse every row
and column record they leave untouched.
"""

import math
import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import pandas as pd

logger = logging.getLogger(__name__)


class Placeholder(Enum):
    """Tagged fill values written by local operations."""
    NOT_AVAILABLE = "N/A"

    def __str__(self) -> str:
        return self.value


NOT_AVAILABLE = Placeholder.NOT_AVAILABLE


def is_missing(value: Any) -> bool:
    """True for None, the N/A placeholder and float NaN."""
    if value is None or value is NOT_AVAILABLE:
        return True
    return isinstance(value, float) and math.isnan(value)


def is_number(value: Any) -> bool:
    """True for real numeric cells; booleans and NaN are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def round_half_up(value: float, digits: int = 0):
    """Round halves towards positive infinity (2.5 -> 3, -2.5 -> -2)."""
    if digits == 0:
        return int(math.floor(value + 0.5))
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def display_value(value: Any) -> Any:
    """Render a cell for tables and JSON output."""
    if isinstance(value, Placeholder):
        return value.value
    return value


class RowStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


@dataclass(frozen=True)
class ColumnInfo:
    """Per-column quality figures reported by the analysis."""
    dtype: str
    nulls: int
    null_percentage: float
    is_numeric: bool

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ColumnInfo':
        return cls(
            dtype=str(data.get('dtype', 'object')),
            nulls=int(data.get('nulls') or 0),
            null_percentage=float(data.get('null_percentage') or 0.0),
            is_numeric=bool(data.get('is_numeric', False)),
        )

    def cleared(self) -> 'ColumnInfo':
        """Copy with no remaining nulls."""
        if self.nulls == 0 and self.null_percentage == 0:
            return self
        return ColumnInfo(self.dtype, 0, 0.0, self.is_numeric)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'dtype': self.dtype,
            'nulls': self.nulls,
            'null_percentage': self.null_percentage,
            'is_numeric': self.is_numeric,
        }


@dataclass(frozen=True)
class Row:
    """A preview row. ``status`` is derived locally and never persisted."""
    values: Mapping[str, Any]
    status: RowStatus = RowStatus.ACTIVE

    def __post_init__(self):
        if not isinstance(self.values, MappingProxyType):
            object.__setattr__(self, 'values', MappingProxyType(dict(self.values)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return self.status == other.status and dict(self.values) == dict(other.values)

    def __hash__(self):
        return hash((self.status, tuple(self.values.items())))

    def get(self, column: str, default: Any = None) -> Any:
        return self.values.get(column, default)

    def with_values(self, values: Mapping[str, Any]) -> 'Row':
        return Row(values, self.status)

    def to_dict(self) -> Dict[str, Any]:
        record = {name: display_value(value) for name, value in self.values.items()}
        record['status'] = self.status.value
        return record


@dataclass(frozen=True)
class AnalysisSnapshot:
    """Shape, null distribution and row sample of a dataset at one point in time."""
    dataset_id: Any
    total_rows: int
    total_columns: int
    columns_info: Mapping[str, ColumnInfo]
    total_nulls: int
    preview_rows: Tuple[Row, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not isinstance(self.columns_info, MappingProxyType):
            object.__setattr__(self, 'columns_info', MappingProxyType(dict(self.columns_info)))
        if not isinstance(self.preview_rows, tuple):
            object.__setattr__(self, 'preview_rows', tuple(self.preview_rows))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnalysisSnapshot):
            return NotImplemented
        return (
            self.dataset_id == other.dataset_id
            and self.total_rows == other.total_rows
            and self.total_columns == other.total_columns
            and dict(self.columns_info) == dict(other.columns_info)
            and self.total_nulls == other.total_nulls
            and self.preview_rows == other.preview_rows
        )

    @classmethod
    def from_response(cls, data: Mapping[str, Any]) -> 'AnalysisSnapshot':
        """Build a snapshot from an ``/analyze`` response body."""
        columns_info = {
            name: ColumnInfo.from_dict(info)
            for name, info in (data.get('columns_info') or {}).items()
        }
        rows = []
        for record in data.get('preview_data') or []:
            values = {key: value for key, value in record.items() if key != 'status'}
            rows.append(Row(values))

        snapshot = cls(
            dataset_id=data.get('dataset_id'),
            total_rows=int(data.get('total_rows') or 0),
            total_columns=int(data.get('total_columns') or len(columns_info)),
            columns_info=columns_info,
            total_nulls=int(data.get('total_nulls') or 0),
            preview_rows=tuple(rows),
        )
        if not snapshot.null_totals_consistent():
            logger.warning(
                f"Analysis of dataset {snapshot.dataset_id} reports total_nulls={snapshot.total_nulls} "
                f"but columns sum to {snapshot.column_null_sum()}"
            )
        return snapshot

    @property
    def column_names(self) -> List[str]:
        names = list(self.columns_info)
        if 'status' not in names:
            names.append('status')
        return names

    def column_null_sum(self) -> int:
        return sum(info.nulls for info in self.columns_info.values())

    def null_totals_consistent(self) -> bool:
        return self.column_null_sum() == self.total_nulls

    def column_values(self, column: str) -> List[Any]:
        return [row.get(column) for row in self.preview_rows]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'dataset_id': self.dataset_id,
            'total_rows': self.total_rows,
            'total_columns': self.total_columns,
            'columns_info': {name: info.to_dict() for name, info in self.columns_info.items()},
            'total_nulls': self.total_nulls,
            'preview_data': [row.to_dict() for row in self.preview_rows],
        }

    def to_frame(self, rows: Optional[Tuple[Row, ...]] = None) -> pd.DataFrame:
        """Preview rows as a DataFrame for display."""
        records = [row.to_dict() for row in (self.preview_rows if rows is None else rows)]
        return pd.DataFrame.from_records(records, columns=self.column_names)


@dataclass(frozen=True)
class QualityStats:
    total_records: int
    total_nulls: int
    quality_percent: float


def quality_stats(snapshot: Optional[AnalysisSnapshot]) -> QualityStats:
    """Headline figures shown above the preview table."""
    if snapshot is None:
        return QualityStats(0, 0, 0.0)
    total_cells = snapshot.total_rows * snapshot.total_columns
    if total_cells == 0:
        return QualityStats(snapshot.total_rows, snapshot.total_nulls, 0.0)
    quality = (total_cells - snapshot.total_nulls) / total_cells * 100
    return QualityStats(snapshot.total_rows, snapshot.total_nulls, round_half_up(quality, 1))


@dataclass
class Dataset:
    """A dataset uploaded by the current user."""
    id: Any
    name: str
    num_rows: int = 0
    num_columns: int = 0
    file_type: Optional[str] = None
    file_size_mb: Optional[float] = None
    uploaded_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Dataset':
        return cls(
            id=data.get('id'),
            name=data.get('name', ''),
            num_rows=int(data.get('num_rows') or 0),
            num_columns=int(data.get('num_columns') or 0),
            file_type=data.get('file_type'),
            file_size_mb=data.get('file_size_mb'),
            uploaded_at=data.get('uploaded_at'),
        )


@dataclass
class TrainedModel:
    id: Any
    name: str
    algorithm: Optional[str] = None
    accuracy: Optional[float] = None
    metrics: Dict[str, Any] = field(default_factory=dict)
    status: Optional[str] = None
    training_time: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'TrainedModel':
        metrics = dict(data.get('metrics') or {})
        accuracy = data.get('accuracy', metrics.get('accuracy'))
        return cls(
            id=data.get('id', data.get('model_id')),
            name=data.get('name', ''),
            algorithm=data.get('algorithm'),
            accuracy=accuracy,
            metrics=metrics,
            status=data.get('status'),
            training_time=data.get('training_time'),
        )
