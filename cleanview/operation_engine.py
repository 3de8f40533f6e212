"""
Local simulation of the backend cleaning operations.

Each operation takes the current preview snapshot and returns a new one; the
input snapshot is never modified, so the original analysis stays available for
resets. The backend remains authoritative: these results are only an optimistic
preview until the pending operations are saved.
"""

import math
import logging
from collections import Counter
from dataclasses import replace
from enum import Enum
from typing import AbstractSet, Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler

from .errors import UnknownOperationError
from .models import AnalysisSnapshot, NOT_AVAILABLE, is_missing, is_number, round_half_up
from .row_status import refresh_all

logger = logging.getLogger(__name__)


class OperationType(str, Enum):
    REPLACE_NULLS = "replace_nulls"
    IMPUTE = "impute"
    NORMALIZE = "normalize"
    ENCODE = "encode"


IMPUTATION_METHODS = ("mean", "median", "mode")

OPERATION_LABELS = {
    OperationType.REPLACE_NULLS: "Reemplazar NULL con N/A",
    OperationType.IMPUTE: "Imputar con {method}",
    OperationType.NORMALIZE: "Normalizar con StandardScaler",
    OperationType.ENCODE: "Codificar variables categóricas",
}


def operation_label(op_type: OperationType, options: Optional[Mapping[str, Any]] = None) -> str:
    template = OPERATION_LABELS[op_type]
    if op_type is OperationType.IMPUTE:
        return template.format(method=(options or {}).get('method') or 'mean')
    return template


def _is_null(value: Any) -> bool:
    # Only absent cells; the N/A placeholder counts as already handled
    return value is None or (isinstance(value, float) and math.isnan(value))


def numeric_values(values: Sequence[Any]) -> List[Any]:
    return [value for value in values if is_number(value)]


def column_statistic(values: Sequence[Any], method: str = "mean"):
    """
    Imputation value for a column.

    Only real numbers take part. ``mean`` and even-count ``median`` are rounded
    half-up to an integer; ``mode`` ties go to the value seen first. A column
    without numbers yields 0.
    """
    if method not in IMPUTATION_METHODS:
        raise ValueError(f"Unknown imputation method: {method}")

    eligible = numeric_values(values)
    if not eligible:
        return 0

    if method == "mean":
        return round_half_up(float(np.mean(eligible)))
    if method == "median":
        ordered = sorted(eligible)
        mid = len(ordered) // 2
        if len(ordered) % 2 == 0:
            return round_half_up((ordered[mid - 1] + ordered[mid]) / 2)
        return ordered[mid]
    # Counter keeps first-seen order, so most_common breaks ties by it
    return Counter(eligible).most_common(1)[0][0]


class OperationEngine:
    """Applies named cleaning operations to preview snapshots."""

    def __init__(self):
        self._handlers: Dict[OperationType, Callable[..., AnalysisSnapshot]] = {
            OperationType.REPLACE_NULLS: self._replace_nulls,
            OperationType.IMPUTE: self._impute,
            OperationType.NORMALIZE: self._normalize,
            OperationType.ENCODE: self._encode,
        }

    def apply(
        self,
        snapshot: AnalysisSnapshot,
        op_type,
        numeric: AbstractSet[str],
        options: Optional[Mapping[str, Any]] = None,
    ) -> Tuple[AnalysisSnapshot, str]:
        """Return the transformed snapshot and the operation's label."""
        op_type = coerce_operation(op_type)
        options = dict(options or {})
        if op_type is OperationType.IMPUTE:
            method = options.get('method') or 'mean'
            if method not in IMPUTATION_METHODS:
                raise ValueError(f"Unknown imputation method: {method}")
            options['method'] = method

        result = self._handlers[op_type](snapshot, numeric, options)
        result = _replace(result, preview_rows=refresh_all(result.preview_rows, numeric))
        label = operation_label(op_type, options)
        logger.info(f"Applied '{label}' to preview of dataset {snapshot.dataset_id}")
        return result, label

    # --------------------- Operations ---------------------
    def _replace_nulls(self, snapshot: AnalysisSnapshot, numeric, options) -> AnalysisSnapshot:
        rows = []
        for row in snapshot.preview_rows:
            if any(_is_null(value) for value in row.values.values()):
                values = {
                    name: NOT_AVAILABLE if _is_null(value) else value
                    for name, value in row.values.items()
                }
                rows.append(row.with_values(values))
            else:
                rows.append(row)

        columns_info = {name: info.cleared() for name, info in snapshot.columns_info.items()}
        return _replace(snapshot, preview_rows=tuple(rows), columns_info=columns_info, total_nulls=0)

    def _impute(self, snapshot: AnalysisSnapshot, numeric, options) -> AnalysisSnapshot:
        method = options['method']
        targets = [name for name in snapshot.columns_info if name in numeric]
        fill_values = {
            name: column_statistic(snapshot.column_values(name), method)
            for name in targets
        }
        logger.debug(f"Imputation values ({method}): {fill_values}")

        rows = []
        for row in snapshot.preview_rows:
            missing = [name for name in targets if _is_null(row.get(name))]
            if missing:
                values = dict(row.values)
                for name in missing:
                    values[name] = fill_values[name]
                rows.append(row.with_values(values))
            else:
                rows.append(row)

        columns_info = {
            name: info.cleared() if name in numeric else info
            for name, info in snapshot.columns_info.items()
        }
        remaining = sum(info.nulls for name, info in columns_info.items() if name not in numeric)
        return _replace(snapshot, preview_rows=tuple(rows), columns_info=columns_info, total_nulls=remaining)

    def _normalize(self, snapshot: AnalysisSnapshot, numeric, options) -> AnalysisSnapshot:
        scaled: Dict[str, List[float]] = {}
        for name in snapshot.columns_info:
            if name not in numeric:
                continue
            values = numeric_values(snapshot.column_values(name))
            if not values:
                continue
            data = np.asarray(values, dtype=float).reshape(-1, 1)
            # StandardScaler uses the population std and treats a zero scale as 1
            transformed = StandardScaler().fit_transform(data).ravel()
            scaled[name] = [round_half_up(float(v), 2) for v in transformed]

        if not scaled:
            return snapshot

        positions = {name: iter(values) for name, values in scaled.items()}
        rows = []
        for row in snapshot.preview_rows:
            values = dict(row.values)
            for name in scaled:
                if is_number(values.get(name)):
                    values[name] = next(positions[name])
            rows.append(row.with_values(values))
        return _replace(snapshot, preview_rows=tuple(rows))

    def _encode(self, snapshot: AnalysisSnapshot, numeric, options) -> AnalysisSnapshot:
        encodings: Dict[str, Dict[str, int]] = {}
        for name in snapshot.columns_info:
            if name in numeric:
                continue
            keys = [str(value) for value in snapshot.column_values(name) if not is_missing(value)]
            if not keys:
                continue
            _, uniques = pd.factorize(pd.Series(keys, dtype=object), sort=False)
            encodings[name] = {key: code for code, key in enumerate(uniques)}
            logger.debug(f"Encoding for column '{name}': {encodings[name]}")

        if not encodings:
            return snapshot

        rows = []
        for row in snapshot.preview_rows:
            values = dict(row.values)
            for name, mapping in encodings.items():
                value = values.get(name)
                if name in values and not is_missing(value):
                    values[name] = mapping.get(str(value), 0)
            rows.append(row.with_values(values))
        return _replace(snapshot, preview_rows=tuple(rows))


def coerce_operation(op_type) -> OperationType:
    try:
        return OperationType(op_type)
    except ValueError:
        raise UnknownOperationError(f"Unknown operation: {op_type}") from None


def _replace(snapshot: AnalysisSnapshot, **changes) -> AnalysisSnapshot:
    return replace(snapshot, **changes)


_default_engine = OperationEngine()


def apply_operation(
    snapshot: AnalysisSnapshot,
    op_type,
    numeric: AbstractSet[str],
    options: Optional[Mapping[str, Any]] = None,
) -> Tuple[AnalysisSnapshot, str]:
    """Module-level shortcut for :meth:`OperationEngine.apply`."""
    return _default_engine.apply(snapshot, op_type, numeric, options)
