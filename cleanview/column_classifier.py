"""
Numeric/categorical split of the analysed columns.
"""

from typing import FrozenSet, Mapping

from .models import ColumnInfo


def numeric_columns(columns_info: Mapping[str, ColumnInfo]) -> FrozenSet[str]:
    """Names of the columns the backend flagged as numeric."""
    return frozenset(name for name, info in columns_info.items() if info.is_numeric)


def is_numeric_column(column: str, columns_info: Mapping[str, ColumnInfo]) -> bool:
    # Columns the analysis does not describe are treated as categorical
    info = columns_info.get(column)
    return bool(info and info.is_numeric)


def categorical_columns(columns_info: Mapping[str, ColumnInfo]) -> FrozenSet[str]:
    return frozenset(name for name, info in columns_info.items() if not info.is_numeric)
