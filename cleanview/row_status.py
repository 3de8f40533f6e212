"""
Active/inactive labelling of preview rows.
"""

from typing import AbstractSet, Any, Iterable, Mapping, Tuple

from .models import Row, RowStatus, is_missing


def derive_status(values: Mapping[str, Any], numeric: AbstractSet[str]) -> RowStatus:
    """INACTIVE when any numeric column is still missing a value."""
    for column in numeric:
        if is_missing(values.get(column)):
            return RowStatus.INACTIVE
    return RowStatus.ACTIVE


def refresh_status(row: Row, numeric: AbstractSet[str]) -> Row:
    status = derive_status(row.values, numeric)
    if status == row.status:
        return row
    return Row(row.values, status)


def refresh_all(rows: Iterable[Row], numeric: AbstractSet[str]) -> Tuple[Row, ...]:
    return tuple(refresh_status(row, numeric) for row in rows)
