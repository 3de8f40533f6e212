"""
Original analysis plus the working preview that operations are simulated on.
"""

import logging
from dataclasses import replace
from typing import Any, FrozenSet, Mapping, Optional

from .column_classifier import numeric_columns
from .errors import NoSnapshotError
from .models import AnalysisSnapshot
from .operation_engine import OperationEngine, OperationType, coerce_operation
from .pending_queue import PendingOperation, PendingOperationQueue
from .row_status import refresh_all

logger = logging.getLogger(__name__)


class SnapshotStore:
    """
    Owns the original and preview snapshots and the pending-operation queue.

    The original is never modified. Because snapshots are immutable, resetting
    simply points the preview back at the original.
    """

    def __init__(self, engine: Optional[OperationEngine] = None):
        self.engine = engine or OperationEngine()
        self.queue = PendingOperationQueue()
        self._original: Optional[AnalysisSnapshot] = None
        self._preview: Optional[AnalysisSnapshot] = None
        self._numeric: FrozenSet[str] = frozenset()

    @property
    def original(self) -> Optional[AnalysisSnapshot]:
        return self._original

    @property
    def preview(self) -> Optional[AnalysisSnapshot]:
        return self._preview

    @property
    def numeric_columns(self) -> FrozenSet[str]:
        return self._numeric

    @property
    def is_loaded(self) -> bool:
        return self._original is not None

    @property
    def is_dirty(self) -> bool:
        return self._preview is not self._original

    def load(self, snapshot: AnalysisSnapshot) -> AnalysisSnapshot:
        """Take a freshly fetched analysis as both original and preview."""
        self._numeric = numeric_columns(snapshot.columns_info)
        rows = refresh_all(snapshot.preview_rows, self._numeric)
        if rows != snapshot.preview_rows:
            snapshot = replace(snapshot, preview_rows=rows)
        self._original = snapshot
        self._preview = snapshot
        self.queue.clear()
        logger.info(
            f"Loaded analysis for dataset {snapshot.dataset_id}: "
            f"{snapshot.total_rows} rows, {len(self._numeric)} numeric columns"
        )
        return snapshot

    def apply(self, op_type, options: Optional[Mapping[str, Any]] = None) -> PendingOperation:
        """Simulate an operation on the preview and queue it for saving."""
        if self._preview is None:
            raise NoSnapshotError("No analysis loaded")
        op_type = coerce_operation(op_type)
        options = dict(options) if options else None
        if op_type is OperationType.IMPUTE:
            options = {**(options or {}), 'method': (options or {}).get('method') or 'mean'}

        self._preview, label = self.engine.apply(self._preview, op_type, self._numeric, options)
        operation = PendingOperation(type=op_type, label=label, options=options)
        self.queue.append(operation)
        return operation

    def reset(self) -> None:
        """Discard every simulated change."""
        if self._original is None:
            return
        self._preview = self._original
        self.queue.clear()
        logger.info(f"Preview of dataset {self._original.dataset_id} reset to original")

    def clear(self) -> None:
        self._original = None
        self._preview = None
        self._numeric = frozenset()
        self.queue.clear()
