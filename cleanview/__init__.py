# Core modules for the cleanview dashboard client

from .models import AnalysisSnapshot, ColumnInfo, Row, RowStatus, NOT_AVAILABLE, is_missing, quality_stats
from .operation_engine import OperationEngine, OperationType, apply_operation, column_statistic
from .snapshot_store import SnapshotStore
from .pending_queue import PendingOperation, PendingOperationQueue
from .pagination import Paginator
from .api_client import BackendClient
from .session import CleaningSession, TrainingSession, Notification

__all__ = [
    "AnalysisSnapshot",
    "ColumnInfo",
    "Row",
    "RowStatus",
    "NOT_AVAILABLE",
    "is_missing",
    "quality_stats",
    "OperationEngine",
    "OperationType",
    "apply_operation",
    "column_statistic",
    "SnapshotStore",
    "PendingOperation",
    "PendingOperationQueue",
    "Paginator",
    "BackendClient",
    "CleaningSession",
    "TrainingSession",
    "Notification",
]
