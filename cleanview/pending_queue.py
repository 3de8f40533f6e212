"""
Ordered log of preview operations that have not been saved yet.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional

from .operation_engine import OperationType


@dataclass(frozen=True)
class PendingOperation:
    type: OperationType
    label: str
    options: Optional[Mapping[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type.value,
            'options': dict(self.options or {}),
            'label': self.label,
        }


class PendingOperationQueue:
    """Append-only until saved or reset."""

    def __init__(self):
        self._operations: List[PendingOperation] = []

    def append(self, operation: PendingOperation) -> None:
        self._operations.append(operation)

    def clear(self) -> None:
        self._operations.clear()

    def __len__(self) -> int:
        return len(self._operations)

    def __iter__(self) -> Iterator[PendingOperation]:
        return iter(list(self._operations))

    def __bool__(self) -> bool:
        return bool(self._operations)

    @property
    def operations(self) -> List[PendingOperation]:
        return list(self._operations)

    def labels(self) -> List[str]:
        return [op.label for op in self._operations]

    def to_payload(self, dataset_id: Any, user_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Body of the ``/clean`` request.

        ``operation`` lists the types in the order they were queued and
        ``options`` carries one bag per operation at the same index, so
        parameters of later operations are not lost.
        """
        payload = {
            'dataset_id': dataset_id,
            'operation': [op.type.value for op in self._operations],
            'options': [dict(op.options or {}) for op in self._operations],
        }
        if user_id is not None:
            payload['user_id'] = user_id
        return payload
