"""
Exception hierarchy for the cleanview client.
"""

from typing import Optional


class CleanviewError(Exception):
    """Base class for all cleanview errors."""


class BackendError(CleanviewError):
    """Raised when the backend answers with a non-2xx status or cannot be reached."""

    def __init__(self, status_code: Optional[int], detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(detail)


class UploadValidationError(CleanviewError):
    """Raised before an upload request when the file is not acceptable."""


class TrainingValidationError(CleanviewError):
    """Raised before a training request when required fields are missing."""


class ActionInProgressError(CleanviewError):
    """Raised when an action is started while the same action is still running."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"'{action}' is already in progress")


class NoSnapshotError(CleanviewError):
    """Raised when an operation needs an analysis but none has been loaded."""


class UnknownOperationError(CleanviewError, ValueError):
    """Raised for operation types the engine does not know."""
