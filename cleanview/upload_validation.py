"""
Checks run on a file before it is uploaded.
"""

import mimetypes
from pathlib import Path
from typing import Optional

from .errors import UploadValidationError

ALLOWED_CONTENT_TYPES = (
    'text/csv',
    'application/vnd.ms-excel',
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
)

MAX_UPLOAD_MB = 50

_EXTENSION_TYPES = {
    '.csv': 'text/csv',
    '.xls': 'application/vnd.ms-excel',
    '.xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
}


def guess_content_type(path: Path) -> Optional[str]:
    suffix = Path(path).suffix.lower()
    if suffix in _EXTENSION_TYPES:
        return _EXTENSION_TYPES[suffix]
    return mimetypes.guess_type(str(path))[0]


def validate_upload(path, content_type: Optional[str] = None, max_size_mb: int = MAX_UPLOAD_MB) -> str:
    """
    Validate a CSV/Excel file for upload and return its content type.

    Raises UploadValidationError for missing files, unsupported types and
    files larger than ``max_size_mb``.
    """
    path = Path(path)
    if not path.is_file():
        raise UploadValidationError(f"File not found: {path}")

    content_type = content_type or guess_content_type(path)
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise UploadValidationError("Solo se permiten archivos CSV y Excel")

    if path.stat().st_size > max_size_mb * 1024 * 1024:
        raise UploadValidationError(f"El archivo no debe superar los {max_size_mb}MB")

    return content_type
