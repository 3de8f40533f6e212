"""
Client-generated user identifiers.

The backend scopes datasets and models by an opaque ``user_id`` that the client
creates on first use and keeps in local storage.
"""

import uuid
import logging
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    def get_user_id(self) -> str: ...

    def reset(self) -> None: ...


class FileIdentityProvider:
    """Stores the identifier in a small file, creating it on first use."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._cached: Optional[str] = None

    def get_user_id(self) -> str:
        if self._cached:
            return self._cached
        if self.path.exists():
            stored = self.path.read_text(encoding='utf-8').strip()
            if stored:
                self._cached = stored
                return stored

        user_id = str(uuid.uuid4())
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(user_id, encoding='utf-8')
        logger.info(f"Created new user id at {self.path}")
        self._cached = user_id
        return user_id

    def reset(self) -> None:
        """Forget the identifier; the next call generates a new one."""
        self._cached = None
        if self.path.exists():
            self.path.unlink()


class StaticIdentityProvider:
    """Fixed identifier, for scripts and tests."""

    def __init__(self, user_id: Optional[str] = None):
        self.user_id = user_id or str(uuid.uuid4())

    def get_user_id(self) -> str:
        return self.user_id

    def reset(self) -> None:
        self.user_id = str(uuid.uuid4())
