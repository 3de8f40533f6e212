"""
Client configuration.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

DEFAULT_API_URL = 'http://localhost:8000/api'
DEFAULT_IDENTITY_FILE = Path.home() / '.cleanview' / 'user_id'


@dataclass
class ClientConfig:
    """Configuration for talking to the backend service."""
    api_url: str = DEFAULT_API_URL
    timeout: float = 30.0
    page_size: int = 5
    identity_path: Path = field(default_factory=lambda: DEFAULT_IDENTITY_FILE)
    max_upload_mb: int = 50

    def __post_init__(self):
        self.api_url = self.api_url.rstrip('/')
        self.identity_path = Path(self.identity_path)

    @property
    def health_url(self) -> str:
        """Health check lives on the service root, outside ``/api``."""
        if self.api_url.endswith('/api'):
            return self.api_url[:-len('/api')] + '/health'
        return self.api_url + '/health'

    @classmethod
    def from_env(cls, api_url: Optional[str] = None, identity_path: Optional[str] = None, **kwargs) -> 'ClientConfig':
        return cls(
            api_url=api_url or os.environ.get('CLEANVIEW_API_URL', DEFAULT_API_URL),
            identity_path=Path(identity_path or os.environ.get('CLEANVIEW_IDENTITY_FILE', DEFAULT_IDENTITY_FILE)),
            **kwargs
        )
