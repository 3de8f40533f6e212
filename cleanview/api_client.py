"""
Async HTTP client for the dashboard backend.

Every call carries the client-generated ``user_id``. Non-2xx responses are
turned into BackendError with the server's ``detail`` message when it sends one.
Nothing is retried automatically.
"""

import time
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from .config import ClientConfig
from .errors import BackendError
from .identity import FileIdentityProvider, IdentityProvider
from .models import AnalysisSnapshot, Dataset, TrainedModel
from .training import TrainingRequest
from .upload_validation import validate_upload

logger = logging.getLogger(__name__)


def handle_response(response: httpx.Response) -> Any:
    """Return the decoded JSON body or raise BackendError."""
    if response.is_success:
        return response.json()

    try:
        error_data = response.json()
    except ValueError:
        error_data = {'detail': 'Error desconocido'}

    detail = error_data.get('detail') if isinstance(error_data, dict) else None
    if detail and not isinstance(detail, str):
        detail = str(detail)
    raise BackendError(response.status_code, detail or f"Error {response.status_code}")


class BackendClient:
    """Thin async wrapper around the backend's REST endpoints."""

    def __init__(self,
                 config: Optional[ClientConfig] = None,
                 identity: Optional[IdentityProvider] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config or ClientConfig()
        self.identity = identity or FileIdentityProvider(self.config.identity_path)
        self.transport = transport

    @property
    def user_id(self) -> str:
        return self.identity.get_user_id()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        start_time = time.time()
        try:
            async with httpx.AsyncClient(timeout=self.config.timeout, transport=self.transport) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise BackendError(None, str(e)) from e

        logger.debug(f"{method} {url} -> {response.status_code} in {time.time() - start_time:.2f}s")
        return handle_response(response)

    def _url(self, path: str) -> str:
        return f"{self.config.api_url}{path}"

    # ------------------------- Upload -------------------------
    async def upload_dataset(self, path, content_type: Optional[str] = None) -> Dict[str, Any]:
        """Upload a CSV/Excel file. Validation errors are raised before sending."""
        path = Path(path)
        content_type = validate_upload(path, content_type, self.config.max_upload_mb)
        with open(path, 'rb') as fh:
            files = {'file': (path.name, fh.read(), content_type)}
        return await self._request('POST', self._url('/upload'), files=files, data={'user_id': self.user_id})

    async def list_datasets(self) -> List[Dataset]:
        data = await self._request('GET', self._url(f"/datasets/{self.user_id}"))
        return [Dataset.from_dict(item) for item in data.get('datasets', [])]

    # ------------------------- Clean -------------------------
    async def analyze_dataset(self, dataset_id: Any) -> AnalysisSnapshot:
        data = await self._request('POST', self._url('/analyze'), json={
            'user_id': self.user_id,
            'dataset_id': dataset_id,
        })
        if data.get('dataset_id') is None:
            data = {**data, 'dataset_id': dataset_id}
        return AnalysisSnapshot.from_response(data)

    async def analyze_cleaned_dataset(self, dataset_id: Any) -> List[str]:
        """Column names of a cleaned dataset."""
        data = await self._request('POST', self._url('/analyze-cleaned'), json={
            'user_id': self.user_id,
            'dataset_id': dataset_id,
        })
        return list(data.get('columns') or [])

    async def clean_dataset(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        body = {'user_id': self.user_id, **payload}
        return await self._request('POST', self._url('/clean'), json=body)

    async def list_cleaned_datasets(self) -> List[Dataset]:
        data = await self._request('GET', self._url(f"/cleaned-datasets/{self.user_id}"))
        return [Dataset.from_dict(item) for item in data.get('datasets', [])]

    # ------------------------- Train -------------------------
    async def train_model(self, request: TrainingRequest) -> Dict[str, Any]:
        return await self._request('POST', self._url('/train'), json=request.to_payload(self.user_id))

    async def list_models(self) -> List[TrainedModel]:
        data = await self._request('GET', self._url(f"/models/{self.user_id}"))
        return [TrainedModel.from_dict(item) for item in data.get('models', [])]

    # ------------------------- Health -------------------------
    async def check_health(self) -> Dict[str, Any]:
        return await self._request('GET', self.config.health_url)
