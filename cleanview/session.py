"""
Session controllers that tie the preview simulator to the backend.

A session holds everything one user sees on a screen: the dataset list, the
loaded analysis and its preview, pending operations, the current page and the
notifications produced by each action. Backend failures never escape a session
method; they become destructive notifications and the previous state is kept.
"""

import asyncio
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .api_client import BackendClient
from .errors import ActionInProgressError, CleanviewError, TrainingValidationError, UploadValidationError
from .models import AnalysisSnapshot, Dataset, QualityStats, Row, TrainedModel, quality_stats
from .pagination import Paginator
from .pending_queue import PendingOperation
from .snapshot_store import SnapshotStore
from .training import TrainingRequest
from .upload_validation import validate_upload

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    """A user-facing message (the dashboard shows these as toasts)."""
    title: str
    description: str = ""
    variant: str = "default"

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


class _Session:
    """Busy flags and notifications shared by the screen sessions."""

    actions = ()

    def __init__(self, client: BackendClient):
        self.client = client
        self.notifications: List[Notification] = []
        self.busy: Dict[str, bool] = {action: False for action in self.actions}

    def notify(self, title: str, description: str = "", variant: str = "default") -> Notification:
        notification = Notification(title, description, variant)
        self.notifications.append(notification)
        log = logger.warning if notification.is_error else logger.info
        log(f"{title}: {description}" if description else title)
        return notification

    def notify_error(self, title: str, error: Exception) -> Notification:
        logger.error(f"{title}: {error}")
        notification = Notification(title, str(error), "destructive")
        self.notifications.append(notification)
        return notification

    @contextmanager
    def _busy(self, action: str):
        if self.busy.get(action):
            logger.warning(f"Rejected '{action}': already in progress")
            raise ActionInProgressError(action)
        self.busy[action] = True
        try:
            yield
        finally:
            self.busy[action] = False


class CleaningSession(_Session):
    """Upload and clean screens: dataset list, analysis preview and saving."""

    actions = ('saving', 'uploading')

    def __init__(self, client: BackendClient, paginator: Optional[Paginator] = None,
                 store: Optional[SnapshotStore] = None):
        super().__init__(client)
        self.paginator = paginator or Paginator(client.config.page_size)
        self.store = store or SnapshotStore()
        self.datasets: List[Dataset] = []
        self.selected_dataset_id: Any = None
        self.current_page = 1
        self._analysis_task: Optional[asyncio.Task] = None

    # ------------------------- State -------------------------
    @property
    def analyzing(self) -> bool:
        return self._analysis_task is not None and not self._analysis_task.done()

    @property
    def original(self) -> Optional[AnalysisSnapshot]:
        return self.store.original

    @property
    def preview(self) -> Optional[AnalysisSnapshot]:
        return self.store.preview

    @property
    def pending_operations(self) -> List[PendingOperation]:
        return self.store.queue.operations

    @property
    def stats(self) -> QualityStats:
        return quality_stats(self.preview)

    def current_rows(self) -> Sequence[Row]:
        if self.preview is None:
            return ()
        return self.paginator.page(self.preview.preview_rows, self.current_page)

    def page_count(self) -> int:
        total = len(self.preview.preview_rows) if self.preview else 0
        return self.paginator.page_count(total)

    def set_page(self, page: int) -> int:
        total = len(self.preview.preview_rows) if self.preview else 0
        self.current_page = self.paginator.clamp(page, total)
        return self.current_page

    # ------------------------- Datasets -------------------------
    async def refresh_datasets(self) -> List[Dataset]:
        """Reload the dataset list; selects the first dataset if none is selected."""
        try:
            self.datasets = await self.client.list_datasets()
        except CleanviewError as e:
            self.notify_error("Error al cargar datasets", e)
            return self.datasets

        if self.datasets and self.selected_dataset_id is None:
            await self.select_dataset(self.datasets[0].id)
        return self.datasets

    async def upload(self, path, content_type: Optional[str] = None) -> Optional[Dict[str, Any]]:
        with self._busy('uploading'):
            try:
                validate_upload(path, content_type, self.client.config.max_upload_mb)
            except UploadValidationError as e:
                self.notify_error("Archivo no válido", e)
                return None

            try:
                data = await self.client.upload_dataset(path, content_type)
            except CleanviewError as e:
                self.notify_error("Error al subir archivo", e)
                return None

            self.notify(
                "Archivo cargado exitosamente",
                f"{data.get('file_name')} - {data.get('rows')} filas, {data.get('columns')} columnas",
            )
        await self.refresh_datasets()
        return data

    # ------------------------- Analysis -------------------------
    async def select_dataset(self, dataset_id: Any) -> Optional[AnalysisSnapshot]:
        """
        Make ``dataset_id`` current and analyze it.

        An analysis still running for a previous selection is cancelled, and a
        response that arrives for a dataset that is no longer selected is
        dropped. Returns the loaded snapshot, or None if superseded or failed.
        """
        self.selected_dataset_id = dataset_id
        self.current_page = 1

        previous = self._analysis_task
        if previous is not None and not previous.done():
            logger.info("Cancelling analysis superseded by a new selection")
            previous.cancel()

        task = asyncio.ensure_future(self._analyze(dataset_id))
        self._analysis_task = task
        try:
            return await task
        except asyncio.CancelledError:
            if task is not self._analysis_task:
                return None
            raise

    async def reanalyze(self) -> Optional[AnalysisSnapshot]:
        if self.analyzing:
            raise ActionInProgressError('analyzing')
        if self.selected_dataset_id is None:
            return None
        return await self.select_dataset(self.selected_dataset_id)

    async def _analyze(self, dataset_id: Any) -> Optional[AnalysisSnapshot]:
        try:
            snapshot = await self.client.analyze_dataset(dataset_id)
        except CleanviewError as e:
            if dataset_id == self.selected_dataset_id:
                self.notify_error("Error al analizar dataset", e)
            return None

        if dataset_id != self.selected_dataset_id:
            logger.warning(f"Discarding stale analysis for dataset {dataset_id}")
            return None

        snapshot = self.store.load(snapshot)
        self.current_page = 1
        return snapshot

    # ------------------------- Preview -------------------------
    def apply(self, op_type, options: Optional[Mapping[str, Any]] = None) -> PendingOperation:
        """Simulate an operation on the preview and queue it."""
        operation = self.store.apply(op_type, options)
        self.set_page(self.current_page)
        return operation

    def reset(self) -> None:
        self.store.reset()
        self.set_page(self.current_page)

    async def save(self) -> bool:
        """
        Persist pending operations, then reload the analysis from the backend.

        The locally simulated preview is discarded in favour of the fresh
        analysis. Returns True when the backend accepted the operations.
        """
        if not self.store.queue:
            self.notify("No hay cambios", "No hay operaciones pendientes", "destructive")
            return False

        with self._busy('saving'):
            dataset_id = self.selected_dataset_id
            payload = self.store.queue.to_payload(dataset_id)
            try:
                data = await self.client.clean_dataset(payload)
            except CleanviewError as e:
                self.notify_error("Error al guardar", e)
                return False

            applied = data.get('operations_applied') or []
            self.notify("Cambios guardados", f"{len(applied)} operaciones aplicadas")
            if dataset_id != self.selected_dataset_id:
                # Selection moved on while saving; its preview and queue are not ours
                logger.warning(f"Stale save for dataset {dataset_id}; keeping selection {self.selected_dataset_id}")
                return True

            self.store.queue.clear()
            previous = self.store.original
            snapshot = await self.select_dataset(dataset_id)
            if snapshot is None and self.store.original is previous:
                # The simulated preview no longer matches the backend
                logger.warning(f"Dropping preview of dataset {dataset_id} until it is re-analyzed")
                self.store.clear()
        return True


class TrainingSession(_Session):
    """Train screen: cleaned datasets, their columns and trained models."""

    actions = ('training',)

    def __init__(self, client: BackendClient):
        super().__init__(client)
        self.cleaned_datasets: List[Dataset] = []
        self.models: List[TrainedModel] = []
        self.columns: List[str] = []
        self.selected_dataset_id: Any = None

    async def refresh_cleaned_datasets(self) -> List[Dataset]:
        try:
            self.cleaned_datasets = await self.client.list_cleaned_datasets()
        except CleanviewError as e:
            self.notify_error("No se pudieron cargar los datasets limpios", e)
            return self.cleaned_datasets

        if self.cleaned_datasets and self.selected_dataset_id is None:
            await self.select_dataset(self.cleaned_datasets[0].id)
        return self.cleaned_datasets

    async def select_dataset(self, dataset_id: Any) -> List[str]:
        """Select a cleaned dataset and load its feature columns."""
        self.selected_dataset_id = dataset_id
        try:
            columns = await self.client.analyze_cleaned_dataset(dataset_id)
        except CleanviewError as e:
            self.notify_error("No se pudieron obtener las columnas del dataset", e)
            return self.columns

        if dataset_id != self.selected_dataset_id:
            logger.warning(f"Discarding stale column list for dataset {dataset_id}")
            return self.columns
        self.columns = columns
        return columns

    async def refresh_models(self) -> List[TrainedModel]:
        try:
            self.models = await self.client.list_models()
        except CleanviewError as e:
            self.notify_error("Error al obtener modelos", e)
        return self.models

    async def train(self, request: TrainingRequest) -> Optional[Dict[str, Any]]:
        with self._busy('training'):
            try:
                request.validate()
            except TrainingValidationError as e:
                self.notify_error("Campos incompletos", e)
                return None

            try:
                data = await self.client.train_model(request)
            except CleanviewError as e:
                self.notify_error("Error al entrenar modelo", e)
                return None

            accuracy = (data.get('metrics') or {}).get('accuracy')
            description = data.get('name', request.name)
            if accuracy is not None:
                description += f" - Precisión: {accuracy * 100:.2f}%"
            self.notify("Modelo entrenado exitosamente", description)
        await self.refresh_models()
        return data
