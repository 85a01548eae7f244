"""Abstract provider adapter definition."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

import httpx
import structlog

from ..domain.models import ProviderId, Task, TaskType
from ..domain.params import ImageTo3DParams, TaskParams, is_primary_generation
from ..exceptions import UnsupportedOperationError
from .task_cache import TaskMetadataCache

logger = structlog.get_logger(__name__)


class ProviderAdapter(ABC):
    """Base interface for vendor adapters.

    Subclasses translate :class:`~magi3d.domain.params.TaskParams` into vendor
    requests and vendor status payloads back into :class:`Task` snapshots.
    The public ``create_task`` / ``get_task_status`` pair enforces the
    capability check and keeps the first terminal snapshot for every vendor.
    """

    name: str
    provider_id: ProviderId

    def __init__(
        self,
        *,
        supported_kinds: Iterable[TaskType],
        http_client: httpx.AsyncClient,
        terminal_cache: TaskMetadataCache[Task] | None = None,
    ) -> None:
        self.supported_kinds = frozenset(supported_kinds)
        self._http = http_client
        self._terminal = terminal_cache if terminal_cache is not None else TaskMetadataCache()

    def supports(self, kind: TaskType) -> bool:
        return kind in self.supported_kinds

    async def create_task(self, params: TaskParams) -> str:
        """Submit ``params`` to the vendor and return its task id."""

        if not self.supports(params.kind):
            raise UnsupportedOperationError(
                f"Provider {self.name} does not support task type: {params.kind.value}"
            )
        if is_primary_generation(params) and isinstance(params, ImageTo3DParams):
            await self.prepare_input(params.input)
        task_id = await self._create_task(params)
        logger.info(
            "provider.task.created",
            provider=self.provider_id.value,
            kind=params.kind.value,
            task_id=task_id,
        )
        return task_id

    async def get_task_status(self, task_id: str) -> Task:
        """Fetch one normalized snapshot; the first terminal snapshot is final."""

        stored = self._terminal.get(task_id)
        if stored is not None:
            return stored
        task = await self._fetch_task_status(task_id)
        if task.is_terminal:
            self._terminal.set(task_id, task)
            logger.info(
                "provider.task.finished",
                provider=self.provider_id.value,
                task_id=task_id,
                status=task.status.value,
            )
        return task

    @abstractmethod
    async def prepare_input(self, raw: str) -> str:
        """Validate (and where needed transform) an image input before submission."""

    @abstractmethod
    async def _create_task(self, params: TaskParams) -> str:
        """Build the vendor payload, send it and return the vendor task id."""

    @abstractmethod
    async def _fetch_task_status(self, task_id: str) -> Task:
        """Query the vendor and normalize its response."""

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ProviderAdapter":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
