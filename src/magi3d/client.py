"""High-level task client: creation, single status fetches and polling."""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable, Generator
from typing import Any

import structlog

from .core.config import PollSettings
from .domain.models import Task, TaskStatus
from .domain.params import TaskParams
from .exceptions import (
    InvalidInputError,
    MaxRetriesExceededError,
    PollStoppedError,
    PollTimeoutError,
    TaskCanceledError,
    TaskError,
    TaskFailedError,
    UnsupportedOperationError,
)
from .providers.providers_base import ProviderAdapter

logger = structlog.get_logger(__name__)

BACKOFF_FACTOR = 1.5
MAX_BACKOFF_SECONDS = 15.0

ProgressListener = Callable[[Task], Any]

# Errors that describe the request or the task itself; retrying cannot help.
_NON_RETRYABLE = (TaskError, UnsupportedOperationError, InvalidInputError)


class PollSession:
    """State of one polling run.

    ``interval`` is the delay currently applied between fetches and grows while
    fetches fail; ``last_task`` holds the most recent snapshot observed.
    """

    def __init__(
        self,
        task_id: str,
        *,
        interval: float,
        timeout: float,
        max_retries: int,
        started_at: float,
    ) -> None:
        self.task_id = task_id
        self.base_interval = interval
        self.interval = interval
        self.timeout = timeout
        self.max_retries = max_retries
        self.started_at = started_at
        self.consecutive_errors = 0
        self.last_task: Task | None = None
        self._runner: asyncio.Task[Task] | None = None
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    def done(self) -> bool:
        return self._runner is not None and self._runner.done()

    def stop(self) -> None:
        """Cancel the pending sleep or in-flight request; no vendor call is made."""
        if self._runner is None or self._runner.done():
            return
        self._stopped = True
        self._runner.cancel()
        logger.info("poll.stopped", task_id=self.task_id)

    async def wait(self) -> Task:
        if self._runner is None:
            raise RuntimeError("Polling session was not started")
        try:
            return await self._runner
        except asyncio.CancelledError:
            if self._stopped:
                raise PollStoppedError(self.task_id) from None
            raise

    def __await__(self) -> Generator[Any, None, Task]:
        return self.wait().__await__()


class TaskClient:
    """Drive provider tasks from creation to a terminal outcome."""

    def __init__(
        self,
        provider: ProviderAdapter,
        *,
        poll_settings: PollSettings | None = None,
        clock: Callable[[], float] | None = None,
        sleep: Callable[[float], Any] | None = None,
    ) -> None:
        self.provider = provider
        self._poll_settings = poll_settings or PollSettings()
        self._clock = clock or time.monotonic
        self._sleep = self._wrap_sleep(sleep)
        self._listeners: list[ProgressListener] = []

    @staticmethod
    def _wrap_sleep(
        sleep: Callable[[float], Any] | None,
    ) -> Callable[[float], Awaitable[None]]:
        if sleep is None:
            return asyncio.sleep

        async def _async_sleep(seconds: float) -> None:
            result = sleep(seconds)
            if inspect.isawaitable(result):
                await result

        return _async_sleep

    async def create_task(self, params: TaskParams) -> str:
        return await self.provider.create_task(params)

    async def get_task(self, task_id: str) -> Task:
        return await self.provider.get_task_status(task_id)

    def add_progress_listener(self, listener: ProgressListener) -> None:
        """Receive every snapshot fetched by any poll run of this client."""
        self._listeners.append(listener)

    def remove_progress_listener(self, listener: ProgressListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    async def poll_until_done(
        self,
        task_id: str,
        *,
        interval: float | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        on_progress: ProgressListener | None = None,
    ) -> Task:
        """Poll ``task_id`` until it succeeds, fails or polling gives up.

        Returns the SUCCEEDED snapshot. Raises :class:`TaskFailedError` or
        :class:`TaskCanceledError` for terminal failures,
        :class:`PollTimeoutError` once more than ``timeout`` seconds have
        elapsed at the start of an iteration and
        :class:`MaxRetriesExceededError` after ``max_retries`` consecutive
        fetch failures. Intervals are in seconds; after each failed fetch the
        delay grows by 1.5x up to 15s and resets after the next success.
        """

        session = self._new_session(task_id, interval, timeout, max_retries)
        return await self._run(session, on_progress)

    def start_polling(
        self,
        task_id: str,
        *,
        interval: float | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        on_progress: ProgressListener | None = None,
    ) -> PollSession:
        """Start polling in the background and return a stoppable session.

        Must be called with a running event loop. Awaiting the session yields
        the same outcome as :meth:`poll_until_done`, or raises
        :class:`PollStoppedError` after :meth:`PollSession.stop`.
        """

        session = self._new_session(task_id, interval, timeout, max_retries)
        session._runner = asyncio.create_task(self._run(session, on_progress))
        return session

    def _new_session(
        self,
        task_id: str,
        interval: float | None,
        timeout: float | None,
        max_retries: int | None,
    ) -> PollSession:
        interval = self._poll_settings.interval_seconds if interval is None else interval
        timeout = self._poll_settings.timeout_seconds if timeout is None else timeout
        max_retries = self._poll_settings.max_retries if max_retries is None else max_retries
        if interval <= 0 or timeout <= 0:
            raise ValueError("interval and timeout must be positive")
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        return PollSession(
            task_id,
            interval=interval,
            timeout=timeout,
            max_retries=max_retries,
            started_at=self._clock(),
        )

    async def _run(self, session: PollSession, on_progress: ProgressListener | None) -> Task:
        task_id = session.task_id
        while True:
            if self._clock() - session.started_at > session.timeout:
                logger.warning("poll.timeout", task_id=task_id, timeout=session.timeout)
                raise PollTimeoutError(task_id, session.timeout)

            try:
                task = await self.provider.get_task_status(task_id)
            except _NON_RETRYABLE:
                raise
            except Exception as exc:
                session.consecutive_errors += 1
                if session.consecutive_errors >= session.max_retries:
                    logger.error(
                        "poll.retries_exhausted",
                        task_id=task_id,
                        attempts=session.consecutive_errors,
                    )
                    raise MaxRetriesExceededError(task_id, session.consecutive_errors, exc) from exc
                session.interval = min(session.interval * BACKOFF_FACTOR, MAX_BACKOFF_SECONDS)
                logger.warning(
                    "poll.retry",
                    task_id=task_id,
                    attempt=session.consecutive_errors,
                    delay=session.interval,
                    error=str(exc),
                )
                await self._sleep(session.interval)
                continue

            session.consecutive_errors = 0
            session.interval = session.base_interval
            session.last_task = task
            await self._notify(task, on_progress)

            if task.status is TaskStatus.SUCCEEDED:
                return task
            if task.status is TaskStatus.FAILED:
                raise TaskFailedError(task)
            if task.status is TaskStatus.CANCELED:
                raise TaskCanceledError(task)

            await self._sleep(session.interval)

    async def _notify(self, task: Task, on_progress: ProgressListener | None) -> None:
        callbacks = list(self._listeners)
        if on_progress is not None:
            callbacks.append(on_progress)
        for callback in callbacks:
            try:
                result = callback(task)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("poll.listener_failed", task_id=task.id)

    async def aclose(self) -> None:
        await self.provider.aclose()

    async def __aenter__(self) -> "TaskClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = ["TaskClient", "PollSession", "ProgressListener", "BACKOFF_FACTOR", "MAX_BACKOFF_SECONDS"]
