"""Error taxonomy shared by provider adapters and the polling client.

Every exception carries a machine-checkable ``code`` next to the
human-readable message so callers can branch on ``exc.code`` (for example
``INSUFFICIENT_CREDITS`` versus ``CONTENT_POLICY_VIOLATION``) without
matching on message text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .domain.models import Task

__all__ = [
    "Magi3DError",
    "UnsupportedOperationError",
    "InvalidInputError",
    "ApiError",
    "TaskError",
    "TaskFailedError",
    "TaskCanceledError",
    "PollTimeoutError",
    "MaxRetriesExceededError",
    "PollStoppedError",
]


class Magi3DError(Exception):
    """Base class for all errors raised by the SDK."""

    code: str = "MAGI3D_ERROR"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class UnsupportedOperationError(Magi3DError):
    """Raised when an adapter does not implement the requested task kind."""

    code = "UNSUPPORTED_OPERATION"


class InvalidInputError(Magi3DError):
    """Raised when caller-supplied input cannot be used as-is."""

    code = "INVALID_INPUT"


class ApiError(Magi3DError):
    """Vendor rejected a creation or status request.

    ``raw`` keeps the untouched vendor payload for debugging; ``http_status``
    is set when the rejection arrived as an HTTP error status.
    """

    code = "API_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str,
        raw: Any = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message, code=code)
        self.raw = raw
        self.http_status = http_status

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.http_status is not None:
            data["http_status"] = self.http_status
        return data


class TaskError(Magi3DError):
    """The vendor executed the task and reported a terminal failure."""

    code = "TASK_ERROR"

    def __init__(self, message: str, *, task: "Task", code: str | None = None) -> None:
        super().__init__(message, code=code)
        self.task = task


class TaskFailedError(TaskError):
    """Task reached ``FAILED``."""

    code = "GENERATION_FAILED"

    def __init__(self, task: "Task") -> None:
        error = task.error
        code = error.code if error is not None and error.code else "UNKNOWN"
        message = error.message if error is not None and error.message else "Task failed"
        super().__init__(f"{message} (code: {code})", task=task, code=code)


class TaskCanceledError(TaskError):
    """Task reached ``CANCELED`` on the vendor side."""

    code = "TASK_CANCELED"

    def __init__(self, task: "Task") -> None:
        code = task.error.code if task.error is not None and task.error.code else None
        super().__init__(f"Task {task.id} was cancelled", task=task, code=code)


class PollTimeoutError(Magi3DError):
    """Polling exceeded its wall-clock budget while the task was still running."""

    code = "POLL_TIMEOUT"

    def __init__(self, task_id: str, timeout_seconds: float) -> None:
        super().__init__(f"Task {task_id} timed out after {timeout_seconds:g}s")
        self.task_id = task_id
        self.timeout_seconds = timeout_seconds


class MaxRetriesExceededError(Magi3DError):
    """Too many consecutive status fetches failed."""

    code = "MAX_RETRIES_EXCEEDED"

    def __init__(self, task_id: str, attempts: int, last_error: BaseException) -> None:
        detail = str(last_error) or type(last_error).__name__
        super().__init__(
            f"Polling task {task_id} failed after {attempts} consecutive errors: {detail}"
        )
        self.task_id = task_id
        self.attempts = attempts
        self.last_error = last_error


class PollStoppedError(Magi3DError):
    """Polling session was stopped by the caller before resolution."""

    code = "POLL_STOPPED"

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Polling of task {task_id} was stopped")
        self.task_id = task_id
