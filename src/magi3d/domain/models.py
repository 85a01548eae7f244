"""Normalized task model shared by every provider adapter.

Vendors report progress, status and outputs in their own vocabularies; the
adapters translate them into :class:`Task` snapshots so that callers observe
one lifecycle regardless of which service runs the job.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ProviderId(str, Enum):
    """Identifiers of the supported generation services."""

    TRIPO = "tripo"
    HUNYUAN = "hunyuan"


class TaskStatus(str, Enum):
    """Lifecycle states of a task.

    ``SUCCEEDED``, ``FAILED`` and ``CANCELED`` are terminal: once a snapshot
    reports one of them, no later snapshot of the same task moves back to
    ``PENDING`` or ``PROCESSING``.
    """

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    CANCELED = "CANCELED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {TaskStatus.SUCCEEDED, TaskStatus.FAILED, TaskStatus.CANCELED}
)


class TaskType(str, Enum):
    """Operations understood by the SDK.

    Values are the wire identifiers used by Tripo; other vendors map them to
    their own actions. Each adapter supports a subset.
    """

    TEXT_TO_3D = "text_to_model"
    IMAGE_TO_3D = "image_to_model"
    MULTIVIEW_TO_3D = "multiview_to_model"

    TEXT_TO_IMAGE = "text_to_image"
    GENERATE_IMAGE = "generate_image"

    TEXTURE = "texture_model"
    REFINE = "refine_model"

    PRE_RIG_CHECK = "animate_prerigcheck"
    RIG = "animate_rig"
    ANIMATE = "animate_retarget"

    SEGMENT = "mesh_segmentation"
    MESH_COMPLETION = "mesh_completion"
    DECIMATE = "highpoly_to_lowpoly"
    UV_UNWRAP = "uv_unwrap"

    PROFILE_TO_3D = "profile_to_3d"

    CONVERT = "convert_model"
    IMPORT = "import_model"
    STYLIZE = "stylize_model"


@dataclass(slots=True)
class TaskArtifacts:
    """Output references of a succeeded task.

    ``model`` is the primary model reference chosen by the adapter; the other
    model fields keep format- or quality-specific variants when the vendor
    exposes them.
    """

    model: str | None = None
    model_glb: str | None = None
    model_pbr: str | None = None
    model_base: str | None = None
    model_usdz: str | None = None
    model_fbx: str | None = None
    model_obj: str | None = None
    thumbnail: str | None = None
    video: str | None = None
    generated_image: str | None = None
    riggable: bool | None = None
    rig_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass(slots=True)
class TaskErrorInfo:
    """Normalized failure details attached to failed or cancelled tasks."""

    code: str
    message: str
    raw: Any = None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class Task:
    """Snapshot of a vendor task in the shared representation."""

    id: str
    provider: ProviderId
    kind: TaskType
    status: TaskStatus
    progress: int = 0
    progress_detail: str | None = None
    artifacts: TaskArtifacts | None = None
    error: TaskErrorInfo | None = None
    created_at: datetime = field(default_factory=utcnow)
    finished_at: datetime | None = None
    raw_response: Any = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible primitives (raw vendor payload excluded)."""

        data: dict[str, Any] = {
            "id": self.id,
            "provider": self.provider.value,
            "kind": self.kind.value,
            "status": self.status.value,
            "progress": self.progress,
            "created_at": self.created_at.isoformat(),
        }
        if self.progress_detail is not None:
            data["progress_detail"] = self.progress_detail
        if self.artifacts is not None:
            data["artifacts"] = self.artifacts.to_dict()
        if self.error is not None:
            data["error"] = {"code": self.error.code, "message": self.error.message}
        if self.finished_at is not None:
            data["finished_at"] = self.finished_at.isoformat()
        return data


def clamp_progress(value: Any) -> int:
    """Coerce a vendor progress value into ``0..100``."""

    try:
        progress = int(value or 0)
    except (TypeError, ValueError):
        return 0
    return max(0, min(progress, 100))


__all__ = [
    "ProviderId",
    "TaskStatus",
    "TaskType",
    "TERMINAL_STATUSES",
    "TaskArtifacts",
    "TaskErrorInfo",
    "Task",
    "clamp_progress",
    "utcnow",
]
