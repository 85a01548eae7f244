"""Task parameter variants, one dataclass per :class:`TaskType`.

Parameters are built by the caller, consumed once by an adapter and never
retained afterwards. ``provider_options`` is a vendor-specific passthrough
bag merged into the vendor payload after the named fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, Sequence, Union

from .models import TaskType


@dataclass(frozen=True, slots=True, kw_only=True)
class TextTo3DParams:
    kind: ClassVar[TaskType] = TaskType.TEXT_TO_3D

    prompt: str
    negative_prompt: str | None = None
    provider_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class ImageTo3DParams:
    """``input`` is a public URL, a data URI or raw base64 image data."""

    kind: ClassVar[TaskType] = TaskType.IMAGE_TO_3D

    input: str
    prompt: str | None = None
    provider_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class MultiviewTo3DParams:
    """Views ordered ``[front, left, back, right]``; empty strings mark missing views."""

    kind: ClassVar[TaskType] = TaskType.MULTIVIEW_TO_3D

    inputs: Sequence[str]
    prompt: str | None = None
    provider_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class TextToImageParams:
    kind: ClassVar[TaskType] = TaskType.TEXT_TO_IMAGE

    prompt: str
    negative_prompt: str | None = None
    provider_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class GenerateImageParams:
    kind: ClassVar[TaskType] = TaskType.GENERATE_IMAGE

    prompt: str
    input: str | None = None
    inputs: Sequence[str] = ()
    provider_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class TextureParams:
    kind: ClassVar[TaskType] = TaskType.TEXTURE

    task_id: str
    prompt: str | None = None
    style_image: str | None = None
    enable_pbr: bool | None = None
    provider_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class RefineParams:
    kind: ClassVar[TaskType] = TaskType.REFINE

    task_id: str
    quality: str | None = None
    provider_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class PreRigCheckParams:
    kind: ClassVar[TaskType] = TaskType.PRE_RIG_CHECK

    task_id: str
    provider_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class RigParams:
    kind: ClassVar[TaskType] = TaskType.RIG

    task_id: str
    skeleton: str | None = None
    out_format: str | None = None
    provider_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class AnimateParams:
    kind: ClassVar[TaskType] = TaskType.ANIMATE

    task_id: str
    animation: str
    out_format: str | None = None
    animate_in_place: bool | None = None
    provider_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class SegmentParams:
    kind: ClassVar[TaskType] = TaskType.SEGMENT

    task_id: str
    part_names: Sequence[str] | None = None
    provider_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class MeshCompletionParams:
    kind: ClassVar[TaskType] = TaskType.MESH_COMPLETION

    task_id: str
    part_names: Sequence[str] | None = None
    provider_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class DecimateParams:
    kind: ClassVar[TaskType] = TaskType.DECIMATE

    task_id: str
    target_face_count: int | None = None
    quad: bool | None = None
    bake: bool | None = None
    provider_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class UVUnwrapParams:
    kind: ClassVar[TaskType] = TaskType.UV_UNWRAP

    task_id: str | None = None
    model_url: str | None = None
    provider_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class ProfileTo3DParams:
    kind: ClassVar[TaskType] = TaskType.PROFILE_TO_3D

    input: str
    template: str | None = None
    provider_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class ConvertParams:
    kind: ClassVar[TaskType] = TaskType.CONVERT

    task_id: str
    format: str
    quad: bool | None = None
    face_limit: int | None = None
    texture_size: int | None = None
    scale_factor: float | None = None
    provider_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportParams:
    kind: ClassVar[TaskType] = TaskType.IMPORT

    input: str
    provider_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class StylizeParams:
    kind: ClassVar[TaskType] = TaskType.STYLIZE

    task_id: str
    style: str
    provider_options: Mapping[str, Any] = field(default_factory=dict)


TaskParams = Union[
    TextTo3DParams,
    ImageTo3DParams,
    MultiviewTo3DParams,
    TextToImageParams,
    GenerateImageParams,
    TextureParams,
    RefineParams,
    PreRigCheckParams,
    RigParams,
    AnimateParams,
    SegmentParams,
    MeshCompletionParams,
    DecimateParams,
    UVUnwrapParams,
    ProfileTo3DParams,
    ConvertParams,
    ImportParams,
    StylizeParams,
]

PARAMS_BY_KIND: dict[TaskType, type] = {
    cls.kind: cls
    for cls in (
        TextTo3DParams,
        ImageTo3DParams,
        MultiviewTo3DParams,
        TextToImageParams,
        GenerateImageParams,
        TextureParams,
        RefineParams,
        PreRigCheckParams,
        RigParams,
        AnimateParams,
        SegmentParams,
        MeshCompletionParams,
        DecimateParams,
        UVUnwrapParams,
        ProfileTo3DParams,
        ConvertParams,
        ImportParams,
        StylizeParams,
    )
}

PRIMARY_GENERATION_KINDS = frozenset(
    {TaskType.TEXT_TO_3D, TaskType.IMAGE_TO_3D, TaskType.MULTIVIEW_TO_3D}
)


def is_primary_generation(params: TaskParams) -> bool:
    """Return ``True`` for operations that create a new model from scratch."""

    return params.kind in PRIMARY_GENERATION_KINDS


__all__ = [
    "TaskParams",
    "TextTo3DParams",
    "ImageTo3DParams",
    "MultiviewTo3DParams",
    "TextToImageParams",
    "GenerateImageParams",
    "TextureParams",
    "RefineParams",
    "PreRigCheckParams",
    "RigParams",
    "AnimateParams",
    "SegmentParams",
    "MeshCompletionParams",
    "DecimateParams",
    "UVUnwrapParams",
    "ProfileTo3DParams",
    "ConvertParams",
    "ImportParams",
    "StylizeParams",
    "PARAMS_BY_KIND",
    "PRIMARY_GENERATION_KINDS",
    "is_primary_generation",
]
