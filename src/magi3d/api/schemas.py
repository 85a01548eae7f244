"""Pydantic request schemas for the task endpoints.

Each schema mirrors one parameter dataclass and accepts camelCase keys from
browser clients. The ``type`` field selects the schema.
"""

from __future__ import annotations

from typing import Annotated, Any, ClassVar, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from ..domain import params as p
from ..domain.params import TaskParams
from ..exceptions import InvalidInputError


class TaskRequestBase(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        protected_namespaces=(),
    )

    params_cls: ClassVar[type]

    provider_options: dict[str, Any] | None = None

    def to_params(self) -> TaskParams:
        """Build the frozen parameter dataclass for this request."""

        data = self.model_dump(exclude={"type"})
        data["provider_options"] = data["provider_options"] or {}
        return self.params_cls(**data)


class TextTo3DRequest(TaskRequestBase):
    params_cls: ClassVar[type] = p.TextTo3DParams

    type: Literal["text_to_model"]
    prompt: str
    negative_prompt: str | None = None


class ImageTo3DRequest(TaskRequestBase):
    params_cls: ClassVar[type] = p.ImageTo3DParams

    type: Literal["image_to_model"]
    input: str
    prompt: str | None = None


class MultiviewTo3DRequest(TaskRequestBase):
    params_cls: ClassVar[type] = p.MultiviewTo3DParams

    type: Literal["multiview_to_model"]
    inputs: list[str]
    prompt: str | None = None


class TextToImageRequest(TaskRequestBase):
    params_cls: ClassVar[type] = p.TextToImageParams

    type: Literal["text_to_image"]
    prompt: str
    negative_prompt: str | None = None


class GenerateImageRequest(TaskRequestBase):
    params_cls: ClassVar[type] = p.GenerateImageParams

    type: Literal["generate_image"]
    prompt: str
    input: str | None = None
    inputs: list[str] = Field(default_factory=list)


class TextureRequest(TaskRequestBase):
    params_cls: ClassVar[type] = p.TextureParams

    type: Literal["texture_model"]
    task_id: str
    prompt: str | None = None
    style_image: str | None = None
    enable_pbr: bool | None = Field(default=None, alias="enablePBR")


class RefineRequest(TaskRequestBase):
    params_cls: ClassVar[type] = p.RefineParams

    type: Literal["refine_model"]
    task_id: str
    quality: str | None = None


class PreRigCheckRequest(TaskRequestBase):
    params_cls: ClassVar[type] = p.PreRigCheckParams

    type: Literal["animate_prerigcheck"]
    task_id: str


class RigRequest(TaskRequestBase):
    params_cls: ClassVar[type] = p.RigParams

    type: Literal["animate_rig"]
    task_id: str
    skeleton: str | None = None
    out_format: str | None = None


class AnimateRequest(TaskRequestBase):
    params_cls: ClassVar[type] = p.AnimateParams

    type: Literal["animate_retarget"]
    task_id: str
    animation: str
    out_format: str | None = None
    animate_in_place: bool | None = None


class SegmentRequest(TaskRequestBase):
    params_cls: ClassVar[type] = p.SegmentParams

    type: Literal["mesh_segmentation"]
    task_id: str
    part_names: list[str] | None = None


class MeshCompletionRequest(TaskRequestBase):
    params_cls: ClassVar[type] = p.MeshCompletionParams

    type: Literal["mesh_completion"]
    task_id: str
    part_names: list[str] | None = None


class DecimateRequest(TaskRequestBase):
    params_cls: ClassVar[type] = p.DecimateParams

    type: Literal["highpoly_to_lowpoly"]
    task_id: str
    target_face_count: int | None = Field(default=None, ge=1)
    quad: bool | None = None
    bake: bool | None = None


class UVUnwrapRequest(TaskRequestBase):
    params_cls: ClassVar[type] = p.UVUnwrapParams

    type: Literal["uv_unwrap"]
    task_id: str | None = None
    model_url: str | None = None


class ProfileTo3DRequest(TaskRequestBase):
    params_cls: ClassVar[type] = p.ProfileTo3DParams

    type: Literal["profile_to_3d"]
    input: str
    template: str | None = None


class ConvertRequest(TaskRequestBase):
    params_cls: ClassVar[type] = p.ConvertParams

    type: Literal["convert_model"]
    task_id: str
    format: str = Field(..., min_length=1)
    quad: bool | None = None
    face_limit: int | None = None
    texture_size: int | None = None
    scale_factor: float | None = None


class ImportRequest(TaskRequestBase):
    params_cls: ClassVar[type] = p.ImportParams

    type: Literal["import_model"]
    input: str


class StylizeRequest(TaskRequestBase):
    params_cls: ClassVar[type] = p.StylizeParams

    type: Literal["stylize_model"]
    task_id: str
    style: str


AnyTaskRequest = Union[
    TextTo3DRequest,
    ImageTo3DRequest,
    MultiviewTo3DRequest,
    TextToImageRequest,
    GenerateImageRequest,
    TextureRequest,
    RefineRequest,
    PreRigCheckRequest,
    RigRequest,
    AnimateRequest,
    SegmentRequest,
    MeshCompletionRequest,
    DecimateRequest,
    UVUnwrapRequest,
    ProfileTo3DRequest,
    ConvertRequest,
    ImportRequest,
    StylizeRequest,
]

TaskCreateRequest = Annotated[AnyTaskRequest, Field(discriminator="type")]

_REQUEST_ADAPTER: TypeAdapter[Any] = TypeAdapter(TaskCreateRequest)


def describe_validation_errors(errors: list[Any]) -> str:
    """Flatten pydantic error entries into one ``loc: msg`` line per error."""

    parts = []
    for error in errors:
        loc = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{loc}: {error.get('msg')}" if loc else str(error.get("msg")))
    return "; ".join(parts)


def parse_task_request(data: Mapping[str, Any]) -> TaskParams:
    """Validate a JSON-style mapping and return the matching parameter dataclass."""

    try:
        request = _REQUEST_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise InvalidInputError(f"Invalid task request: {describe_validation_errors(exc.errors())}") from exc
    return request.to_params()


__all__ = [
    "TaskRequestBase",
    "AnyTaskRequest",
    "TaskCreateRequest",
    "TextTo3DRequest",
    "ImageTo3DRequest",
    "MultiviewTo3DRequest",
    "TextToImageRequest",
    "GenerateImageRequest",
    "TextureRequest",
    "RefineRequest",
    "PreRigCheckRequest",
    "RigRequest",
    "AnimateRequest",
    "SegmentRequest",
    "MeshCompletionRequest",
    "DecimateRequest",
    "UVUnwrapRequest",
    "ProfileTo3DRequest",
    "ConvertRequest",
    "ImportRequest",
    "StylizeRequest",
    "describe_validation_errors",
    "parse_task_request",
]
