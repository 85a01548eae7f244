"""Task model and parameter types shared across providers."""

from .models import (
    TERMINAL_STATUSES,
    ProviderId,
    Task,
    TaskArtifacts,
    TaskErrorInfo,
    TaskStatus,
    TaskType,
)
from .params import (
    AnimateParams,
    ConvertParams,
    DecimateParams,
    GenerateImageParams,
    ImageTo3DParams,
    ImportParams,
    MeshCompletionParams,
    MultiviewTo3DParams,
    PreRigCheckParams,
    ProfileTo3DParams,
    RefineParams,
    RigParams,
    SegmentParams,
    StylizeParams,
    TaskParams,
    TextTo3DParams,
    TextToImageParams,
    TextureParams,
    UVUnwrapParams,
    is_primary_generation,
)

__all__ = [
    "TERMINAL_STATUSES",
    "ProviderId",
    "Task",
    "TaskArtifacts",
    "TaskErrorInfo",
    "TaskStatus",
    "TaskType",
    "AnimateParams",
    "ConvertParams",
    "DecimateParams",
    "GenerateImageParams",
    "ImageTo3DParams",
    "ImportParams",
    "MeshCompletionParams",
    "MultiviewTo3DParams",
    "PreRigCheckParams",
    "ProfileTo3DParams",
    "RefineParams",
    "RigParams",
    "SegmentParams",
    "StylizeParams",
    "TaskParams",
    "TextTo3DParams",
    "TextToImageParams",
    "TextureParams",
    "UVUnwrapParams",
    "is_primary_generation",
]
