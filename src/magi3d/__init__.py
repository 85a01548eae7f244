"""magi3d: one task protocol over multiple 3D generation services."""

from .client import PollSession, TaskClient
from .domain import (
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
    ProviderId,
    RefineParams,
    RigParams,
    SegmentParams,
    StylizeParams,
    Task,
    TaskArtifacts,
    TaskErrorInfo,
    TaskParams,
    TaskStatus,
    TaskType,
    TextTo3DParams,
    TextToImageParams,
    TextureParams,
    UVUnwrapParams,
    is_primary_generation,
)
from .exceptions import (
    ApiError,
    InvalidInputError,
    Magi3DError,
    MaxRetriesExceededError,
    PollStoppedError,
    PollTimeoutError,
    TaskCanceledError,
    TaskError,
    TaskFailedError,
    UnsupportedOperationError,
)
from .providers import (
    HunyuanProvider,
    ObjectUploader,
    ProviderAdapter,
    StsDestination,
    TripoProvider,
    create_provider,
)

__version__ = "0.1.0"

__all__ = [
    "TaskClient",
    "PollSession",
    "ProviderAdapter",
    "TripoProvider",
    "HunyuanProvider",
    "ObjectUploader",
    "StsDestination",
    "create_provider",
    "ProviderId",
    "Task",
    "TaskArtifacts",
    "TaskErrorInfo",
    "TaskStatus",
    "TaskType",
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
    "is_primary_generation",
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
