"""Tencent Cloud Hunyuan 3D provider adapter implementation."""

from __future__ import annotations

import json
import os
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Mapping

import httpx
import structlog

from ..domain.models import (
    ProviderId,
    Task,
    TaskArtifacts,
    TaskErrorInfo,
    TaskStatus,
    TaskType,
    utcnow,
)
from ..domain.params import (
    ConvertParams,
    DecimateParams,
    ImageTo3DParams,
    SegmentParams,
    TaskParams,
    TextTo3DParams,
    TextureParams,
    UVUnwrapParams,
)
from ..exceptions import ApiError, UnsupportedOperationError
from ..utils import input_utils
from ..utils.tc3_signer import sign
from .error_codes import HUNYUAN_FAIL_FALLBACK, normalize_hunyuan_code
from .providers_base import ProviderAdapter
from .task_cache import TaskMetadataCache

logger = structlog.get_logger(__name__)

API_VERSION = "2025-05-13"
SERVICE = "ai3d"
DEFAULT_REGION = "ap-guangzhou"
CONVERT_ID_PREFIX = "convert_"


@dataclass(frozen=True, slots=True)
class HunyuanAction:
    submit: str
    query: str | None


ACTION_MAP: dict[TaskType, HunyuanAction] = {
    TaskType.TEXT_TO_3D: HunyuanAction("SubmitHunyuanTo3DProJob", "QueryHunyuanTo3DProJob"),
    TaskType.IMAGE_TO_3D: HunyuanAction("SubmitHunyuanTo3DProJob", "QueryHunyuanTo3DProJob"),
    TaskType.TEXTURE: HunyuanAction("SubmitTextureTo3DJob", "DescribeTextureTo3DJob"),
    TaskType.DECIMATE: HunyuanAction("SubmitReduceFaceJob", "DescribeReduceFaceJob"),
    TaskType.UV_UNWRAP: HunyuanAction("SubmitHunyuanTo3DUVJob", "DescribeHunyuanTo3DUVJob"),
    TaskType.SEGMENT: HunyuanAction("SubmitHunyuan3DPartJob", "QueryHunyuan3DPartJob"),
    # Convert3DFormat answers synchronously.
    TaskType.CONVERT: HunyuanAction("Convert3DFormat", None),
}

HUNYUAN_SUPPORTED_KINDS = frozenset(ACTION_MAP)

# Keys forwarded from provider_options on primary generation requests.
GENERATION_OPTION_KEYS = (
    "EnablePBR",
    "FaceCount",
    "GenerateType",
    "PolygonType",
    "ResultFormat",
    "EnableGeometry",
    "FaceLevel",
)

_STATUS_MAP: dict[str, TaskStatus] = {
    "WAIT": TaskStatus.PENDING,
    "RUN": TaskStatus.PROCESSING,
    "DONE": TaskStatus.SUCCEEDED,
    "FAIL": TaskStatus.FAILED,
}

_PROGRESS_ESTIMATE: dict[TaskStatus, int] = {
    TaskStatus.PENDING: 0,
    TaskStatus.PROCESSING: 50,
    TaskStatus.SUCCEEDED: 100,
}

# ResultFile3Ds "Type" -> TaskArtifacts field
_ARTIFACT_FIELDS: dict[str, str] = {
    "GLB": "model_glb",
    "OBJ": "model_obj",
    "FBX": "model_fbx",
    "USDZ": "model_usdz",
    "MP4": "video",
    "IMAGE": "thumbnail",
    "PREVIEW_IMAGE": "thumbnail",
}


@dataclass(frozen=True, slots=True)
class _JobMetadata:
    kind: TaskType
    query_action: str | None
    result_url: str | None = None
    result_format: str | None = None


def _generation_options(options: Mapping[str, Any]) -> dict[str, Any]:
    return {key: options[key] for key in GENERATION_OPTION_KEYS if key in options}


class HunyuanProvider(ProviderAdapter):
    """Adapter for the Hunyuan 3D API (``ai3d``) signed with TC3-HMAC-SHA256.

    Job ids are only queryable through the adapter instance that created them:
    the query action depends on the submitted kind and is remembered locally.
    """

    name = "Hunyuan"
    provider_id = ProviderId.HUNYUAN

    def __init__(
        self,
        secret_id: str | None = None,
        secret_key: str | None = None,
        *,
        region: str = DEFAULT_REGION,
        endpoint: str | None = None,
        timeout_seconds: float = 120.0,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        secret_id = secret_id or os.getenv("TENCENT_SECRET_ID")
        secret_key = secret_key or os.getenv("TENCENT_SECRET_KEY")
        if not secret_id or not secret_key:
            raise ValueError("TENCENT_SECRET_ID and TENCENT_SECRET_KEY must be set")
        super().__init__(
            supported_kinds=HUNYUAN_SUPPORTED_KINDS,
            http_client=http_client or httpx.AsyncClient(timeout=timeout_seconds),
        )
        self._secret_id = secret_id
        self._secret_key = secret_key
        self.region = region
        self.host = endpoint or f"ai3d.{region}.tencentcloudapi.com"
        self._clock = clock
        self._jobs: TaskMetadataCache[_JobMetadata] = TaskMetadataCache()

    async def prepare_input(self, raw: str) -> str:
        input_utils.validate(raw)
        return raw

    async def _create_task(self, params: TaskParams) -> str:
        action = ACTION_MAP.get(params.kind)
        if action is None:
            raise UnsupportedOperationError(
                f"Provider {self.name} does not support task type: {params.kind.value}"
            )

        response = await self._call(action.submit, self._build_payload(params))

        if action.query is None:
            result_url = response.get("ResultFile3D")
            if not result_url:
                raise ApiError("Hunyuan convert returned no ResultFile3D", code="INVALID_RESPONSE", raw=response)
            task_id = f"{CONVERT_ID_PREFIX}{uuid.uuid4().hex}"
            fmt = params.format.upper() if isinstance(params, ConvertParams) else None
            self._jobs.set(task_id, _JobMetadata(params.kind, None, result_url, fmt))
            return task_id

        job_id = response.get("JobId")
        if not job_id:
            raise ApiError("Hunyuan did not return JobId", code="INVALID_RESPONSE", raw=response)
        self._jobs.set(str(job_id), _JobMetadata(params.kind, action.query))
        return str(job_id)

    async def _fetch_task_status(self, task_id: str) -> Task:
        metadata = self._jobs.get(task_id)
        if metadata is None:
            raise ApiError(
                f"Unknown task ID: {task_id}. Task metadata not found.",
                code="TASK_NOT_FOUND",
            )
        if metadata.query_action is None:
            return self._completed_convert(task_id, metadata)

        response = await self._call(metadata.query_action, {"JobId": task_id})
        return self._normalize(task_id, metadata.kind, response)

    def _build_payload(self, params: TaskParams) -> dict[str, Any]:
        # Only generation and face reduction accept vendor options.
        options: dict[str, Any] = {}
        payload: dict[str, Any]

        match params:
            case TextTo3DParams():
                payload = {"Prompt": params.prompt}
                options = _generation_options(params.provider_options)
            case ImageTo3DParams():
                if input_utils.is_url(params.input):
                    payload = {"ImageUrl": params.input}
                else:
                    payload = {"ImageBase64": input_utils.extract_payload(params.input)}
                options = _generation_options(params.provider_options)
            case TextureParams():
                # Hunyuan post-processing takes a model URL in place of a task id.
                payload = {"File3D": {"Type": "GLB", "Url": params.task_id}}
                if params.prompt:
                    payload["Prompt"] = params.prompt
                if params.style_image:
                    payload["Image"] = {"Url": params.style_image}
                if params.enable_pbr is not None:
                    payload["EnablePBR"] = params.enable_pbr
            case DecimateParams():
                payload = {"File3D": {"Type": "GLB", "Url": params.task_id}}
                if params.quad:
                    payload["PolygonType"] = "quadrilateral"
                options = dict(params.provider_options)
            case UVUnwrapParams():
                payload = {"File": {"Type": "GLB", "Url": params.model_url or params.task_id}}
            case SegmentParams():
                payload = {"File": {"Type": "FBX", "Url": params.task_id}}
            case ConvertParams():
                payload = {"File3D": params.task_id, "Format": params.format.upper()}
            case _:
                raise UnsupportedOperationError(
                    f"Provider {self.name} does not support task type: {params.kind.value}"
                )

        payload.update(options)
        return payload

    async def _call(self, action: str, body: dict[str, Any]) -> dict[str, Any]:
        payload = json.dumps(body, separators=(",", ":"))
        headers = sign(
            secret_id=self._secret_id,
            secret_key=self._secret_key,
            service=SERVICE,
            host=self.host,
            region=self.region,
            action=action,
            version=API_VERSION,
            payload=payload,
            timestamp=int(self._clock()),
        )
        response = await self._http.post(f"https://{self.host}/", content=payload.encode("utf-8"), headers=headers)
        try:
            data = response.json()
        except ValueError:
            data = None
        if not isinstance(data, dict) or not isinstance(data.get("Response"), dict):
            raise ApiError(
                f"Hunyuan returned an unexpected response for {action}",
                code="INVALID_RESPONSE",
                raw=data if data is not None else response.text,
                http_status=response.status_code if response.is_error else None,
            )

        result = data["Response"]
        error = result.get("Error")
        if error:
            raise ApiError(
                f"Hunyuan API error: {error.get('Message')}",
                code=normalize_hunyuan_code(error.get("Code")),
                raw=data,
                http_status=response.status_code if response.is_error else None,
            )
        logger.debug("hunyuan.request.ok", action=action, request_id=result.get("RequestId"))
        return result

    def _completed_convert(self, task_id: str, metadata: _JobMetadata) -> Task:
        artifacts = TaskArtifacts(model=metadata.result_url)
        field_name = _ARTIFACT_FIELDS.get(metadata.result_format or "")
        if field_name and field_name.startswith("model_"):
            setattr(artifacts, field_name, metadata.result_url)
        now = utcnow()
        return Task(
            id=task_id,
            provider=self.provider_id,
            kind=metadata.kind,
            status=TaskStatus.SUCCEEDED,
            progress=100,
            artifacts=artifacts,
            created_at=now,
            finished_at=now,
            raw_response={"ResultFile3D": metadata.result_url},
        )

    def _normalize(self, task_id: str, kind: TaskType, data: dict[str, Any]) -> Task:
        raw_status = data.get("Status")
        status = _STATUS_MAP.get(raw_status or "")
        if status is None:
            logger.warning("hunyuan.status.unknown", task_id=task_id, status=raw_status)
            status = TaskStatus.PROCESSING

        artifacts = None
        files = data.get("ResultFile3Ds") or []
        if status is TaskStatus.SUCCEEDED and files:
            artifacts = TaskArtifacts()
            for item in files:
                field_name = _ARTIFACT_FIELDS.get(str(item.get("Type", "")).upper())
                if field_name:
                    setattr(artifacts, field_name, item.get("Url"))
                if item.get("PreviewImageUrl"):
                    artifacts.thumbnail = item["PreviewImageUrl"]
            artifacts.model = artifacts.model_glb or artifacts.model_obj or artifacts.model_fbx

        error = None
        if status is TaskStatus.FAILED:
            code, message = HUNYUAN_FAIL_FALLBACK
            if data.get("ErrorCode"):
                code = normalize_hunyuan_code(data["ErrorCode"])
            error = TaskErrorInfo(code=code, message=data.get("ErrorMessage") or message, raw=data)

        return Task(
            id=task_id,
            provider=self.provider_id,
            kind=kind,
            status=status,
            progress=_PROGRESS_ESTIMATE.get(status, 0),
            progress_detail=raw_status,
            artifacts=artifacts,
            error=error,
            finished_at=utcnow() if status.is_terminal else None,
            raw_response=data,
        )


__all__ = ["HunyuanProvider", "ACTION_MAP", "HUNYUAN_SUPPORTED_KINDS", "API_VERSION"]
