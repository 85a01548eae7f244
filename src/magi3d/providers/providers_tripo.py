"""Tripo AI provider adapter implementation."""

from __future__ import annotations

import asyncio
import base64
import binascii
import os
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

import httpx
import structlog

from ..domain.models import (
    ProviderId,
    Task,
    TaskArtifacts,
    TaskErrorInfo,
    TaskStatus,
    TaskType,
    clamp_progress,
    utcnow,
)
from ..domain.params import (
    AnimateParams,
    ConvertParams,
    DecimateParams,
    GenerateImageParams,
    ImageTo3DParams,
    ImportParams,
    MeshCompletionParams,
    MultiviewTo3DParams,
    PreRigCheckParams,
    RefineParams,
    RigParams,
    SegmentParams,
    StylizeParams,
    TaskParams,
    TextTo3DParams,
    TextToImageParams,
    TextureParams,
)
from ..exceptions import ApiError, InvalidInputError, UnsupportedOperationError
from ..utils import input_utils
from .error_codes import normalize_tripo_code, tripo_status_fallback
from .providers_base import ProviderAdapter
from .task_cache import TaskMetadataCache

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://api.tripo3d.ai"
TASK_PATH = "/v2/openapi/task"
DIRECT_UPLOAD_PATH = "/v2/openapi/upload/sts"
STS_TOKEN_PATH = "/v2/openapi/upload/sts/token"
IMPORT_BUCKET = "tripo-data"

IMAGE_EXTS = frozenset({"jpg", "jpeg", "png", "webp"})
_S3_REGION_RE = re.compile(r"s3\.([^.]+)\.amazonaws\.com")

TRIPO_SUPPORTED_KINDS = frozenset(TaskType) - {TaskType.UV_UNWRAP, TaskType.PROFILE_TO_3D}

_STATUS_MAP: dict[str, TaskStatus] = {
    "queued": TaskStatus.PENDING,
    "running": TaskStatus.PROCESSING,
    "success": TaskStatus.SUCCEEDED,
    "failed": TaskStatus.FAILED,
    "banned": TaskStatus.FAILED,
    "expired": TaskStatus.FAILED,
    "cancelled": TaskStatus.CANCELED,
    "unknown": TaskStatus.PROCESSING,
}


@dataclass(frozen=True, slots=True)
class StsDestination:
    """Temporary S3 credentials and target returned by Tripo's STS token endpoint."""

    host: str
    bucket: str
    key: str
    access_key_id: str
    secret_access_key: str
    session_token: str
    region: str = "us-west-2"


class ObjectUploader(Protocol):
    """Uploads raw bytes to the object store described by ``destination``."""

    async def __call__(self, data: bytes, destination: StsDestination) -> None: ...


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


class TripoProvider(ProviderAdapter):
    """Tripo REST API adapter.

    With ``sts_upload`` enabled, local inputs (paths, ``file://`` references,
    localhost URLs and base64 data) are uploaded before submission: images via
    Direct Upload, other files via an STS token and the injected ``uploader``.
    Without it only public URLs are accepted.
    """

    name = "Tripo"
    provider_id = ProviderId.TRIPO

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 120.0,
        sts_upload: bool = False,
        uploader: ObjectUploader | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        api_key = api_key or os.getenv("TRIPO_API_KEY")
        if not api_key:
            raise ValueError("TRIPO_API_KEY is not set")
        super().__init__(
            supported_kinds=TRIPO_SUPPORTED_KINDS,
            http_client=http_client or httpx.AsyncClient(timeout=timeout_seconds),
        )
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._sts_upload = sts_upload
        self._uploader = uploader
        self._kinds: TaskMetadataCache[TaskType] = TaskMetadataCache()

    @property
    def sts_upload(self) -> bool:
        return self._sts_upload

    # -- ProviderAdapter hooks -------------------------------------------------

    async def prepare_input(self, raw: str) -> str:
        if self._sts_upload and (input_utils.is_url(raw) or input_utils.is_local_input(raw)):
            return raw
        self._reject_local(raw)
        input_utils.validate(raw)
        return raw

    async def _create_task(self, params: TaskParams) -> str:
        payload = await self._build_payload(params)
        body = await self._request("POST", TASK_PATH, json=payload)
        task_id = (body.get("data") or {}).get("task_id")
        if not task_id:
            raise ApiError("Tripo did not return task_id", code="INVALID_RESPONSE", raw=body)
        self._kinds.set(str(task_id), params.kind)
        return str(task_id)

    async def _fetch_task_status(self, task_id: str) -> Task:
        response = await self._http.get(self._url(f"{TASK_PATH}/{task_id}"), headers=self._auth_headers())
        body = _json_body(response)
        if response.is_error:
            raise self._api_error(body, http_status=response.status_code, text=response.text)
        if not isinstance(body, dict):
            raise ApiError("Tripo returned a malformed status response", code="INVALID_RESPONSE", raw=response.text)
        if body.get("code", 0) != 0:
            return self._error_snapshot(task_id, body)
        return self._normalize(task_id, body.get("data") or {})

    # -- payloads ----------------------------------------------------------

    async def _build_payload(self, params: TaskParams) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": params.kind.value}

        match params:
            case TextTo3DParams() | TextToImageParams():
                payload["prompt"] = params.prompt
                if params.negative_prompt:
                    payload["negative_prompt"] = params.negative_prompt
            case ImageTo3DParams():
                payload["file"] = await self._resolve_file_ref(params.input)
            case MultiviewTo3DParams():
                # Tripo expects exactly [front, left, back, right]; missing views stay as {}.
                payload["files"] = [
                    await self._resolve_file_ref(view) if view else {} for view in params.inputs
                ]
            case GenerateImageParams():
                payload["prompt"] = params.prompt
                if params.input:
                    payload["file"] = await self._resolve_file_ref(params.input)
                if params.inputs:
                    payload["files"] = [await self._resolve_file_ref(item) for item in params.inputs]
            case TextureParams():
                payload["original_model_task_id"] = params.task_id
                texture_prompt: dict[str, Any] = {}
                if params.prompt:
                    texture_prompt["text"] = params.prompt
                if params.style_image:
                    texture_prompt["style_image"] = await self._resolve_file_ref(params.style_image)
                if texture_prompt:
                    payload["texture_prompt"] = texture_prompt
                if params.enable_pbr is not None:
                    payload["pbr"] = params.enable_pbr
            case RefineParams():
                payload["draft_model_task_id"] = params.task_id
            case PreRigCheckParams() | SegmentParams():
                payload["original_model_task_id"] = params.task_id
            case RigParams():
                payload["original_model_task_id"] = params.task_id
                if params.skeleton:
                    payload["rig_type"] = "biped" if params.skeleton == "humanoid" else params.skeleton
                if params.out_format:
                    payload["out_format"] = params.out_format
            case AnimateParams():
                payload["original_model_task_id"] = params.task_id
                payload["animation"] = params.animation
                if params.out_format:
                    payload["out_format"] = params.out_format
                if params.animate_in_place is not None:
                    payload["animate_in_place"] = params.animate_in_place
            case MeshCompletionParams():
                payload["original_model_task_id"] = params.task_id
                if params.part_names:
                    payload["part_names"] = list(params.part_names)
            case DecimateParams():
                payload["original_model_task_id"] = params.task_id
                if params.target_face_count:
                    payload["face_limit"] = params.target_face_count
                if params.quad is not None:
                    payload["quad"] = params.quad
                if params.bake is not None:
                    payload["bake"] = params.bake
            case ConvertParams():
                payload["original_model_task_id"] = params.task_id
                payload["format"] = params.format.upper()
                if params.quad is not None:
                    payload["quad"] = params.quad
                if params.face_limit:
                    payload["face_limit"] = params.face_limit
                if params.texture_size:
                    payload["texture_size"] = params.texture_size
                if params.scale_factor:
                    payload["scale_factor"] = params.scale_factor
            case ImportParams():
                if self._sts_upload:
                    ext = input_utils.detect_file_ext(params.input, default="glb")
                    payload["file"] = await self._resolve_file_ref(params.input, default_ext=ext)
                else:
                    # Without uploads the input is an existing object key.
                    payload["file"] = {"object": {"bucket": IMPORT_BUCKET, "key": params.input}}
            case StylizeParams():
                payload["original_model_task_id"] = params.task_id
                payload["style"] = params.style
            case _:
                raise UnsupportedOperationError(
                    f"Provider {self.name} does not support task type: {params.kind.value}"
                )

        payload.update(params.provider_options)
        return payload

    # -- file references ----------------------------------------------------

    def _reject_local(self, raw: str) -> None:
        if input_utils.is_local_input(raw):
            raise InvalidInputError(
                "Local file inputs (localhost URLs, file paths, base64) require sts_upload "
                "to be enabled on TripoProvider."
            )

    async def _resolve_file_ref(self, raw: str, *, default_ext: str = "jpg") -> dict[str, Any]:
        ext = input_utils.detect_file_ext(raw, default=default_ext)
        if not self._sts_upload:
            self._reject_local(raw)
            input_utils.validate(raw)
            return {"type": ext, "url": raw}

        content = await self._fetch_content(raw)
        if ext in IMAGE_EXTS:
            token = await self._direct_upload_image(content, f"upload.{ext}")
            return {"type": ext, "file_token": token}
        return {"type": ext, "object": await self._sts_upload_file(content, ext)}

    async def _fetch_content(self, raw: str) -> bytes:
        if input_utils.is_url(raw):
            response = await self._http.get(raw)
            response.raise_for_status()
            return response.content
        if raw.startswith("file://"):
            return await asyncio.to_thread(Path(raw[len("file://"):]).read_bytes)
        if raw.startswith(("/", "./", "../")):
            return await asyncio.to_thread(Path(raw).read_bytes)
        encoded = raw.partition(",")[2] if raw.startswith("data:") else raw
        try:
            return base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidInputError("Input is neither a URL, a file path nor base64 data") from exc

    async def _direct_upload_image(self, data: bytes, filename: str) -> str:
        body = await self._request("POST", DIRECT_UPLOAD_PATH, files={"file": (filename, data)})
        token = (body.get("data") or {}).get("image_token")
        if not token:
            raise ApiError("Tripo upload did not return image_token", code="INVALID_RESPONSE", raw=body)
        logger.info("tripo.upload.direct", filename=filename, size=len(data))
        return str(token)

    async def _sts_upload_file(self, data: bytes, fmt: str) -> dict[str, str]:
        if self._uploader is None:
            raise InvalidInputError(f"Uploading .{fmt} files requires an object uploader")
        body = await self._request("POST", STS_TOKEN_PATH, json={"format": fmt})
        token = body.get("data") or {}
        try:
            host = token["s3_host"]
            match = _S3_REGION_RE.search(host)
            destination = StsDestination(
                host=host,
                bucket=token["resource_bucket"],
                key=token["resource_uri"],
                access_key_id=token["sts_ak"],
                secret_access_key=token["sts_sk"],
                session_token=token["session_token"],
                region=match.group(1) if match else "us-west-2",
            )
        except KeyError as exc:
            raise ApiError(f"Tripo STS token missing {exc.args[0]}", code="INVALID_RESPONSE", raw=body) from exc
        await self._uploader(data, destination)
        logger.info(
            "tripo.upload.sts",
            bucket=destination.bucket,
            key=destination.key,
            size=len(data),
        )
        return {"bucket": destination.bucket, "key": destination.key}

    # -- HTTP helpers -------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        response = await self._http.request(method, self._url(path), headers=self._auth_headers(), **kwargs)
        body = _json_body(response)
        if response.is_error:
            raise self._api_error(body, http_status=response.status_code, text=response.text)
        if not isinstance(body, dict):
            raise ApiError("Tripo returned a malformed response", code="INVALID_RESPONSE", raw=response.text)
        if body.get("code", 0) != 0:
            raise self._api_error(body)
        return body

    @staticmethod
    def _api_error(body: Any, *, http_status: int | None = None, text: str | None = None) -> ApiError:
        data = body if isinstance(body, dict) else {}
        tripo_code = data.get("code")
        message = data.get("message") or "Unknown error"
        error_type = "Task error" if isinstance(tripo_code, int) and tripo_code >= 2000 else "Request error"
        http_info = f" [HTTP {http_status}]" if http_status else ""
        return ApiError(
            f"{error_type}{http_info}: {message}",
            code=normalize_tripo_code(tripo_code),
            raw=body if body is not None else text,
            http_status=http_status,
        )

    # -- status normalization -------------------------------------------------

    def _kind_for(self, task_id: str, reported: Any = None) -> TaskType:
        if reported:
            try:
                return TaskType(reported)
            except ValueError:
                pass
        return self._kinds.get(task_id) or TaskType.IMAGE_TO_3D

    def _error_snapshot(self, task_id: str, body: dict[str, Any]) -> Task:
        tripo_code = body.get("code")
        message = body.get("message") or "Task failed"
        raw = {"code": tripo_code, "message": body.get("message")}
        return Task(
            id=task_id,
            provider=self.provider_id,
            kind=self._kind_for(task_id),
            status=TaskStatus.FAILED,
            error=TaskErrorInfo(code=normalize_tripo_code(tripo_code), message=message, raw=raw),
            finished_at=utcnow(),
            raw_response=body,
        )

    def _normalize(self, task_id: str, data: dict[str, Any]) -> Task:
        raw_status = data.get("status")
        status = _STATUS_MAP.get(raw_status or "")
        if status is None:
            logger.warning("tripo.status.unknown", task_id=task_id, status=raw_status)
            status = TaskStatus.PROCESSING

        artifacts = None
        output = data.get("output") or {}
        if status is TaskStatus.SUCCEEDED:
            primary = output.get("pbr_model") or output.get("model") or output.get("base_model")
            artifacts = TaskArtifacts(
                model=primary,
                model_glb=primary,
                model_pbr=output.get("pbr_model"),
                model_base=output.get("base_model"),
                thumbnail=output.get("rendered_image"),
                video=output.get("generated_video"),
                generated_image=output.get("generated_image"),
                riggable=output.get("riggable"),
                rig_type=output.get("rig_type"),
            )

        error = None
        if status in (TaskStatus.FAILED, TaskStatus.CANCELED):
            code, message = tripo_status_fallback(raw_status)
            if data.get("error_code") is not None:
                code = normalize_tripo_code(data["error_code"])
            error = TaskErrorInfo(code=code, message=message, raw=data)

        created_at = utcnow()
        if data.get("create_time"):
            created_at = datetime.fromtimestamp(data["create_time"], tz=timezone.utc)

        return Task(
            id=str(data.get("task_id") or task_id),
            provider=self.provider_id,
            kind=self._kind_for(task_id, data.get("type")),
            status=status,
            progress=100 if status is TaskStatus.SUCCEEDED else clamp_progress(data.get("progress")),
            progress_detail=raw_status,
            artifacts=artifacts,
            error=error,
            created_at=created_at,
            finished_at=utcnow() if status.is_terminal else None,
            raw_response=data,
        )


__all__ = ["TripoProvider", "ObjectUploader", "StsDestination", "TRIPO_SUPPORTED_KINDS"]
