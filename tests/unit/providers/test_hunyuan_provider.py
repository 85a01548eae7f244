from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from magi3d.domain.models import TaskStatus, TaskType
from magi3d.domain.params import (
    ConvertParams,
    DecimateParams,
    ImageTo3DParams,
    RigParams,
    SegmentParams,
    TextTo3DParams,
    TextureParams,
    UVUnwrapParams,
)
from magi3d.exceptions import ApiError, InvalidInputError, UnsupportedOperationError
from magi3d.providers.providers_hunyuan import HunyuanProvider
from magi3d.utils.tc3_signer import sign

HOST = "ai3d.ap-guangzhou.tencentcloudapi.com"
NOW = 1_700_000_000


def _respond(body: dict[str, Any]) -> httpx.Response:
    return httpx.Response(200, json={"Response": {"RequestId": "req-1", **body}})


def _provider(transport, **kwargs: Any) -> HunyuanProvider:
    return HunyuanProvider(
        "sid",
        "skey",
        http_client=transport.client(),
        clock=lambda: NOW,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_create_signs_request_with_tc3(recording_transport) -> None:
    transport = recording_transport(lambda request: _respond({"JobId": "job-1"}))
    provider = _provider(transport)

    job_id = await provider.create_task(
        ImageTo3DParams(
            input="https://example.com/cat.png",
            provider_options={"EnablePBR": True, "Unrelated": "dropped"},
        )
    )

    assert job_id == "job-1"
    request = transport.requests[0]
    assert str(request.url) == f"https://{HOST}/"
    payload = request.content.decode()
    assert json.loads(payload) == {"ImageUrl": "https://example.com/cat.png", "EnablePBR": True}
    expected = sign(
        secret_id="sid",
        secret_key="skey",
        service="ai3d",
        host=HOST,
        region="ap-guangzhou",
        action="SubmitHunyuanTo3DProJob",
        version="2025-05-13",
        payload=payload,
        timestamp=NOW,
    )
    for name in ("Authorization", "X-TC-Action", "X-TC-Version", "X-TC-Timestamp", "X-TC-Region"):
        assert request.headers[name] == expected[name]


@pytest.mark.asyncio
async def test_base64_image_uses_image_base64_field(recording_transport) -> None:
    transport = recording_transport(lambda request: _respond({"JobId": "job-1"}))

    await _provider(transport).create_task(ImageTo3DParams(input="data:image/png;base64,iVBORw0KGgo="))

    assert transport.json_bodies()[0] == {"ImageBase64": "iVBORw0KGgo="}


@pytest.mark.asyncio
async def test_invalid_image_input_is_rejected_before_request(recording_transport) -> None:
    transport = recording_transport(lambda request: _respond({"JobId": "job-1"}))

    with pytest.raises(InvalidInputError):
        await _provider(transport).create_task(ImageTo3DParams(input="./cat.png"))

    assert transport.requests == []


@pytest.mark.asyncio
async def test_unsupported_kind_is_rejected(recording_transport) -> None:
    transport = recording_transport(lambda request: _respond({"JobId": "job-1"}))

    with pytest.raises(UnsupportedOperationError):
        await _provider(transport).create_task(RigParams(task_id="model"))

    assert transport.requests == []


@pytest.mark.asyncio
async def test_post_processing_payloads(recording_transport) -> None:
    transport = recording_transport(lambda request: _respond({"JobId": "job-1"}))
    provider = _provider(transport)

    await provider.create_task(TextureParams(task_id="https://m/model.glb", prompt="rusty metal"))
    await provider.create_task(DecimateParams(task_id="https://m/model.glb", quad=True))

    texture, decimate = transport.json_bodies()
    assert texture == {"File3D": {"Type": "GLB", "Url": "https://m/model.glb"}, "Prompt": "rusty metal"}
    assert decimate == {"File3D": {"Type": "GLB", "Url": "https://m/model.glb"}, "PolygonType": "quadrilateral"}
    assert [r.headers["X-TC-Action"] for r in transport.requests] == [
        "SubmitTextureTo3DJob",
        "SubmitReduceFaceJob",
    ]


@pytest.mark.asyncio
async def test_provider_options_reach_only_generation_and_decimate(recording_transport) -> None:
    transport = recording_transport(
        lambda request: _respond({"JobId": "job-1", "ResultFile3D": "https://out/m.obj"})
    )
    provider = _provider(transport)
    options = {"FaceCount": 20000}

    await provider.create_task(DecimateParams(task_id="https://m/model.glb", provider_options=options))
    await provider.create_task(TextureParams(task_id="https://m/model.glb", provider_options=options))
    await provider.create_task(SegmentParams(task_id="https://m/model.fbx", provider_options=options))
    await provider.create_task(UVUnwrapParams(model_url="https://m/model.glb", provider_options=options))
    await provider.create_task(ConvertParams(task_id="https://m/model.glb", format="obj", provider_options=options))

    decimate, *others = transport.json_bodies()
    assert decimate["FaceCount"] == 20000
    assert all("FaceCount" not in body for body in others)


@pytest.mark.asyncio
async def test_vendor_error_is_normalized(recording_transport) -> None:
    transport = recording_transport(
        lambda request: _respond({"Error": {"Code": "AuthFailure.SignatureFailure", "Message": "bad sig"}})
    )

    with pytest.raises(ApiError) as exc_info:
        await _provider(transport).create_task(TextTo3DParams(prompt="a cat"))

    assert exc_info.value.code == "SIGNATURE_FAILURE"
    assert exc_info.value.message == "Hunyuan API error: bad sig"
    assert exc_info.value.raw["Response"]["Error"]["Code"] == "AuthFailure.SignatureFailure"


@pytest.mark.asyncio
async def test_status_query_uses_recorded_action_and_maps_artifacts(recording_transport) -> None:
    responses = iter(
        [
            _respond({"JobId": "job-7"}),
            _respond(
                {
                    "Status": "DONE",
                    "ResultFile3Ds": [
                        {"Type": "GLB", "Url": "https://out/m.glb", "PreviewImageUrl": "https://out/p.png"},
                        {"Type": "OBJ", "Url": "https://out/m.obj"},
                    ],
                }
            ),
        ]
    )
    transport = recording_transport(lambda request: next(responses))
    provider = _provider(transport)
    await provider.create_task(TextureParams(task_id="https://m/model.glb"))

    task = await provider.get_task_status("job-7")

    query = transport.requests[1]
    assert query.headers["X-TC-Action"] == "DescribeTextureTo3DJob"
    assert json.loads(query.content) == {"JobId": "job-7"}
    assert task.kind is TaskType.TEXTURE
    assert task.status is TaskStatus.SUCCEEDED
    assert task.progress == 100
    assert task.progress_detail == "DONE"
    assert task.artifacts is not None
    assert task.artifacts.model == "https://out/m.glb"
    assert task.artifacts.model_glb == "https://out/m.glb"
    assert task.artifacts.model_obj == "https://out/m.obj"
    assert task.artifacts.thumbnail == "https://out/p.png"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status,expected,progress",
    [
        ("WAIT", TaskStatus.PENDING, 0),
        ("RUN", TaskStatus.PROCESSING, 50),
        ("PAUSED", TaskStatus.PROCESSING, 50),
    ],
)
async def test_status_and_progress_estimation(recording_transport, status, expected, progress) -> None:
    responses = iter([_respond({"JobId": "job-1"}), _respond({"Status": status})])
    provider = _provider(recording_transport(lambda request: next(responses)))
    await provider.create_task(TextTo3DParams(prompt="a cat"))

    task = await provider.get_task_status("job-1")

    assert task.status is expected
    assert task.progress == progress
    assert task.progress_detail == status


@pytest.mark.asyncio
async def test_fail_status_error_codes(recording_transport) -> None:
    responses = iter(
        [
            _respond({"JobId": "job-1"}),
            _respond({"JobId": "job-2"}),
            _respond({"Status": "FAIL", "ErrorCode": "InvalidParameter.Prompt", "ErrorMessage": "prompt too long"}),
            _respond({"Status": "FAIL"}),
        ]
    )
    provider = _provider(recording_transport(lambda request: next(responses)))
    await provider.create_task(TextTo3DParams(prompt="a cat"))
    await provider.create_task(TextTo3DParams(prompt="a dog"))

    coded = await provider.get_task_status("job-1")
    bare = await provider.get_task_status("job-2")

    assert coded.status is TaskStatus.FAILED
    assert coded.error is not None
    assert (coded.error.code, coded.error.message) == ("INVALID_PARAMETER", "prompt too long")
    assert bare.error is not None
    assert (bare.error.code, bare.error.message) == ("GENERATION_FAILED", "Model generation failed")


@pytest.mark.asyncio
async def test_sync_convert_succeeds_without_query(recording_transport) -> None:
    transport = recording_transport(lambda request: _respond({"ResultFile3D": "https://out/model.fbx"}))
    provider = _provider(transport)

    task_id = await provider.create_task(ConvertParams(task_id="https://m/model.glb", format="fbx"))
    task = await provider.get_task_status(task_id)

    assert task_id.startswith("convert_")
    assert transport.json_bodies()[0] == {"File3D": "https://m/model.glb", "Format": "FBX"}
    assert transport.requests[0].headers["X-TC-Action"] == "Convert3DFormat"
    assert len(transport.requests) == 1
    assert task.status is TaskStatus.SUCCEEDED
    assert task.progress == 100
    assert task.artifacts is not None
    assert task.artifacts.model == "https://out/model.fbx"
    assert task.artifacts.model_fbx == "https://out/model.fbx"


@pytest.mark.asyncio
async def test_sync_convert_ids_are_unique(recording_transport) -> None:
    transport = recording_transport(lambda request: _respond({"ResultFile3D": "https://out/model.obj"}))
    provider = _provider(transport)

    first = await provider.create_task(ConvertParams(task_id="https://m/a.glb", format="obj"))
    second = await provider.create_task(ConvertParams(task_id="https://m/a.glb", format="obj"))

    assert first != second


@pytest.mark.asyncio
async def test_convert_without_result_is_an_error(recording_transport) -> None:
    transport = recording_transport(lambda request: _respond({}))

    with pytest.raises(ApiError) as exc_info:
        await _provider(transport).create_task(ConvertParams(task_id="https://m/a.glb", format="obj"))

    assert exc_info.value.code == "INVALID_RESPONSE"


@pytest.mark.asyncio
async def test_unknown_task_id_is_rejected_without_request(recording_transport) -> None:
    transport = recording_transport(lambda request: _respond({}))

    with pytest.raises(ApiError) as exc_info:
        await _provider(transport).get_task_status("never-created")

    assert exc_info.value.code == "TASK_NOT_FOUND"
    assert transport.requests == []


@pytest.mark.asyncio
async def test_custom_endpoint_and_region(recording_transport) -> None:
    transport = recording_transport(lambda request: _respond({"JobId": "job-1"}))
    provider = _provider(transport, region="ap-shanghai", endpoint="ai3d.internal.example.com")

    await provider.create_task(TextTo3DParams(prompt="a cat"))

    request = transport.requests[0]
    assert request.url.host == "ai3d.internal.example.com"
    assert request.headers["X-TC-Region"] == "ap-shanghai"


def test_missing_credentials_are_rejected() -> None:
    with pytest.raises(ValueError):
        HunyuanProvider()


def test_credentials_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TENCENT_SECRET_ID", "env-sid")
    monkeypatch.setenv("TENCENT_SECRET_KEY", "env-key")

    provider = HunyuanProvider(region="ap-beijing")

    assert provider.host == "ai3d.ap-beijing.tencentcloudapi.com"


@pytest.mark.asyncio
async def test_every_kind_is_either_supported_or_rejected_offline(recording_transport, sample_params) -> None:
    transport = recording_transport(
        lambda request: _respond({"JobId": "job-1", "ResultFile3D": "https://out/model.obj"})
    )
    provider = _provider(transport)

    for kind, params in sample_params.items():
        before = len(transport.requests)
        if provider.supports(kind):
            assert await provider.create_task(params)
            assert len(transport.requests) == before + 1
        else:
            with pytest.raises(UnsupportedOperationError):
                await provider.create_task(params)
            assert len(transport.requests) == before

    assert {kind for kind in TaskType if provider.supports(kind)} == {
        TaskType.TEXT_TO_3D,
        TaskType.IMAGE_TO_3D,
        TaskType.TEXTURE,
        TaskType.DECIMATE,
        TaskType.UV_UNWRAP,
        TaskType.SEGMENT,
        TaskType.CONVERT,
    }
