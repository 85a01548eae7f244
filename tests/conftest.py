from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from magi3d.domain import params as p
from magi3d.domain.models import TaskType


class RecordingTransport:
    """Route requests to a handler and keep every request for assertions."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self._handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    def json_bodies(self) -> list[Any]:
        return [json.loads(request.content) for request in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


class FakeClock:
    """Monotonic clock advanced only by the injected sleep."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture(autouse=True)
def _isolate_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "TRIPO_API_KEY",
        "TRIPO_BASE_URL",
        "TRIPO_STS_UPLOAD",
        "TENCENT_SECRET_ID",
        "TENCENT_SECRET_KEY",
        "TENCENT_REGION",
        "TENCENT_ENDPOINT",
        "MAGI3D_POLL_INTERVAL_SECONDS",
        "MAGI3D_POLL_TIMEOUT_SECONDS",
        "MAGI3D_POLL_MAX_RETRIES",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_transport() -> Callable[[Callable[[httpx.Request], httpx.Response]], RecordingTransport]:
    return RecordingTransport


@pytest.fixture
def sample_params():
    """One valid parameter object per task kind, using public URLs only."""

    model_url = "https://cdn.example.com/model.glb"
    image_url = "https://cdn.example.com/cat.png"
    return {
        TaskType.TEXT_TO_3D: p.TextTo3DParams(prompt="a cat"),
        TaskType.IMAGE_TO_3D: p.ImageTo3DParams(input=image_url),
        TaskType.MULTIVIEW_TO_3D: p.MultiviewTo3DParams(inputs=[image_url, "", "", ""]),
        TaskType.TEXT_TO_IMAGE: p.TextToImageParams(prompt="a cat"),
        TaskType.GENERATE_IMAGE: p.GenerateImageParams(prompt="a cat", input=image_url),
        TaskType.TEXTURE: p.TextureParams(task_id=model_url, prompt="wood"),
        TaskType.REFINE: p.RefineParams(task_id="draft"),
        TaskType.PRE_RIG_CHECK: p.PreRigCheckParams(task_id="orig"),
        TaskType.RIG: p.RigParams(task_id="orig"),
        TaskType.ANIMATE: p.AnimateParams(task_id="orig", animation="preset:walk"),
        TaskType.SEGMENT: p.SegmentParams(task_id=model_url),
        TaskType.MESH_COMPLETION: p.MeshCompletionParams(task_id="orig"),
        TaskType.DECIMATE: p.DecimateParams(task_id=model_url, target_face_count=5000),
        TaskType.UV_UNWRAP: p.UVUnwrapParams(model_url=model_url),
        TaskType.PROFILE_TO_3D: p.ProfileTo3DParams(input=image_url),
        TaskType.CONVERT: p.ConvertParams(task_id=model_url, format="obj"),
        TaskType.IMPORT: p.ImportParams(input="uploads/model.glb"),
        TaskType.STYLIZE: p.StylizeParams(task_id="orig", style="lego"),
    }
