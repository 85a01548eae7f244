"""Settings for provider credentials and polling defaults.

Values come from the environment. Each provider keeps its own prefix so
Tripo and Tencent Cloud credentials can live side by side:

* ``TRIPO_API_KEY``, ``TRIPO_BASE_URL``, ``TRIPO_STS_UPLOAD`` ...
* ``TENCENT_SECRET_ID``, ``TENCENT_SECRET_KEY``, ``TENCENT_REGION`` ...
* ``MAGI3D_POLL_INTERVAL_SECONDS``, ``MAGI3D_POLL_TIMEOUT_SECONDS`` ...
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TripoSettings(BaseSettings):
    """Connection settings for the Tripo AI API."""

    model_config = SettingsConfigDict(env_prefix="TRIPO_")

    api_key: str | None = Field(
        default=None,
        description="Bearer token issued by the Tripo platform.",
    )
    base_url: str = Field(
        default="https://api.tripo3d.ai",
        description="Tripo API base URL.",
    )
    timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Per-request HTTP timeout.",
    )
    sts_upload: bool = Field(
        default=False,
        description="Upload local files, localhost URLs and base64 inputs before referencing them.",
    )


class HunyuanSettings(BaseSettings):
    """Connection settings for Tencent Cloud Hunyuan 3D."""

    model_config = SettingsConfigDict(env_prefix="TENCENT_")

    secret_id: str | None = Field(default=None, description="Tencent Cloud SecretId.")
    secret_key: str | None = Field(default=None, description="Tencent Cloud SecretKey.")
    region: str = Field(default="ap-guangzhou", description="Service region.")
    endpoint: str | None = Field(
        default=None,
        description="Custom API host; defaults to ai3d.<region>.tencentcloudapi.com.",
    )
    timeout_seconds: float = Field(default=120.0, gt=0)


class PollSettings(BaseSettings):
    """Defaults for :meth:`magi3d.client.TaskClient.poll_until_done`."""

    model_config = SettingsConfigDict(env_prefix="MAGI3D_POLL_")

    interval_seconds: float = Field(default=3.0, gt=0)
    timeout_seconds: float = Field(default=300.0, gt=0)
    max_retries: int = Field(default=5, ge=1)


__all__ = ["TripoSettings", "HunyuanSettings", "PollSettings"]
