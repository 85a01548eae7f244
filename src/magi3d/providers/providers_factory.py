"""Factory for provider adapters."""

from __future__ import annotations

import httpx

from ..core.config import HunyuanSettings, TripoSettings
from .providers_base import ProviderAdapter
from .providers_hunyuan import HunyuanProvider
from .providers_tripo import ObjectUploader, TripoProvider


def create_provider(
    name: str,
    *,
    settings: TripoSettings | HunyuanSettings | None = None,
    uploader: ObjectUploader | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ProviderAdapter:
    """Instantiate a provider adapter by name, reading credentials from settings."""
    lower = name.lower()
    if lower == "tripo":
        tripo = settings if isinstance(settings, TripoSettings) else TripoSettings()
        if not tripo.api_key:
            raise ValueError("TRIPO_API_KEY is required to instantiate TripoProvider")
        return TripoProvider(
            tripo.api_key,
            base_url=tripo.base_url,
            timeout_seconds=tripo.timeout_seconds,
            sts_upload=tripo.sts_upload,
            uploader=uploader,
            http_client=http_client,
        )
    if lower == "hunyuan":
        hunyuan = settings if isinstance(settings, HunyuanSettings) else HunyuanSettings()
        if not hunyuan.secret_id or not hunyuan.secret_key:
            raise ValueError("TENCENT_SECRET_ID and TENCENT_SECRET_KEY are required to instantiate HunyuanProvider")
        return HunyuanProvider(
            hunyuan.secret_id,
            hunyuan.secret_key,
            region=hunyuan.region,
            endpoint=hunyuan.endpoint,
            timeout_seconds=hunyuan.timeout_seconds,
            http_client=http_client,
        )
    raise ValueError(f"Unsupported provider '{name}'")
