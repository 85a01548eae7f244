"""Vendor adapters normalizing 3D generation APIs into one task protocol."""

from .providers_base import ProviderAdapter
from .providers_factory import create_provider
from .providers_hunyuan import HunyuanProvider
from .providers_tripo import ObjectUploader, StsDestination, TripoProvider

__all__ = [
    "ProviderAdapter",
    "TripoProvider",
    "HunyuanProvider",
    "ObjectUploader",
    "StsDestination",
    "create_provider",
]
