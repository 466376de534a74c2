"""Core data structures for kuberender."""

from kuberender.models.config import CacheConfig, KubeRenderConfig, LogConfig, MetadataConfig
from kuberender.models.request import ManifestInfo, OwnerInstance, ReconciliationRequest, Release
from kuberender.models.resources import CacheEntry, RenderResult

__all__ = [
    "CacheConfig",
    "CacheEntry",
    "KubeRenderConfig",
    "LogConfig",
    "ManifestInfo",
    "MetadataConfig",
    "OwnerInstance",
    "ReconciliationRequest",
    "Release",
    "RenderResult",
]
