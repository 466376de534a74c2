"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class CacheConfig:
    """Render cache configuration."""

    enabled: bool = True
    max_entries: int = 0  # 0 means unbounded


@dataclass
class MetadataConfig:
    """Labels and annotations stamped on every rendered resource."""

    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    format: str = "json"


@dataclass
class KubeRenderConfig:
    """Top-level kuberender configuration."""

    manifests_root: str = ""
    cache: CacheConfig = field(default_factory=CacheConfig)
    metadata: MetadataConfig = field(default_factory=MetadataConfig)
    log: LogConfig = field(default_factory=LogConfig)
