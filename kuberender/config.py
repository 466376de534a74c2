"""Configuration loading from environment variables.

Every setting is read from a ``KUBERENDER_``-prefixed variable. Malformed
values raise ValueError naming the offending variable; nothing is silently
replaced by its default.
"""

from __future__ import annotations

import os
import re

from kuberender.models.config import CacheConfig, KubeRenderConfig, LogConfig, MetadataConfig
from kuberender.observability.logging import LOG_FORMATS, LOG_LEVELS

ENV_PREFIX = "KUBERENDER_"

# Qualified name with optional DNS subdomain prefix, as accepted for label keys.
_RE_METADATA_KEY = re.compile(r"^([a-z0-9]([-a-z0-9.]*[a-z0-9])?/)?[A-Za-z0-9]([-A-Za-z0-9_.]*[A-Za-z0-9])?$")

_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off"})


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"{ENV_PREFIX}{key}", default).strip()


def _env_bool(key: str, default: bool) -> bool:
    val = _env(key).lower()
    if not val:
        return default
    if val in _TRUE:
        return True
    if val in _FALSE:
        return False
    raise ValueError(f"{ENV_PREFIX}{key} must be a boolean, got {val!r}")


def _env_int(key: str, default: int, min_val: int | None = None) -> int:
    raw = _env(key)
    if not raw:
        return default
    try:
        val = int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{key} must be an integer, got {raw!r}") from None
    if min_val is not None:
        val = max(val, min_val)
    return val


def _env_choice(key: str, default: str, choices: tuple[str, ...], what: str) -> str:
    val = _env(key, default).lower()
    if val not in choices:
        raise ValueError(f"Invalid {what}: {val} ({ENV_PREFIX}{key}). Must be one of {', '.join(choices)}")
    return val


def parse_key_values(value: str) -> dict[str, str]:
    """Parse ``k1=v1,k2=v2`` into a dict. Empty input yields an empty dict."""
    pairs: dict[str, str] = {}
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        key, sep, val = item.partition("=")
        key = key.strip()
        if not sep or not _RE_METADATA_KEY.match(key):
            raise ValueError(f"Invalid key=value pair: {item!r}")
        pairs[key] = val.strip()
    return pairs


def _env_key_values(key: str) -> dict[str, str]:
    try:
        return parse_key_values(_env(key))
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}{key}: {exc}") from None


def load_config() -> KubeRenderConfig:
    """Load configuration from KUBERENDER_* environment variables."""
    return KubeRenderConfig(
        manifests_root=_env("MANIFESTS_ROOT"),
        cache=CacheConfig(
            enabled=_env_bool("CACHE_ENABLED", True),
            max_entries=_env_int("CACHE_MAX_ENTRIES", 0, min_val=0),
        ),
        metadata=MetadataConfig(
            labels=_env_key_values("LABELS"),
            annotations=_env_key_values("ANNOTATIONS"),
        ),
        log=LogConfig(
            level=_env_choice("LOG_LEVEL", "info", LOG_LEVELS, "log level"),
            format=_env_choice("LOG_FORMAT", "json", LOG_FORMATS, "log format"),
        ),
    )
