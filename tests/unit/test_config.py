"""Tests for KUBERENDER_* environment configuration and action wiring."""

from __future__ import annotations

import pytest

from kuberender.config import load_config, parse_key_values
from kuberender.models.config import CacheConfig, KubeRenderConfig, MetadataConfig
from kuberender.render.action import build_action
from kuberender.render.cache import LRUEviction

_ENV_KEYS = ("LOG_LEVEL", "LOG_FORMAT", "CACHE_ENABLED", "CACHE_MAX_ENTRIES", "LABELS", "ANNOTATIONS", "MANIFESTS_ROOT")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(f"KUBERENDER_{key}", raising=False)


class TestLoadConfig:
    def test_defaults(self) -> None:
        config = load_config()

        assert config.cache.enabled is True
        assert config.cache.max_entries == 0
        assert config.metadata.labels == {}
        assert config.metadata.annotations == {}
        assert config.log.level == "info"
        assert config.log.format == "json"
        assert config.manifests_root == ""

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBERENDER_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("KUBERENDER_LOG_FORMAT", "Console")
        monkeypatch.setenv("KUBERENDER_CACHE_ENABLED", "false")
        monkeypatch.setenv("KUBERENDER_CACHE_MAX_ENTRIES", "64")
        monkeypatch.setenv("KUBERENDER_LABELS", "app.kubernetes.io/managed-by=kuberender, team=ai")
        monkeypatch.setenv("KUBERENDER_ANNOTATIONS", "platform.opendatahub.io/release=2.0.0")
        monkeypatch.setenv("KUBERENDER_MANIFESTS_ROOT", "/opt/manifests")

        config = load_config()

        assert config.log.level == "debug"
        assert config.log.format == "console"
        assert config.cache.enabled is False
        assert config.cache.max_entries == 64
        assert config.metadata.labels == {"app.kubernetes.io/managed-by": "kuberender", "team": "ai"}
        assert config.metadata.annotations == {"platform.opendatahub.io/release": "2.0.0"}
        assert config.manifests_root == "/opt/manifests"

    def test_negative_max_entries_clamped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBERENDER_CACHE_MAX_ENTRIES", "-5")

        assert load_config().cache.max_entries == 0

    def test_invalid_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBERENDER_LOG_LEVEL", "verbose")

        with pytest.raises(ValueError, match="Invalid log level"):
            load_config()

    def test_invalid_log_format(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBERENDER_LOG_FORMAT", "xml")

        with pytest.raises(ValueError, match="Invalid log format"):
            load_config()

    def test_invalid_boolean_names_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBERENDER_CACHE_ENABLED", "maybe")

        with pytest.raises(ValueError, match="KUBERENDER_CACHE_ENABLED must be a boolean"):
            load_config()

    @pytest.mark.parametrize(("raw", "expected"), [("on", True), ("0", False), (" No ", False), ("", True)])
    def test_boolean_spellings(self, monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
        monkeypatch.setenv("KUBERENDER_CACHE_ENABLED", raw)

        assert load_config().cache.enabled is expected

    def test_non_integer_max_entries_names_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBERENDER_CACHE_MAX_ENTRIES", "lots")

        with pytest.raises(ValueError, match="KUBERENDER_CACHE_MAX_ENTRIES must be an integer"):
            load_config()

    def test_malformed_labels_name_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBERENDER_LABELS", "team")

        with pytest.raises(ValueError, match="KUBERENDER_LABELS: Invalid key=value pair"):
            load_config()


class TestParseKeyValues:
    def test_empty(self) -> None:
        assert parse_key_values("") == {}
        assert parse_key_values(" , ") == {}

    def test_empty_value_allowed(self) -> None:
        assert parse_key_values("flag=") == {"flag": ""}

    def test_value_may_contain_equals(self) -> None:
        assert parse_key_values("expr=a=b") == {"expr": "a=b"}

    @pytest.mark.parametrize("raw", ["novalue", "=v", "bad key=v", "UPPER.example.com/x=v"])
    def test_rejects_malformed_pairs(self, raw: str) -> None:
        with pytest.raises(ValueError, match="Invalid key=value pair"):
            parse_key_values(raw)


class TestBuildAction:
    def test_cache_enabled_with_lru_limit(self, counter) -> None:
        config = KubeRenderConfig(cache=CacheConfig(enabled=True, max_entries=3))

        action = build_action(config, counter=counter)

        assert action.cache is not None
        assert isinstance(action.cache._eviction, LRUEviction)

    def test_cache_disabled(self, counter) -> None:
        action = build_action(KubeRenderConfig(cache=CacheConfig(enabled=False)), counter=counter)

        assert action.cache is None

    def test_metadata_copied_from_config(self, counter) -> None:
        config = KubeRenderConfig(metadata=MetadataConfig(labels={"a": "b"}, annotations={"c": "d"}))

        action = build_action(config, counter=counter)
        config.metadata.labels["a"] = "changed"

        assert action._options.labels == {"a": "b"}
        assert action._options.annotations == {"c": "d"}
