"""Shared fixtures for kuberender tests.

Provides an in-memory manifest tree (fsspec ``memory`` filesystem), a
private prometheus registry per test and quiet structlog output.
"""

from __future__ import annotations

import posixpath
from collections.abc import Callable, Iterator
from uuid import uuid4

import fsspec
import pytest
import structlog
from fsspec.spec import AbstractFileSystem
from prometheus_client import CollectorRegistry, Counter

from kuberender.observability.metrics import RENDERED_RESOURCES_TOTAL, build_rendered_resources_counter


@pytest.fixture(autouse=True, scope="session")
def _quiet_logging() -> None:
    """Swallow log output; structlog.testing.capture_logs still sees events."""
    structlog.configure(
        processors=[structlog.contextvars.merge_contextvars, structlog.processors.add_log_level],
        logger_factory=structlog.ReturnLoggerFactory(),
        cache_logger_on_first_use=False,
    )


# ---------------------------------------------------------------------------
# In-memory manifests
# ---------------------------------------------------------------------------


class ManifestTree:
    """A uniquely named directory on the shared fsspec memory filesystem."""

    def __init__(self, fs: AbstractFileSystem) -> None:
        self.fs = fs
        self.root = uuid4().hex

    def path(self, *parts: str) -> str:
        return posixpath.join(self.root, *parts)

    def write(self, relpath: str, content: str) -> str:
        target = self.path(relpath)
        self.fs.pipe_file(target, content.encode("utf-8"))
        return target


@pytest.fixture()
def manifest_tree() -> Iterator[ManifestTree]:
    tree = ManifestTree(fsspec.filesystem("memory"))
    yield tree
    if tree.fs.exists(tree.root):
        tree.fs.rm(tree.root, recursive=True)


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


@pytest.fixture()
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture()
def counter(registry: CollectorRegistry) -> Counter:
    return build_rendered_resources_counter(registry)


@pytest.fixture()
def rendered_total(registry: CollectorRegistry) -> Callable[[str], float]:
    """Read the rendered-resources counter for a controller label."""

    def _read(controller: str, action: str = "kustomize") -> float:
        value = registry.get_sample_value(RENDERED_RESOURCES_TOTAL, {"controller": controller, "action": action})
        return value or 0.0

    return _read
