"""Kustomize render action.

For every manifest source of a reconciliation request, in order:

1. compute a cache key (when caching is enabled),
2. get-or-render the engine output for the owner's current generation,
3. inject ownership metadata (always, including on cache hits),
4. append the documents to ``request.resources``.

The first failure aborts the remaining sources. Documents appended for
earlier sources stay in ``request.resources``: the output is at-least-partial,
not transactional.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog
from fsspec.spec import AbstractFileSystem
from prometheus_client import Counter

from kuberender import labels as known_labels
from kuberender.engine.kustomize import KustomizeEngine
from kuberender.errors import CacheKeyError, RenderError, StructuralError, TemplatingError
from kuberender.models.config import KubeRenderConfig
from kuberender.models.request import ManifestInfo, ReconciliationRequest
from kuberender.models.resources import RenderResult
from kuberender.observability import metrics
from kuberender.observability.logging import get_logger
from kuberender.render.cache import EvictionPolicy, LRUEviction, RenderCache
from kuberender.render.keys import CacheKeyFn, default_caching_key
from kuberender.render.metadata import inject_metadata

_logger = get_logger("render.kustomize")

ACTION_NAME = "kustomize"


@dataclass
class RenderOptions:
    """Construction-time options for RenderManifestsAction.

    Attributes:
        cache_key_fn: Key function enabling the render cache. None renders
            every manifest on every call.
        labels:       Labels stamped on every resource. Win over both the
                      source manifest and the derived part-of label.
        annotations:  Annotations stamped on every resource.
        engine_fs:    fsspec filesystem the engine reads manifests from.
                      Defaults to the local filesystem.
        eviction:     Cache eviction policy. Defaults to keeping every entry.
    """

    cache_key_fn: CacheKeyFn | None = None
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    engine_fs: AbstractFileSystem | None = None
    eviction: EvictionPolicy | None = None


class RenderManifestsAction:
    """Renders a request's manifest sources into ready-to-apply resources.

    Args:
        options: Action options; defaults to no cache and no extra metadata.
        counter: Rendered-resources counter. Defaults to the process-wide one.
        engine:  Templating engine. Defaults to a KustomizeEngine over
                 ``options.engine_fs``.
    """

    def __init__(
        self,
        options: RenderOptions | None = None,
        *,
        counter: Counter | None = None,
        engine: KustomizeEngine | None = None,
    ) -> None:
        self._options = options or RenderOptions()
        self._counter = counter if counter is not None else metrics.rendered_resources_total
        self._engine = engine or KustomizeEngine(self._options.engine_fs)
        self._key_fn = self._options.cache_key_fn
        self._cache: RenderCache | None = None
        if self._key_fn is not None:
            self._cache = RenderCache(self._options.eviction)

    @property
    def cache(self) -> RenderCache | None:
        return self._cache

    def __call__(self, request: ReconciliationRequest) -> None:
        self.execute(request)

    def execute(self, request: ReconciliationRequest) -> None:
        """Render every manifest source of *request* into ``request.resources``.

        Raises:
            TemplatingError: the engine failed for a manifest source.
            StructuralError: a rendered document cannot carry metadata.
            CacheKeyError:   the configured key function raised.
        """
        controller = request.instance.kind.lower()
        rendered_count = 0
        served_count = 0

        with structlog.contextvars.bound_contextvars(
            controller=controller,
            instance=request.instance.name,
            generation=request.instance.generation,
        ):
            for manifest in request.manifests:
                try:
                    result = self._render_manifest(request, manifest)
                    if result.cache_hit:
                        served_count += len(result.resources)
                    else:
                        # Every real render is counted, even when injection below fails.
                        rendered_count += len(result.resources)
                        self._counter.labels(controller=controller, action=ACTION_NAME).inc(len(result.resources))
                    resources = self._inject(request, manifest, result.resources)
                except RenderError as exc:
                    _logger.error("render_failed", manifest=str(manifest), error=str(exc))
                    raise

                request.resources.extend(resources)

            _logger.info(
                "manifests_rendered",
                manifests=len(request.manifests),
                rendered=rendered_count,
                cached=served_count,
            )

    def _inject(
        self, request: ReconciliationRequest, manifest: ManifestInfo, resources: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        try:
            return inject_metadata(
                resources,
                namespace=request.namespace,
                labels=self._labels_for(request),
                annotations=self._options.annotations,
            )
        except StructuralError as exc:
            raise StructuralError(str(exc), manifest=str(manifest)) from exc

    def _labels_for(self, request: ReconciliationRequest) -> dict[str, str]:
        labels = {known_labels.PLATFORM_PART_OF: request.instance.kind.lower()}
        labels.update(self._options.labels)
        return labels

    def _render_manifest(self, request: ReconciliationRequest, manifest: ManifestInfo) -> RenderResult:
        if self._cache is None or self._key_fn is None:
            return RenderResult(resources=self._run_engine(manifest), cache_hit=False)

        try:
            key = self._key_fn(request, manifest)
        except Exception as exc:
            raise CacheKeyError(f"cache key function failed: {exc}", manifest=str(manifest)) from exc

        return self._cache.get_or_render(key, request.instance.generation, lambda: self._run_engine(manifest))

    def _run_engine(self, manifest: ManifestInfo) -> list[dict[str, Any]]:
        path = str(manifest)
        try:
            return self._engine.render(path)
        except RenderError as exc:
            raise TemplatingError(str(exc), manifest=path) from exc
        except Exception as exc:
            raise TemplatingError(f"templating engine failed: {exc}", manifest=path) from exc


def build_action(config: KubeRenderConfig, *, counter: Counter | None = None) -> RenderManifestsAction:
    """Create a RenderManifestsAction from a loaded configuration."""
    eviction: EvictionPolicy | None = None
    if config.cache.max_entries > 0:
        eviction = LRUEviction(config.cache.max_entries)
    options = RenderOptions(
        cache_key_fn=default_caching_key if config.cache.enabled else None,
        labels=dict(config.metadata.labels),
        annotations=dict(config.metadata.annotations),
        eviction=eviction,
    )
    return RenderManifestsAction(options, counter=counter)
