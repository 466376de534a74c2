"""Prometheus metrics for the render stage.

The module-level counter lives on the default registry. Components accept a
counter at construction so tests can bind one to a private registry.
"""

from __future__ import annotations

from prometheus_client import REGISTRY, CollectorRegistry, Counter

RENDERED_RESOURCES_TOTAL = "kuberender_rendered_resources_total"


def build_rendered_resources_counter(registry: CollectorRegistry | None = REGISTRY) -> Counter:
    """Create the rendered-resources counter on *registry*.

    Incremented once per resource produced by a real (non-cached) render.
    """
    return Counter(
        RENDERED_RESOURCES_TOTAL,
        "Number of resources rendered by the templating engine (cache hits excluded)",
        ["controller", "action"],
        registry=registry,
    )


rendered_resources_total = build_rendered_resources_counter()
