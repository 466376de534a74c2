"""Render stage for kuberender.

Submodules:
    keys     -- cache key functions (owner identity + manifest location).
    cache    -- thread-safe render cache with generation-based freshness.
    metadata -- post-render namespace/label/annotation injection.
    action   -- RenderManifestsAction orchestrating the above.
"""

from kuberender.render.action import RenderManifestsAction, RenderOptions, build_action
from kuberender.render.cache import LRUEviction, NoEviction, RenderCache
from kuberender.render.keys import CacheKeyFn, default_caching_key
from kuberender.render.metadata import inject_metadata

__all__ = [
    "CacheKeyFn",
    "LRUEviction",
    "NoEviction",
    "RenderCache",
    "RenderManifestsAction",
    "RenderOptions",
    "build_action",
    "default_caching_key",
    "inject_metadata",
]
