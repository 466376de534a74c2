"""kuberender: manifest rendering stage with identity-based caching.

Expands manifest sources through a kustomize-style engine, stamps the
resulting documents with ownership metadata and records how many resources
were actually rendered.
"""

__version__ = "0.1.0"

from kuberender.errors import CacheKeyError, RenderError, StructuralError, TemplatingError
from kuberender.models.request import ManifestInfo, OwnerInstance, ReconciliationRequest, Release
from kuberender.render.action import RenderManifestsAction, RenderOptions
from kuberender.render.keys import default_caching_key

__all__ = [
    "CacheKeyError",
    "ManifestInfo",
    "OwnerInstance",
    "ReconciliationRequest",
    "Release",
    "RenderError",
    "RenderManifestsAction",
    "RenderOptions",
    "StructuralError",
    "TemplatingError",
    "__version__",
    "default_caching_key",
]
