"""Cache key functions.

A key identifies *which manifest for which owner*. Freshness is governed
separately by the owner's generation, which the render cache stores next to
each entry and compares on lookup.
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable

from kuberender.models.request import ManifestInfo, ReconciliationRequest

CacheKeyFn = Callable[[ReconciliationRequest, ManifestInfo], str]


def default_caching_key(request: ReconciliationRequest, manifest: ManifestInfo) -> str:
    """Derive a key from the owner's stable identity and the manifest location."""
    instance = request.instance
    digest = hashlib.sha256()
    for part in (instance.api_version, instance.kind, instance.name, str(manifest)):
        digest.update(part.encode("utf-8"))
        digest.update(b"\x00")
    return digest.hexdigest()
