"""Reconciliation request structures consumed by the render action."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class OwnerInstance:
    """The component resource that owns the rendered manifests.

    ``generation`` increases whenever the owner's desired state changes and
    governs the freshness of cached renders.
    """

    kind: str
    name: str = ""
    generation: int = 0
    uid: str = ""
    api_version: str = "components.platform.opendatahub.io/v1"


@dataclass(frozen=True)
class Release:
    """Platform distribution the owner belongs to.

    Carried for later reconciliation stages; the render action does not read it.
    """

    name: str = "OpenDataHub"
    version: str = ""


@dataclass(frozen=True)
class ManifestInfo:
    """A manifest source resolvable by the templating engine.

    The effective location is ``path/context_dir/source_path`` with empty
    parts skipped.
    """

    path: str
    context_dir: str = ""
    source_path: str = ""

    def __str__(self) -> str:
        parts = [p for p in (self.path, self.context_dir, self.source_path) if p]
        return posixpath.join(*parts) if parts else ""


@dataclass
class ReconciliationRequest:
    """Per-cycle unit of work.

    Owned by the outer reconciliation loop. The render action only appends to
    ``resources``; every other field is read-only to it.
    """

    instance: OwnerInstance
    namespace: str
    release: Release = field(default_factory=Release)
    manifests: list[ManifestInfo] = field(default_factory=list)
    resources: list[dict[str, Any]] = field(default_factory=list)
