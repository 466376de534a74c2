"""Post-render metadata injection.

Missing ``metadata``, ``labels`` or ``annotations`` sections are initialized;
sections that exist but are not mappings raise StructuralError. The same
policy applies to every document, fresh or cache-served.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from kuberender.errors import StructuralError


def _section(parent: dict[str, Any], key: str, describe: str) -> dict[str, Any]:
    value = parent.get(key)
    if value is None:
        value = parent[key] = {}
    elif not isinstance(value, dict):
        raise StructuralError(f"{describe}: {key} must be a mapping, got {type(value).__name__}")
    return value


def _describe(doc: dict[str, Any], index: int) -> str:
    metadata = doc.get("metadata")
    name = metadata.get("name", "") if isinstance(metadata, dict) else ""
    return f"{doc.get('kind', '<unknown>')}/{name or index}"


def inject_metadata(
    resources: list[dict[str, Any]],
    *,
    namespace: str,
    labels: Mapping[str, str] | None = None,
    annotations: Mapping[str, str] | None = None,
) -> list[dict[str, Any]]:
    """Stamp *resources* in place and return them.

    The namespace is always overwritten. Configured labels and annotations win
    over same-named entries from the source manifest; other entries are kept.
    """
    for index, doc in enumerate(resources):
        if not isinstance(doc, dict):
            raise StructuralError(f"document {index} is not a mapping, got {type(doc).__name__}")
        describe = _describe(doc, index)
        metadata = _section(doc, "metadata", describe)
        metadata["namespace"] = namespace
        if labels:
            _section(metadata, "labels", describe).update(labels)
        if annotations:
            _section(metadata, "annotations", describe).update(annotations)
    return resources
