"""Kustomize-style overlay engine.

Expands a manifest path into an ordered list of resource documents. A path
naming a directory must contain a kustomization file; its ``resources`` (and
legacy ``bases``) are loaded in order, nested kustomization directories are
built recursively, and the directory's own transformers are applied on top:

    namePrefix / nameSuffix   -- rewrite metadata.name
    namespace                 -- set metadata.namespace
    commonLabels              -- metadata, selector and pod template labels
    commonAnnotations         -- metadata annotations

A path naming a file renders that file's documents unchanged. The engine reads
through an fsspec filesystem so tests can substitute ``memory://`` for disk.
"""

from __future__ import annotations

import posixpath
from typing import Any

import fsspec
import yaml
from fsspec.spec import AbstractFileSystem

from kuberender.errors import TemplatingError
from kuberender.observability.logging import get_logger

_logger = get_logger("engine.kustomize")

DEFAULT_KUSTOMIZATION_FILE_NAME = "kustomization.yaml"
KUSTOMIZATION_FILE_NAMES = (DEFAULT_KUSTOMIZATION_FILE_NAME, "kustomization.yml", "Kustomization")


def _ensure_mapping(parent: dict[str, Any], key: str) -> dict[str, Any]:
    value = parent.get(key)
    if value is None:
        value = parent[key] = {}
    elif not isinstance(value, dict):
        raise TemplatingError(f"{key} must be a mapping, got {type(value).__name__}")
    return value


def _string_map(raw: Any, field_name: str, source: str) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise TemplatingError(f"{source}: {field_name} must be a mapping")
    return {str(k): "" if v is None else str(v) for k, v in raw.items()}


def _is_list(doc: Any) -> bool:
    return isinstance(doc, dict) and str(doc.get("kind", "")).endswith("List") and isinstance(doc.get("items"), list)


def _validate(doc: Any, source: str, index: int) -> dict[str, Any]:
    if not isinstance(doc, dict):
        raise TemplatingError(f"{source}: document {index} is not a mapping")
    for field_name in ("apiVersion", "kind"):
        if not isinstance(doc.get(field_name), str) or not doc[field_name]:
            raise TemplatingError(f"{source}: document {index} is missing {field_name}")
    metadata = doc.get("metadata")
    if not isinstance(metadata, dict) or not isinstance(metadata.get("name"), str) or not metadata["name"]:
        raise TemplatingError(f"{source}: document {index} ({doc['kind']}) is missing metadata.name")
    return doc


class KustomizeEngine:
    """Renders manifest paths into resource documents.

    Args:
        fs: fsspec filesystem to read manifests from. Defaults to the local
            filesystem.
    """

    def __init__(self, fs: AbstractFileSystem | None = None) -> None:
        self._fs = fs if fs is not None else fsspec.filesystem("file")

    @property
    def fs(self) -> AbstractFileSystem:
        return self._fs

    def render(self, path: str) -> list[dict[str, Any]]:
        """Expand *path* into an ordered list of documents.

        Raises:
            TemplatingError: the path, a referenced resource or a kustomization
                is missing, YAML is malformed, resources reference each other
                in a cycle, or a document lacks apiVersion/kind/metadata.name.
        """
        if not path:
            raise TemplatingError("manifest path is empty")
        if not self._fs.exists(path):
            raise TemplatingError(f"{path}: no such file or directory")

        if self._fs.isdir(path):
            resources = self._build(posixpath.normpath(path), ())
        else:
            resources = self._load_file(path)

        _logger.debug("kustomize_rendered", path=path, resources=len(resources))
        return resources

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _read_yaml(self, path: str) -> list[Any]:
        try:
            text = self._fs.cat_file(path).decode("utf-8")
            return list(yaml.safe_load_all(text))
        except yaml.YAMLError as exc:
            raise TemplatingError(f"{path}: invalid YAML: {exc}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise TemplatingError(f"{path}: cannot read: {exc}") from exc

    def _load_file(self, path: str) -> list[dict[str, Any]]:
        resources: list[dict[str, Any]] = []
        for index, doc in enumerate(self._read_yaml(path)):
            if doc is None:
                continue
            if _is_list(doc):
                resources.extend(_validate(item, path, index) for item in doc["items"])
            else:
                resources.append(_validate(doc, path, index))
        return resources

    def _find_kustomization(self, directory: str) -> str | None:
        for name in KUSTOMIZATION_FILE_NAMES:
            candidate = posixpath.join(directory, name)
            if self._fs.isfile(candidate):
                return candidate
        return None

    def _load_kustomization(self, path: str) -> dict[str, Any]:
        docs = [d for d in self._read_yaml(path) if d is not None]
        if not docs:
            return {}
        if len(docs) > 1 or not isinstance(docs[0], dict):
            raise TemplatingError(f"{path}: kustomization must be a single mapping")
        return docs[0]

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def _build(self, directory: str, stack: tuple[str, ...]) -> list[dict[str, Any]]:
        if directory in stack:
            chain = " -> ".join((*stack, directory))
            raise TemplatingError(f"cycle detected in kustomization resources: {chain}")

        kustomization_path = self._find_kustomization(directory)
        if kustomization_path is None:
            raise TemplatingError(
                f"{directory}: unable to find one of {', '.join(repr(n) for n in KUSTOMIZATION_FILE_NAMES)}"
            )
        kustomization = self._load_kustomization(kustomization_path)

        refs: list[Any] = []
        for field_name in ("bases", "resources"):
            value = kustomization.get(field_name) or []
            if not isinstance(value, list):
                raise TemplatingError(f"{kustomization_path}: {field_name} must be a list")
            refs.extend(value)

        resources: list[dict[str, Any]] = []
        for ref in refs:
            if not isinstance(ref, str) or not ref:
                raise TemplatingError(f"{kustomization_path}: invalid resource reference {ref!r}")
            target = posixpath.normpath(posixpath.join(directory, ref))
            if not self._fs.exists(target):
                raise TemplatingError(f"{kustomization_path}: resource {ref!r} not found")
            if self._fs.isdir(target):
                resources.extend(self._build(target, (*stack, directory)))
            else:
                resources.extend(self._load_file(target))

        self._transform(resources, kustomization, kustomization_path)
        return resources

    def _transform(self, resources: list[dict[str, Any]], kustomization: dict[str, Any], source: str) -> None:
        prefix = str(kustomization.get("namePrefix") or "")
        suffix = str(kustomization.get("nameSuffix") or "")
        namespace = kustomization.get("namespace")
        labels = _string_map(kustomization.get("commonLabels"), "commonLabels", source)
        annotations = _string_map(kustomization.get("commonAnnotations"), "commonAnnotations", source)

        for doc in resources:
            metadata = doc["metadata"]
            if prefix or suffix:
                metadata["name"] = f"{prefix}{metadata['name']}{suffix}"
            if namespace:
                metadata["namespace"] = str(namespace)
            if labels:
                _ensure_mapping(metadata, "labels").update(labels)
                self._apply_selector_labels(doc, labels)
            if annotations:
                _ensure_mapping(metadata, "annotations").update(annotations)

    @staticmethod
    def _apply_selector_labels(doc: dict[str, Any], labels: dict[str, str]) -> None:
        spec = doc.get("spec")
        if not isinstance(spec, dict):
            return
        selector = spec.get("selector")
        if doc["kind"] == "Service":
            if isinstance(selector, dict):
                selector.update(labels)
        elif isinstance(selector, dict):
            _ensure_mapping(selector, "matchLabels").update(labels)
        template = spec.get("template")
        if isinstance(template, dict):
            _ensure_mapping(_ensure_mapping(template, "metadata"), "labels").update(labels)
