"""Templating engine used by the render action.

Submodules:
    kustomize -- kustomize-style overlay engine over fsspec filesystems.
"""

from kuberender.engine.kustomize import DEFAULT_KUSTOMIZATION_FILE_NAME, KUSTOMIZATION_FILE_NAMES, KustomizeEngine

__all__ = ["DEFAULT_KUSTOMIZATION_FILE_NAME", "KUSTOMIZATION_FILE_NAMES", "KustomizeEngine"]
