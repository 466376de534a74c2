"""Entry point for `python -m kuberender`.

Usage:
    python -m kuberender render ./manifests/dashboard --namespace opendatahub
"""

from __future__ import annotations

from kuberender.cli import cli

cli()
