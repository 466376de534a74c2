"""kuberender command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``kuberender`` script).
"""

from kuberender.cli.main import cli

__all__ = ["cli"]
