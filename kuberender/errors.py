"""Render failure taxonomy.

Every failure is scoped to a single reconciliation request and raised to the
caller, which owns the retry policy.
"""

from __future__ import annotations


class RenderError(Exception):
    """Base class for all render failures.

    Attributes:
        manifest: String form of the manifest source being processed, if known.
    """

    def __init__(self, message: str, manifest: str = "") -> None:
        super().__init__(f"{manifest}: {message}" if manifest else message)
        self.manifest = manifest


class TemplatingError(RenderError):
    """The templating engine could not resolve or parse a manifest source."""


class StructuralError(RenderError):
    """A rendered document lacks the structure metadata injection needs."""


class CacheKeyError(RenderError):
    """A cache key function raised instead of returning a key."""
