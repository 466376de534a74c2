"""Render cache data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """Engine output for one cache key, as produced at ``generation``.

    ``resources`` always holds the documents before metadata injection.
    """

    key: str
    generation: int
    resources: tuple[dict[str, Any], ...] = ()


@dataclass
class RenderResult:
    """Outcome of a get-or-render call."""

    resources: list[dict[str, Any]] = field(default_factory=list)
    cache_hit: bool = False
