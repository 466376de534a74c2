"""In-process render cache keyed by owner/manifest identity.

Each key maps to at most one CacheEntry holding the engine output (before
metadata injection) and the owner generation it was rendered at. A lookup
whose generation differs from the stored one is a miss and the entry is
replaced on a successful render.

Thread safety: a global guard protects the entry and lock maps; a per-key
lock serializes the check-render-store sequence so that concurrent callers
for the same key and generation invoke the engine once. Renders for
different keys proceed in parallel.
"""

from __future__ import annotations

import copy
import threading
from collections import OrderedDict
from collections.abc import Callable, Iterable
from typing import Any, Protocol

from kuberender.models.resources import CacheEntry, RenderResult
from kuberender.observability.logging import get_logger

_logger = get_logger("render.cache")

RenderFn = Callable[[], list[dict[str, Any]]]


class EvictionPolicy(Protocol):
    """Decides which keys to drop after an entry is stored."""

    def touch(self, key: str) -> None:
        """Record that *key* was read or written."""

    def forget(self, key: str) -> None:
        """Record that *key* left the cache."""

    def victims(self, size: int) -> Iterable[str]:
        """Return keys to evict given the current cache *size*."""


class NoEviction:
    """Keeps every entry for the lifetime of the cache."""

    def touch(self, key: str) -> None:
        pass

    def forget(self, key: str) -> None:
        pass

    def victims(self, size: int) -> Iterable[str]:
        return ()


class LRUEviction:
    """Evicts least recently used keys once more than ``max_entries`` are held."""

    def __init__(self, max_entries: int) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._order: OrderedDict[str, None] = OrderedDict()

    def touch(self, key: str) -> None:
        self._order[key] = None
        self._order.move_to_end(key)

    def forget(self, key: str) -> None:
        self._order.pop(key, None)

    def victims(self, size: int) -> Iterable[str]:
        excess = size - self._max_entries
        if excess <= 0:
            return []
        return list(self._order)[:excess]


def _copy_resources(resources: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    return [copy.deepcopy(r) for r in resources]


class RenderCache:
    """Maps cache keys to the last rendered resource set and its generation.

    Entries are copied on write and on every read, so callers may mutate
    returned documents without affecting cached state.
    """

    def __init__(self, eviction: EvictionPolicy | None = None) -> None:
        self._entries: dict[str, CacheEntry] = {}
        # Key locks are never dropped: removing one while a caller is about
        # to acquire it would let two renders for that key run at once.
        self._key_locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()
        self._eviction: EvictionPolicy = eviction or NoEviction()

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    def keys(self) -> list[str]:
        with self._guard:
            return list(self._entries)

    def lookup(self, key: str) -> CacheEntry | None:
        """Return a deep copy of the entry stored under *key*, or None."""
        with self._guard:
            entry = self._entries.get(key)
        if entry is None:
            return None
        resources = tuple(_copy_resources(entry.resources))
        return CacheEntry(key=entry.key, generation=entry.generation, resources=resources)

    def invalidate(self, key: str) -> bool:
        """Drop the entry for *key*. Returns True if one existed."""
        with self._guard:
            self._eviction.forget(key)
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._guard:
            for key in self._entries:
                self._eviction.forget(key)
            self._entries.clear()

    def get_or_render(self, key: str, generation: int, render_fn: RenderFn) -> RenderResult:
        """Return cached resources for (*key*, *generation*) or render them.

        On a miss ``render_fn`` is called with the key lock held and its
        result replaces any previous entry. If ``render_fn`` raises, the
        existing entry is left untouched and the exception propagates.
        """
        with self._key_lock(key):
            with self._guard:
                entry = self._entries.get(key)
                if entry is not None and entry.generation == generation:
                    self._eviction.touch(key)
            if entry is not None and entry.generation == generation:
                _logger.debug("render_cache_hit", key=key, generation=generation)
                return RenderResult(resources=_copy_resources(entry.resources), cache_hit=True)

            _logger.debug(
                "render_cache_miss",
                key=key,
                generation=generation,
                stale_generation=entry.generation if entry is not None else None,
            )
            rendered = render_fn()
            self._store(CacheEntry(key=key, generation=generation, resources=tuple(_copy_resources(rendered))))
            return RenderResult(resources=rendered, cache_hit=False)

    def _key_lock(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    def _store(self, entry: CacheEntry) -> None:
        with self._guard:
            self._entries[entry.key] = entry
            self._eviction.touch(entry.key)
            for victim in list(self._eviction.victims(len(self._entries))):
                if victim == entry.key:
                    continue
                self._entries.pop(victim, None)
                self._eviction.forget(victim)
                _logger.debug("render_cache_evicted", key=victim)
