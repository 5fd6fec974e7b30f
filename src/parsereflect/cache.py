"""Bounded cache of parsed files keyed by canonical path."""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Callable
from pathlib import Path

import structlog

from parsereflect.syntax.nodes import FileSyntaxTree

log = structlog.get_logger(__name__)


def canonical_path(file_name: str | Path) -> str:
    return str(Path(file_name).expanduser().resolve())


class SourceCache:
    """Thread-safe cache of ``FileSyntaxTree`` objects.

    Entries are evicted oldest-inserted first. ``max_entries=None`` keeps
    every tree; ``0`` caches nothing.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        self._entries: OrderedDict[str, FileSyntaxTree] = OrderedDict()
        self._lock = threading.Lock()
        self._max = max_entries

    @property
    def max_entries(self) -> int | None:
        return self._max

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, file_name: object) -> bool:
        if not isinstance(file_name, (str, Path)):
            return False
        with self._lock:
            return canonical_path(file_name) in self._entries

    def get(self, file_name: str | Path) -> FileSyntaxTree | None:
        with self._lock:
            return self._entries.get(canonical_path(file_name))

    def store(self, file_name: str | Path, tree: FileSyntaxTree) -> None:
        """Store a tree, evicting the oldest entries beyond capacity."""
        with self._lock:
            self._store_locked(canonical_path(file_name), tree)

    def get_or_parse(
        self, file_name: str | Path, parse: Callable[[str], FileSyntaxTree]
    ) -> tuple[FileSyntaxTree, bool]:
        """Return the cached tree, or parse and store it, as one atomic step.

        ``parse`` receives the canonical path. Returns the tree and whether
        it came from the cache.
        """
        key = canonical_path(file_name)
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                return cached, True
            tree = parse(key)
            self._store_locked(key, tree)
            return tree, False

    def _store_locked(self, key: str, tree: FileSyntaxTree) -> None:
        if self._max == 0:
            return
        if self._max is not None:
            while len(self._entries) >= self._max and key not in self._entries:
                evicted, _ = self._entries.popitem(last=False)
                log.debug("source_cache_evicted", file=evicted)
        self._entries[key] = tree

    def resize(self, max_entries: int | None) -> None:
        """Change capacity, dropping the oldest entries if currently over it."""
        with self._lock:
            self._max = max_entries
            if max_entries is None:
                return
            while len(self._entries) > max_entries:
                evicted, _ = self._entries.popitem(last=False)
                log.debug("source_cache_evicted", file=evicted)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
