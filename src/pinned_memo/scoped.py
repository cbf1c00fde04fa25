"""Populate/retrieve bridges between two separate entry points.

A populate call stores an artifact under a key without needing it back; a later
retrieve call, possibly from a different entry point, fetches it. Each key moves
once from empty to populated. Retrieving an empty key is a usage fault and never
falls back to computing a default.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
from threading import get_ident, local
from typing import Any, Generic, TypeVar

from pinned_memo.cache import StableCache
from pinned_memo.errors import NotPopulatedError
from pinned_memo.log import get_logger

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

logger = get_logger(__name__)


class ScopedCache(Generic[K, V]):
    """Explicit context object holding populated artifacts."""

    def __init__(self, label: str = "scoped_cache", hint: str | None = None) -> None:
        self._cache: StableCache[K, V] = StableCache(label)
        self._hint = hint

    @property
    def label(self) -> str:
        return self._cache.label

    def populate(self, key: K, compute: Callable[[K], V]) -> None:
        """Store ``compute(key)`` unless ``key`` is already populated."""
        self._cache.get(key, compute)

    def retrieve(self, key: K) -> V:
        """Return the artifact stored for ``key``; raise NotPopulatedError if absent."""
        if key not in self._cache:
            message = f"{self.label}: key {key!r} was retrieved before it was populated"
            if self._hint:
                message = f"{message}. {self._hint}"
            logger.warning("usage_fault", cache=self.label, operation="retrieve", key=repr(key))
            raise NotPopulatedError(message, key=key, operation="retrieve")
        return self._cache.peek(key)

    def is_populated(self, key: K) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)


class ThreadConfinedCache(Generic[K, V]):
    """One :class:`ScopedCache` per thread, created on first access from that thread.

    Keys populated on one thread are invisible to every other thread.
    """

    def __init__(self, label: str = "thread_confined_cache", hint: str | None = None) -> None:
        self._label = label
        self._hint = hint
        self._local = local()

    def _scoped(self) -> ScopedCache[K, V]:
        scoped: ScopedCache[K, V] | None = getattr(self._local, "scoped", None)
        if scoped is None:
            scoped = ScopedCache(f"{self._label}[thread={get_ident()}]", self._hint)
            self._local.scoped = scoped
        return scoped

    def populate(self, key: K, compute: Callable[[K], V]) -> None:
        """Store ``compute(key)`` for the current thread unless already populated."""
        self._scoped().populate(key, compute)

    def retrieve(self, key: K) -> V:
        """Return the artifact the current thread populated for ``key``."""
        return self._scoped().retrieve(key)

    def is_populated(self, key: K) -> bool:
        return self._scoped().is_populated(key)


_artifacts: ThreadConfinedCache[Any, Any] = ThreadConfinedCache("artifacts")


def populate(key: Hashable, compute: Callable[[Any], Any]) -> None:
    """Populate ``key`` in the process-wide thread-confined cache."""
    _artifacts.populate(key, compute)


def retrieve(key: Hashable) -> Any:
    """Retrieve ``key`` from the process-wide thread-confined cache."""
    return _artifacts.retrieve(key)
