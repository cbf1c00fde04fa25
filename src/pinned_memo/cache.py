"""Insert-only memoization caches."""

from __future__ import annotations

import copy
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from threading import get_ident
from typing import Generic, TypeVar

from pinned_memo.cell import SingleWriterCell
from pinned_memo.errors import BorrowError, ReentrantComputeError
from pinned_memo.log import get_logger

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

logger = get_logger(__name__)


@dataclass(eq=False, slots=True)
class Slot(Generic[V]):
    """Independently allocated holder for one cached value.

    The index maps keys to slots, so resizing the index never touches a payload.
    """

    value: V


@dataclass(slots=True)
class CacheStats:
    """Lookup counters for one cache instance."""

    hits: int = 0
    misses: int = 0


class StableCache(Generic[K, V]):
    """Memoize results and return the identical stored object for every lookup of a key.

    ``compute`` runs with no view held, so it may call :meth:`get` for other keys.
    Calling :meth:`get` for the key currently being computed raises
    :class:`ReentrantComputeError`.
    """

    def __init__(self, label: str = "stable_cache") -> None:
        self._cell: SingleWriterCell[dict[K, Slot[V]]] = SingleWriterCell({}, label)
        self._pending: dict[K, int] = {}
        self.stats = CacheStats()

    @property
    def label(self) -> str:
        return self._cell.label

    def get(self, key: K, compute: Callable[[K], V]) -> V:
        """Return the cached value for ``key``, or store ``compute(key)`` on first use."""
        with self._cell.borrow_read(key) as slots:
            slot = slots.get(key)
        if slot is not None:
            self.stats.hits += 1
            return slot.value

        self._reserve(key)
        try:
            logger.debug("cache_miss", cache=self.label, key=repr(key))
            fresh = Slot(compute(key))
            with self._cell.borrow_write(key) as slots:
                slots.setdefault(key, fresh)
            self.stats.misses += 1
        finally:
            with self._cell.borrow_write(key):
                self._pending.pop(key, None)

        with self._cell.borrow_read(key) as slots:
            return slots[key].value

    def _reserve(self, key: K) -> None:
        with self._cell.borrow_write(key):
            owner = self._pending.get(key)
            if owner is None:
                self._pending[key] = get_ident()
                return
        logger.warning("usage_fault", cache=self.label, operation="get", key=repr(key))
        if owner == get_ident():
            raise ReentrantComputeError(
                f"{self.label}: compute for key {key!r} re-entered get for the same key",
                key=key,
                operation="get",
            )
        raise BorrowError(
            f"{self.label}: key {key!r} is being computed on another thread",
            key=key,
            operation="get",
        )

    def peek(self, key: K) -> V:
        """Return the stored value without computing; raise KeyError when absent."""
        with self._cell.borrow_read(key) as slots:
            slot = slots.get(key)
        if slot is None:
            raise KeyError(f"{self.label}: no cached value for key {key!r}")
        return slot.value

    def __contains__(self, key: object) -> bool:
        with self._cell.borrow_read(key) as slots:
            return key in slots

    def __len__(self) -> int:
        with self._cell.borrow_read() as slots:
            return len(slots)


class ValueCache(Generic[K, V]):
    """Memoize copyable results and return a copy on every lookup.

    The presence check, ``compute`` and the insert all run inside one write view,
    so any call back into the same instance from ``compute`` raises
    :class:`BorrowError`.
    """

    def __init__(self, label: str = "value_cache") -> None:
        self._cell: SingleWriterCell[dict[K, V]] = SingleWriterCell({}, label)
        self.stats = CacheStats()

    @property
    def label(self) -> str:
        return self._cell.label

    def get(self, key: K, compute: Callable[[K], V]) -> V:
        """Return a copy of the cached value for ``key``, computing it on first use."""
        with self._cell.borrow_write(key) as values:
            if key in values:
                self.stats.hits += 1
            else:
                logger.debug("cache_miss", cache=self.label, key=repr(key))
                values[key] = compute(key)
                self.stats.misses += 1
            return copy.copy(values[key])

    def peek(self, key: K) -> V:
        """Return a copy of the stored value without computing; raise KeyError when absent."""
        with self._cell.borrow_read(key) as values:
            if key not in values:
                raise KeyError(f"{self.label}: no cached value for key {key!r}")
            return copy.copy(values[key])

    def __contains__(self, key: object) -> bool:
        with self._cell.borrow_read(key) as values:
            return key in values

    def __len__(self) -> int:
        with self._cell.borrow_read() as values:
            return len(values)
