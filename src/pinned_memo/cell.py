"""Runtime-checked single-writer cell."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock
from typing import Generic, TypeVar

from pinned_memo.errors import BorrowError
from pinned_memo.log import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


class SingleWriterCell(Generic[T]):
    """Hold one mutable object and hand out checked read/write views of it.

    Any number of read views may be active together; a write view excludes all
    other views. A conflicting request raises :class:`BorrowError` immediately
    instead of blocking, so re-entrant misuse is reported rather than deadlocked.
    """

    def __init__(self, value: T, label: str = "cell") -> None:
        self._value = value
        self._label = label
        self._lock = Lock()
        self._readers = 0
        self._writing = False

    @property
    def label(self) -> str:
        return self._label

    @property
    def readers(self) -> int:
        """Number of read views currently active."""
        return self._readers

    @property
    def is_borrowed(self) -> bool:
        """True while any view is active."""
        return self._writing or self._readers > 0

    def _conflict(self, operation: str, key: object) -> BorrowError:
        active = "write" if self._writing else f"{self._readers} read"
        message = (
            f"{self._label}: cannot acquire {operation} view for key {key!r}; "
            f"{active} view already active"
        )
        logger.warning("usage_fault", cell=self._label, operation=operation, key=repr(key))
        return BorrowError(message, key=key, operation=operation)

    @contextmanager
    def borrow_read(self, key: object = None) -> Iterator[T]:
        """Yield a shared view. ``key`` only labels the diagnostic on conflict."""
        with self._lock:
            if self._writing:
                raise self._conflict("read", key)
            self._readers += 1
        try:
            yield self._value
        finally:
            with self._lock:
                self._readers -= 1

    @contextmanager
    def borrow_write(self, key: object = None) -> Iterator[T]:
        """Yield an exclusive view. ``key`` only labels the diagnostic on conflict."""
        with self._lock:
            if self._writing or self._readers:
                raise self._conflict("write", key)
            self._writing = True
        try:
            yield self._value
        finally:
            with self._lock:
                self._writing = False
