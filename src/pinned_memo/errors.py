"""Usage fault hierarchy.

Every fault here signals a violated calling contract, never bad data. Faults are
raised at the moment of violation and are not caught or retried inside the package.
"""

from __future__ import annotations

from typing import Any


class UsageFault(RuntimeError):
    """Base exception for calling-contract violations."""

    def __init__(self, message: str, *, key: Any = None, operation: str | None = None) -> None:
        super().__init__(message)
        self.key = key
        self.operation = operation


class BorrowError(UsageFault):
    """A conflicting view was requested on a single-writer cell."""


class ReentrantComputeError(BorrowError):
    """A compute function re-entered ``get`` for the key it is computing."""


class NotPopulatedError(UsageFault):
    """A key was retrieved before it was populated."""
