"""Elapsed-time logging for named blocks."""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager

from pinned_memo.config import timing_enabled_from_env
from pinned_memo.log import get_logger

logger = get_logger(__name__)


@contextmanager
def block_timer(label: str, enabled: bool | None = None) -> Iterator[None]:
    """Log how long the enclosed block took.

    When ``enabled`` is None the PINNED_MEMO_TIMING environment flag decides.
    The duration is logged even when the block raises.
    """
    if enabled is None:
        enabled = timing_enabled_from_env()
    if not enabled:
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.debug("block_timer", label=label, elapsed_ms=round(elapsed_ms, 3))
