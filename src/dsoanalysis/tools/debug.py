"""Phase timing for analysis passes."""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Callable, Iterator, MutableMapping, Optional

logger = logging.getLogger(__name__)

DEBUG_ENV_VAR = "DSOANALYSIS_DEBUG"
_TRUTHY = {"1", "true", "yes", "on"}


def debug_enabled() -> bool:
    """Return True when ``DSOANALYSIS_DEBUG`` asks for per-phase log lines."""
    return os.getenv(DEBUG_ENV_VAR, "").strip().lower() in _TRUTHY


@contextmanager
def time_block(
    label: str,
    *,
    timings: Optional[MutableMapping[str, float]] = None,
    emitter: Callable[[str], None] | None = None,
) -> Iterator[None]:
    """
    Time the enclosed block in milliseconds.

    The duration is stored under ``label`` in ``timings`` (accumulated when a
    label repeats) and, with debugging enabled, emitted as one log line.
    Without either consumer the block runs untimed.
    """
    verbose = debug_enabled()
    if timings is None and not verbose:
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        if timings is not None:
            timings[label] = timings.get(label, 0.0) + elapsed_ms
        if verbose:
            (emitter or logger.debug)(f"{label} took {elapsed_ms:.3f} ms")
