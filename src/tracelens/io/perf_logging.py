"""Slow-path warnings for the frame loop and the reducer.

// [LAW:one-source-of-truth] Stage budgets live in SLOW_STAGE_THRESHOLDS_MS.
// [LAW:single-enforcer] Over-budget diagnostics are emitted only by monitor_slow_path().
"""

from __future__ import annotations

import logging
import sys
import threading
import time
import traceback
from collections.abc import Callable, Mapping
from contextlib import contextmanager
from typing import Any

# One frame at 60 Hz is ~16 ms; a frame over budget shows up as input lag.
SLOW_STAGE_THRESHOLDS_MS: dict[str, float] = {
    "frontend.redraw_frame": 16.0,
    "frontend.apply_snapshot": 16.0,
    "worker.reduce_batch": 100.0,
}
DEFAULT_THRESHOLD_MS = 250.0

Context = Mapping[str, Any] | Callable[[], Mapping[str, Any]] | None


def _describe(context: Context) -> str:
    # Lazy contexts are only evaluated once a stage is actually slow.
    values = context() if callable(context) else (context or {})
    return " ".join(f"{key}={values[key]!r}" for key in sorted(values))


def _other_threads() -> str:
    """Stacks of every thread but the caller's; a slow frame is often waiting on one."""
    names = {t.ident: t.name for t in threading.enumerate()}
    current = threading.get_ident()
    chunks = []
    for ident, frame in sys._current_frames().items():
        if ident == current:
            continue
        chunks.append(f"\n--- thread={names.get(ident, '?')} ---\n")
        chunks.extend(traceback.format_stack(frame, limit=20))
    return "".join(chunks)


@contextmanager
def monitor_slow_path(
    stage: str,
    *,
    logger: logging.Logger,
    context: Context = None,
    threshold_ms: float | None = None,
):
    """Warn with the caller's stack when the wrapped block exceeds its budget.

    Blocks over twice the budget also log the other threads' stacks.
    """
    budget = SLOW_STAGE_THRESHOLDS_MS.get(stage, DEFAULT_THRESHOLD_MS) if threshold_ms is None else threshold_ms
    started = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        if elapsed_ms >= budget:
            threads = _other_threads() if elapsed_ms >= 2 * budget else ""
            logger.warning(
                "perf threshold exceeded stage=%s elapsed_ms=%.2f threshold_ms=%.2f context=%s\n%s%s",
                stage,
                elapsed_ms,
                budget,
                _describe(context),
                "".join(traceback.format_stack(limit=30)),
                f"\nother threads:{threads}" if threads else "",
            )
