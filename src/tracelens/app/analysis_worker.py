"""Background analysis context.

Owns the reducer's copy of the authoritative state. Actions arrive on a
queue; each drained batch is reduced and published as one whole snapshot
through on_snapshot. on_snapshot runs on the worker thread; the host is
responsible for marshalling it onto the rendering context.

Delivery is at-most-once: an action whose handler raises is logged and
dropped, and the worker keeps running.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from typing import Protocol

from tracelens.core.actions import Action
from tracelens.core.reducer import apply_action
from tracelens.core.state import ApplicationState, create_empty_state
from tracelens.io.perf_logging import monitor_slow_path

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[ApplicationState], None]


class BackgroundContext(Protocol):
    """What the registry needs from a background context."""

    def post(self, action: Action) -> None:
        ...

    def terminate(self) -> None:
        ...


class _ReducerHost:
    def __init__(self, on_snapshot: SnapshotCallback, initial_state: ApplicationState | None = None):
        self._on_snapshot = on_snapshot
        self._state = initial_state if initial_state is not None else create_empty_state()
        self.published = 0

    @property
    def state(self) -> ApplicationState:
        return self._state

    def _apply_batch(self, batch: list[Action]) -> None:
        state = self._state
        with monitor_slow_path(
            "worker.reduce_batch",
            logger=logger,
            context=lambda: {"actions": len(batch)},
        ):
            for action in batch:
                try:
                    state = apply_action(state, action)
                except Exception:
                    logger.exception("dropping action %s", action.type)
        if state is self._state:
            return
        self._state = state
        self.published += 1
        try:
            self._on_snapshot(state)
        except Exception:
            logger.exception("snapshot consumer failed")


class AnalysisWorker(_ReducerHost):
    """Reducer running on a daemon thread."""

    def __init__(
        self,
        on_snapshot: SnapshotCallback,
        initial_state: ApplicationState | None = None,
        *,
        poll_interval: float = 0.1,
    ):
        super().__init__(on_snapshot, initial_state)
        self._queue: queue.Queue[Action] = queue.Queue()
        self._poll_interval = poll_interval
        self._closing = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="tracelens-worker", daemon=True)
        self._thread.start()

    def post(self, action: Action) -> None:
        self._queue.put(action)

    def _run(self) -> None:
        logger.debug("analysis worker started")
        while not self._closing.is_set():
            try:
                first = self._queue.get(timeout=self._poll_interval)
            except queue.Empty:
                continue
            batch = [first]
            # Everything already queued goes into the same snapshot.
            while True:
                try:
                    batch.append(self._queue.get_nowait())
                except queue.Empty:
                    break
            self._apply_batch(batch)
        logger.debug("analysis worker stopped after %d snapshots", self.published)

    def terminate(self, timeout: float = 2.0) -> None:
        self._closing.set()
        if self._thread is not None:
            self._thread.join(timeout)


class InlineWorker(_ReducerHost):
    """Synchronous stand-in: reduces and publishes inside post()."""

    def __init__(self, on_snapshot: SnapshotCallback, initial_state: ApplicationState | None = None):
        super().__init__(on_snapshot, initial_state)
        self.terminated = False

    def post(self, action: Action) -> None:
        self._apply_batch([action])

    def terminate(self) -> None:
        self.terminated = True
