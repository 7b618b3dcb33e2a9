"""Frame-coalescing redraw scheduler.

Any number of redraw requests between two frames produce exactly one frame.
The host supplies request_frame, which must run the given callback once on
the rendering context at the next tick (Textual: App.call_later).

// [LAW:single-enforcer] _on_frame is the only place redraw callbacks run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from tracelens.io.perf_logging import monitor_slow_path

logger = logging.getLogger(__name__)

RequestFrame = Callable[[Callable[[], None]], object]


class FrameQueue:
    """request_frame for hosts without an event loop: frames run when pumped."""

    def __init__(self):
        self._pending: list[Callable[[], None]] = []

    def __len__(self) -> int:
        return len(self._pending)

    def request(self, cb: Callable[[], None]) -> None:
        self._pending.append(cb)

    def run_pending(self) -> int:
        """Run the callbacks queued so far. Returns how many ran."""
        pending, self._pending = self._pending, []
        for cb in pending:
            cb()
        return len(pending)


class RedrawScheduler:
    def __init__(self, request_frame: RequestFrame):
        self._request_frame = request_frame
        self._redraw_callbacks: list[Callable[[], None]] = []
        self._full_redraw_callbacks: list[Callable[[], None]] = []
        self._frame_pending = False
        self._full_redraw_pending = False
        self._stopped = False
        self.frame_count = 0

    @property
    def frame_pending(self) -> bool:
        return self._frame_pending

    @property
    def is_shut_down(self) -> bool:
        return self._stopped

    def add_redraw_callback(self, cb: Callable[[], None]) -> None:
        self._redraw_callbacks.append(cb)

    def remove_redraw_callback(self, cb: Callable[[], None]) -> None:
        if cb in self._redraw_callbacks:
            self._redraw_callbacks.remove(cb)

    def add_full_redraw_callback(self, cb: Callable[[], None]) -> None:
        self._full_redraw_callbacks.append(cb)

    def remove_full_redraw_callback(self, cb: Callable[[], None]) -> None:
        if cb in self._full_redraw_callbacks:
            self._full_redraw_callbacks.remove(cb)

    def schedule_redraw(self) -> None:
        """Repaint the time-dependent views on the next frame."""
        self._schedule()

    def schedule_full_redraw(self) -> None:
        """Recompose everything (panels included) on the next frame."""
        self._full_redraw_pending = True
        self._schedule()

    def _schedule(self) -> None:
        if self._stopped or self._frame_pending:
            return
        self._frame_pending = True
        self._request_frame(self._on_frame)

    def _on_frame(self) -> None:
        if self._stopped:
            return
        full = self._full_redraw_pending
        self._frame_pending = False
        self._full_redraw_pending = False
        self.frame_count += 1
        with monitor_slow_path(
            "frontend.redraw_frame",
            logger=logger,
            context=lambda: {"full": full, "frame": self.frame_count},
        ):
            if full:
                for cb in list(self._full_redraw_callbacks):
                    cb()
            for cb in list(self._redraw_callbacks):
                cb()

    def shutdown(self) -> None:
        """Stop producing frames. A frame already requested becomes a no-op."""
        self._stopped = True
        self._frame_pending = False
        self._full_redraw_pending = False
        self._redraw_callbacks.clear()
        self._full_redraw_callbacks.clear()
        logger.debug("redraw scheduler stopped after %d frames", self.frame_count)
