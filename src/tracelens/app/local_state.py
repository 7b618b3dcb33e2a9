"""UI-local high-frequency state.

Holds the groups that must follow continuous input (drag-to-pan, drag-to-zoom,
live omnibox typing) without waiting for a worker round trip. Writes are
synchronous and stamped; the stamped groups travel to the worker at the sync
rate and come back inside snapshots, where merge() keeps whichever copy is
fresher.

Only the rendering context touches this object.

// [LAW:one-source-of-truth] timestamped.merge is the reconciliation rule; no per-field special cases.
// [LAW:dataflow-not-control-flow] Malformed input is clamped, never rejected.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from enum import Enum

from tracelens.app.redraw_scheduler import RedrawScheduler
from tracelens.app.time_scale import TimeScale, TimeSpan
from tracelens.core import actions
from tracelens.core.actions import Action
from tracelens.core.timestamped import (
    OmniboxMode,
    OmniboxState,
    SelectedTimeRange,
    SyncedViewState,
    Timestamped,
    VisibleState,
    merge,
    stamp,
)

logger = logging.getLogger(__name__)

# Narrowest visible window, in seconds.
MIN_VISIBLE_DURATION = 1e-9


class LocalGroup(Enum):
    """Timestamped groups owned by FrontendLocalState; value is the attribute name."""

    OMNIBOX = "omnibox_state"
    VISIBLE_WINDOW = "visible_state"
    SELECTED_TIME_RANGE = "selected_time_range"


_GROUP_TYPES: dict[LocalGroup, type[Timestamped]] = {
    LocalGroup.OMNIBOX: OmniboxState,
    LocalGroup.VISIBLE_WINDOW: VisibleState,
    LocalGroup.SELECTED_TIME_RANGE: SelectedTimeRange,
}


def _clamp(group: LocalGroup, value):
    if group is LocalGroup.VISIBLE_WINDOW:
        end = max(value.end_sec, value.start_sec + MIN_VISIBLE_DURATION)
        resolution = max(0.0, value.resolution)
        if end != value.end_sec or resolution != value.resolution:
            return stamp(value, value.last_update, end_sec=end, resolution=resolution)
        return value
    if group is LocalGroup.SELECTED_TIME_RANGE:
        if value.start_sec is not None and value.end_sec is not None and value.end_sec < value.start_sec:
            return stamp(value, value.last_update, end_sec=value.start_sec)
        return value
    return value


class FrontendLocalState:
    def __init__(
        self,
        redraw: RedrawScheduler,
        dispatch: Callable[[Action], None],
        clock: Callable[[], float] = time.time,
    ):
        self._redraw = redraw
        self._dispatch = dispatch
        self._clock = clock
        self.omnibox_state = OmniboxState()
        self.visible_state = VisibleState()
        self.selected_time_range = SelectedTimeRange()
        # Index into the current search results; -1 = no highlighted match.
        self.search_index = -1
        self.time_scale = TimeScale(
            TimeSpan(self.visible_state.start_sec, self.visible_state.end_sec)
        )
        # Groups written since the last sync, in first-write order.
        self._pending_sync: dict[LocalGroup, None] = {}

    # ─── Group access ─────────────────────────────────────────────────

    def read(self, group: LocalGroup):
        return getattr(self, group.value)

    def write(self, group: LocalGroup, value) -> None:
        expected = _GROUP_TYPES[group]
        if not isinstance(value, expected):
            raise TypeError(f"{group.name} expects {expected.__name__}, got {type(value).__name__}")
        current = self.read(group)
        # Stamps never go backwards, even if the wall clock does.
        stamped = stamp(value, max(self._clock(), current.last_update))
        stamped = _clamp(group, stamped)
        setattr(self, group.value, stamped)
        if group is LocalGroup.VISIBLE_WINDOW:
            self._sync_time_scale()
        self._pending_sync[group] = None
        self._redraw.schedule_redraw()

    # ─── Convenience writers ──────────────────────────────────────────

    def update_visible_time(self, start_sec: float, end_sec: float, resolution: float | None = None) -> None:
        """Move the visible window.

        Without an explicit resolution, the window carries the duration of one
        cell at the current viewport width.
        """
        if resolution is None:
            resolution = self._resolution_for(start_sec, end_sec)
        self.write(
            LocalGroup.VISIBLE_WINDOW,
            VisibleState(start_sec=start_sec, end_sec=end_sec, resolution=resolution),
        )

    def cur_resolution(self) -> float:
        vis = self.visible_state
        return self._resolution_for(vis.start_sec, vis.end_sec)

    def _resolution_for(self, start_sec: float, end_sec: float) -> float:
        # Truncated to a power of two so it only changes every few zoom steps.
        width = self.time_scale.end_px - self.time_scale.start_px
        if width <= 0 or end_sec <= start_sec:
            return 0.0
        return math.pow(2, math.floor(math.log2((end_sec - start_sec) / width)))

    def set_omnibox(self, text: str, mode: OmniboxMode = OmniboxMode.SEARCH) -> None:
        previous = self.omnibox_state
        self.write(LocalGroup.OMNIBOX, OmniboxState(omnibox=text, mode=mode))
        if mode is OmniboxMode.SEARCH and text and text != previous.omnibox:
            # A new search starts with nothing highlighted and nothing selected.
            self.search_index = -1
            self._dispatch(actions.deselect())

    def select_time_range(self, start_sec: float | None, end_sec: float | None) -> None:
        self.write(
            LocalGroup.SELECTED_TIME_RANGE,
            SelectedTimeRange(start_sec=start_sec, end_sec=end_sec),
        )

    def clear_selected_time_range(self) -> None:
        self.select_time_range(None, None)

    def set_search_index(self, index: int) -> None:
        self.search_index = max(-1, int(index))
        self._redraw.schedule_redraw()

    # ─── Synchronization ──────────────────────────────────────────────

    def reconcile_with_authoritative(self, synced: SyncedViewState) -> bool:
        """Adopt each incoming group only if it is strictly fresher than ours."""
        changed = False
        for group in LocalGroup:
            local = self.read(group)
            incoming = getattr(synced, group.value)
            winner = merge(local, incoming)
            if winner is not local:
                setattr(self, group.value, winner)
                changed = True
                if group is LocalGroup.VISIBLE_WINDOW:
                    self._sync_time_scale()
            elif incoming.last_update < local.last_update:
                logger.debug(
                    "stale %s discarded local=%.6f incoming=%.6f",
                    group.value, local.last_update, incoming.last_update,
                )
        if changed:
            self._redraw.schedule_redraw()
        return changed

    def has_pending_sync(self) -> bool:
        return bool(self._pending_sync)

    def flush_pending_sync(self) -> int:
        """Send every group written since the last flush to the worker.

        Called by the host at the sync rate. Returns the number of actions sent.
        """
        groups = list(self._pending_sync)
        self._pending_sync.clear()
        for group in groups:
            self._dispatch(actions.update_local_group(self.read(group)))
        return len(groups)

    # ─── View transform ───────────────────────────────────────────────

    def set_viewport_px(self, start_px: float, end_px: float) -> None:
        self.time_scale.set_limits_px(start_px, end_px)

    def _sync_time_scale(self) -> None:
        vis = self.visible_state
        self.time_scale.set_time_bounds(TimeSpan(vis.start_sec, vis.end_sec))
