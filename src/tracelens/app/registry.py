"""Registry: the one object the rendering layer reads shared state through.

Holds the authoritative snapshot, the dispatch function, the local-state
container, the redraw scheduler and the auxiliary caches. It is an explicit
object passed to whoever needs it; there is no module-level instance.

Lifecycle: UNINITIALIZED → INITIALIZED → SHUT_DOWN. Outside INITIALIZED every
accessor raises a RegistryLifecycleError instead of returning a default, so a
component used too early or too late fails at the call site.

// [LAW:single-enforcer] apply_snapshot is the only sanctioned writer of the snapshot.
// [LAW:one-way-deps] No widget imports.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import Enum

from tracelens.app.analysis_worker import BackgroundContext
from tracelens.app.details_cache import (
    CounterDetails,
    CurrentSearchResults,
    HeapProfileDetails,
    QuantizedLoad,
    SearchSummary,
    SliceDetails,
    ThreadDesc,
)
from tracelens.app.local_state import FrontendLocalState
from tracelens.app.redraw_scheduler import FrameQueue, RedrawScheduler, RequestFrame
from tracelens.core.actions import Action
from tracelens.core.state import ApplicationState, create_empty_state
from tracelens.io.perf_logging import monitor_slow_path

logger = logging.getLogger(__name__)

Dispatch = Callable[[Action], None]


class RegistryPhase(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    SHUT_DOWN = "shut_down"


class RegistryLifecycleError(RuntimeError):
    """Registry used outside its initialized phase."""


class RegistryNotInitializedError(RegistryLifecycleError):
    pass


class RegistryShutDownError(RegistryLifecycleError):
    pass


class Registry:
    def __init__(self):
        self._phase = RegistryPhase.UNINITIALIZED
        self._dispatch: Dispatch | None = None
        self._worker: BackgroundContext | None = None
        self._state: ApplicationState | None = None
        self._frontend_local_state: FrontendLocalState | None = None
        self._redraw_scheduler: RedrawScheduler | None = None
        self._frame_queue: FrameQueue | None = None

        # Caches outside the synchronized snapshot. Unbounded for the session.
        self._track_data_store: dict[str, object] | None = None
        self._query_results: dict[str, object] | None = None
        self._overview_store: dict[str, list[QuantizedLoad]] | None = None
        self._threads: dict[int, ThreadDesc] | None = None
        self._slice_details: SliceDetails | None = None
        self._counter_details: CounterDetails | None = None
        self._heap_profile_details: HeapProfileDetails | None = None
        self._current_search_results: CurrentSearchResults | None = None
        self._search_summary: SearchSummary | None = None
        self._loading = False
        self._buffer_usage: float | None = None

    # ─── Lifecycle ────────────────────────────────────────────────────

    @property
    def phase(self) -> RegistryPhase:
        return self._phase

    def initialize(
        self,
        dispatch: Dispatch,
        worker: BackgroundContext,
        *,
        request_frame: RequestFrame | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Allocate the empty snapshot, local state, scheduler and caches.

        request_frame runs a callback on the next rendering tick. Without one,
        frames queue on frame_queue until pumped.
        """
        if self._phase is RegistryPhase.INITIALIZED:
            raise RegistryLifecycleError("Registry.initialize() called twice")
        if self._phase is RegistryPhase.SHUT_DOWN:
            raise RegistryShutDownError("Registry.initialize() called after shutdown()")

        if request_frame is None:
            self._frame_queue = FrameQueue()
            request_frame = self._frame_queue.request

        self._dispatch = dispatch
        self._worker = worker
        self._state = create_empty_state()
        self._redraw_scheduler = RedrawScheduler(request_frame)
        self._frontend_local_state = FrontendLocalState(
            self._redraw_scheduler, dispatch, clock=clock
        )
        self._track_data_store = {}
        self._query_results = {}
        self._overview_store = {}
        self._threads = {}
        self._slice_details = SliceDetails()
        self._counter_details = CounterDetails()
        self._heap_profile_details = HeapProfileDetails()
        self._current_search_results = CurrentSearchResults()
        self._search_summary = SearchSummary()
        self._phase = RegistryPhase.INITIALIZED
        logger.debug("registry initialized")

    def shutdown(self) -> None:
        """Terminate the background context and stop the redraw scheduler.

        Not idempotent: a second call raises.
        """
        if self._phase is RegistryPhase.SHUT_DOWN:
            raise RegistryShutDownError("Registry.shutdown() called twice")
        if self._phase is RegistryPhase.UNINITIALIZED:
            raise RegistryNotInitializedError("Registry.shutdown() called before initialize()")
        self._phase = RegistryPhase.SHUT_DOWN
        try:
            self._worker.terminate()
        finally:
            self._redraw_scheduler.shutdown()
        logger.debug("registry shut down")

    def _require(self, name: str):
        # [LAW:single-enforcer] Every guarded accessor goes through here.
        if self._phase is RegistryPhase.UNINITIALIZED:
            raise RegistryNotInitializedError(f"Registry.{name} accessed before initialize()")
        if self._phase is RegistryPhase.SHUT_DOWN:
            raise RegistryShutDownError(f"Registry.{name} accessed after shutdown()")
        return getattr(self, "_" + name)

    # ─── Authoritative state ──────────────────────────────────────────

    @property
    def state(self) -> ApplicationState:
        return self._require("state")

    @state.setter
    def state(self, snapshot: ApplicationState) -> None:
        self._require("state")
        if not isinstance(snapshot, ApplicationState):
            raise TypeError(f"snapshot must be ApplicationState, got {type(snapshot).__name__}")
        self._state = snapshot

    def apply_snapshot(self, snapshot: ApplicationState) -> None:
        """Install a snapshot from the background context.

        Replaces the snapshot wholesale, reconciles the local groups with the
        copies it carries, then asks for a full redraw.
        """
        with monitor_slow_path("frontend.apply_snapshot", logger=logger):
            self.state = snapshot
            self.frontend_local_state.reconcile_with_authoritative(snapshot.frontend_local_state)
            self.redraw_scheduler.schedule_full_redraw()

    def dispatch(self, action: Action) -> None:
        """Forward a mutation request. Never mutates state here."""
        self._require("dispatch")(action)

    def make_selection(self, action: Action) -> None:
        """Cancel the search highlight, then dispatch the selection change.

        The cancel happens before dispatch so a stale highlight never renders
        next to the newly selected item.
        """
        self.frontend_local_state.set_search_index(-1)
        self.dispatch(action)

    # ─── Rendering-context objects ────────────────────────────────────

    @property
    def frontend_local_state(self) -> FrontendLocalState:
        return self._require("frontend_local_state")

    @property
    def redraw_scheduler(self) -> RedrawScheduler:
        return self._require("redraw_scheduler")

    @property
    def frame_queue(self) -> FrameQueue | None:
        """Pending frames when initialize() got no request_frame, else None."""
        self._require("redraw_scheduler")
        return self._frame_queue

    def get_cur_resolution(self) -> float:
        """Duration of one cell, truncated to a power of two.

        Changes only every few zoom levels, which keeps cached track data valid
        while zooming.
        """
        return self.frontend_local_state.cur_resolution()

    # ─── Auxiliary caches ─────────────────────────────────────────────

    @property
    def track_data_store(self) -> dict[str, object]:
        return self._require("track_data_store")

    def set_track_data(self, track_id: str, data: object) -> None:
        self.track_data_store[track_id] = data

    @property
    def query_results(self) -> dict[str, object]:
        return self._require("query_results")

    @property
    def overview_store(self) -> dict[str, list[QuantizedLoad]]:
        return self._require("overview_store")

    @property
    def threads(self) -> dict[int, ThreadDesc]:
        return self._require("threads")

    @property
    def slice_details(self) -> SliceDetails:
        return self._require("slice_details")

    @slice_details.setter
    def slice_details(self, details: SliceDetails) -> None:
        self._require("slice_details")
        self._slice_details = details

    @property
    def counter_details(self) -> CounterDetails:
        return self._require("counter_details")

    @counter_details.setter
    def counter_details(self, details: CounterDetails) -> None:
        self._require("counter_details")
        self._counter_details = details

    @property
    def heap_profile_details(self) -> HeapProfileDetails:
        return self._require("heap_profile_details")

    @heap_profile_details.setter
    def heap_profile_details(self, details: HeapProfileDetails) -> None:
        self._require("heap_profile_details")
        self._heap_profile_details = details

    @property
    def current_search_results(self) -> CurrentSearchResults:
        return self._require("current_search_results")

    @current_search_results.setter
    def current_search_results(self, results: CurrentSearchResults) -> None:
        self._require("current_search_results")
        self._current_search_results = results

    @property
    def search_summary(self) -> SearchSummary:
        return self._require("search_summary")

    @search_summary.setter
    def search_summary(self, summary: SearchSummary) -> None:
        self._require("search_summary")
        self._search_summary = summary

    @property
    def loading(self) -> bool:
        return self._require("loading")

    @loading.setter
    def loading(self, is_loading: bool) -> None:
        self._require("loading")
        self._loading = bool(is_loading)

    @property
    def buffer_usage(self) -> float | None:
        return self._require("buffer_usage")

    def set_buffer_usage(self, usage: float) -> None:
        self._require("buffer_usage")
        self._buffer_usage = usage
