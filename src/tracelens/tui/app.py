"""Textual host for the tracelens state core.

Thin coordinator: owns the Registry and the background worker, pumps frames
for the redraw scheduler, syncs local state at the sync rate, and routes
worker snapshots back onto the event loop.
"""

import logging
from collections.abc import Callable

from textual.app import App, ComposeResult
from textual.message import Message
from textual.widgets import Static

import tracelens.io.logging_setup
import tracelens.settings
import tracelens.tui.panel_renderers
from tracelens.app.analysis_worker import AnalysisWorker, BackgroundContext, SnapshotCallback
from tracelens.app.details_panel import PanelGeometry
from tracelens.app.registry import Registry, RegistryPhase
from tracelens.core import actions
from tracelens.core.actions import Action
from tracelens.core.state import ApplicationState
from tracelens.tui.details_panel_view import DetailsPanelView

logger = logging.getLogger(__name__)

# Fraction of the visible window moved by one pan key press.
PAN_STEP = 0.1
# Zoom factor applied by one zoom key press.
ZOOM_STEP = 0.8


class _SnapshotReady(Message, bubble=False):
    """Thread-safe bridge: worker thread → app message pump."""

    def __init__(self, snapshot: ApplicationState) -> None:
        self.snapshot = snapshot
        super().__init__()


class _LogRecordReady(Message, bubble=False):
    def __init__(self, level: str, text: str) -> None:
        self.level = level
        self.text = text
        super().__init__()


class TraceLensApp(App):
    """Interactive host for the trace state core."""

    BINDINGS = [
        ("escape", "deselect", "Deselect"),
        ("ctrl+d", "toggle_details", "Details"),
        ("a", "pan(-1)", "Pan left"),
        ("d", "pan(1)", "Pan right"),
        ("w", "zoom(1)", "Zoom in"),
        ("s", "zoom(-1)", "Zoom out"),
    ]

    def __init__(
        self,
        worker_factory: Callable[[SnapshotCallback], BackgroundContext] = AnalysisWorker,
        settings: tracelens.settings.RuntimeSettings | None = None,
        registry: Registry | None = None,
    ):
        super().__init__()
        self._settings = settings or tracelens.settings.load()
        self.registry = registry or Registry()
        # Worker callbacks may arrive on any thread; post_message is the only crossing.
        self._worker = worker_factory(lambda snapshot: self.post_message(_SnapshotReady(snapshot)))
        self._sync_timer = None
        self._in_app_log = None

    def compose(self) -> ComposeResult:
        yield Static("", id="status")
        yield DetailsPanelView(
            self.registry,
            PanelGeometry(
                handle_height=self._settings.handle_rows,
                default_height=self._settings.details_rows,
            ),
            id="details",
        )

    def on_mount(self) -> None:
        # The terminal belongs to the app now; warnings become notifications.
        self._in_app_log = tracelens.io.logging_setup.attach_in_app(
            lambda level, text: self.post_message(_LogRecordReady(level, text))
        )
        registry = self.registry
        registry.initialize(self._worker.post, self._worker, request_frame=self.call_later)
        scheduler = registry.redraw_scheduler
        scheduler.add_full_redraw_callback(self._details.refresh_from_registry)
        scheduler.add_redraw_callback(self._paint_status)
        registry.frontend_local_state.set_viewport_px(0, self.size.width)
        start = getattr(self._worker, "start", None)
        if start is not None:
            start()
        self._sync_timer = self.set_interval(
            1.0 / self._settings.sync_hz,
            registry.frontend_local_state.flush_pending_sync,
        )
        scheduler.schedule_full_redraw()

    def on_unmount(self) -> None:
        if self._sync_timer is not None:
            self._sync_timer.stop()
            self._sync_timer = None
        if self.registry.phase is RegistryPhase.INITIALIZED:
            self.registry.shutdown()
        if self._in_app_log is not None:
            tracelens.io.logging_setup.detach_in_app(self._in_app_log)
            self._in_app_log = None

    def on_resize(self, event) -> None:
        if self.registry.phase is RegistryPhase.INITIALIZED:
            self.registry.frontend_local_state.set_viewport_px(0, event.size.width)
            self.registry.redraw_scheduler.schedule_redraw()

    def _handle_exception(self, error: Exception) -> None:
        logger.error("unhandled exception in TUI: %s", error, exc_info=error)
        super()._handle_exception(error)

    @property
    def _details(self) -> DetailsPanelView:
        return self.query_one("#details", DetailsPanelView)

    # ─── Snapshot intake ──────────────────────────────────────────────

    def on__snapshot_ready(self, message: _SnapshotReady) -> None:
        # A snapshot may still be in flight when the app is closing.
        if self.registry.phase is not RegistryPhase.INITIALIZED:
            logger.debug("dropping snapshot after shutdown")
            return
        self.registry.apply_snapshot(message.snapshot)

    def on__log_record_ready(self, message: _LogRecordReady) -> None:
        severity = "error" if message.level in ("ERROR", "CRITICAL") else "warning"
        self.notify(message.text, severity=severity)

    # ─── Public entry points ──────────────────────────────────────────

    def select(self, action: Action) -> None:
        """Change the current selection (cancels the search highlight first)."""
        self.registry.make_selection(action)

    # ─── Painting ─────────────────────────────────────────────────────

    def _paint_status(self) -> None:
        registry = self.registry
        local = registry.frontend_local_state
        selection = registry.state.current_selection
        label = selection.kind.value.lower() if selection is not None else ""
        self.query_one("#status", Static).update(
            tracelens.tui.panel_renderers.render_status(
                local.visible_state.start_sec,
                local.visible_state.end_sec,
                local.omnibox_state.omnibox,
                local.search_index,
                label,
            )
        )

    # ─── Actions ──────────────────────────────────────────────────────

    def action_deselect(self) -> None:
        self.select(actions.deselect())

    def action_toggle_details(self) -> None:
        self._details.toggle()

    def action_pan(self, direction: int) -> None:
        local = self.registry.frontend_local_state
        vis = local.visible_state
        shift = (vis.end_sec - vis.start_sec) * PAN_STEP * direction
        local.update_visible_time(vis.start_sec + shift, vis.end_sec + shift)

    def action_zoom(self, direction: int) -> None:
        local = self.registry.frontend_local_state
        vis = local.visible_state
        center = (vis.start_sec + vis.end_sec) / 2
        factor = ZOOM_STEP if direction > 0 else 1 / ZOOM_STEP
        half = (vis.end_sec - vis.start_sec) * factor / 2
        local.update_visible_time(center - half, center + half)
