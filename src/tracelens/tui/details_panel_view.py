"""Details area widget: drag handle plus the panel for the current selection.

The widget is a thin shell around tracelens.app.details_panel.DetailsPanel.
Composition and the resize state machine live there; this module only maps
mouse input onto it and paints the result.
"""

import dataclasses

from textual import events
from textual.widgets import Static

import tracelens.tui.panel_renderers
from tracelens.app.details_panel import DetailsPanel, PanelGeometry, PanelKind, has_logs


class DetailsPanelView(Static):
    """Resizable bottom panel. Row 0 is the drag handle."""

    DEFAULT_CSS = """
    DetailsPanelView {
        dock: bottom;
        padding: 0 1;
        background: $panel;
        color: $text;
    }
    """

    def __init__(self, registry, geometry: PanelGeometry, **kwargs):
        super().__init__("", **kwargs)
        self._registry = registry
        # Redraws resolve the scheduler lazily; the registry is initialized on app mount.
        self.panel = DetailsPanel(
            geometry,
            request_redraw=lambda: self._registry.redraw_scheduler.schedule_full_redraw(),
        )
        self._drag_origin_y: int | None = None
        self._moved = False
        self.display = False

    # ─── Painting ─────────────────────────────────────────────────────

    def refresh_from_registry(self) -> None:
        """Recompose from the current snapshot and repaint."""
        registry = self._registry
        view = self.panel.compose(
            registry.state.current_selection,
            lambda: has_logs(registry),
        )
        self.display = view.visible
        self.styles.height = view.height
        details = self._cached_details(view.panels[0].kind) if view.panels else None
        self.update(
            tracelens.tui.panel_renderers.render_details(
                view, self.panel.handle.icon, self.panel.handle.title, details
            )
        )

    def _cached_details(self, kind: PanelKind) -> dict | None:
        registry = self._registry
        if kind is PanelKind.SLICE or kind is PanelKind.CHROME_SLICE:
            return dataclasses.asdict(registry.slice_details)
        if kind is PanelKind.COUNTER:
            return dataclasses.asdict(registry.counter_details)
        if kind is PanelKind.HEAP_PROFILE:
            return dataclasses.asdict(registry.heap_profile_details)
        if kind is PanelKind.THREAD_STATE:
            selection = registry.state.current_selection
            thread = registry.threads.get(getattr(selection, "utid", None))
            if thread is not None:
                return {"thread": thread.thread_name, "tid": thread.tid, "process": thread.proc_name}
        return None

    # ─── Input ────────────────────────────────────────────────────────

    def toggle(self) -> None:
        self.panel.handle.on_toggle()

    def on_mouse_down(self, event: events.MouseDown) -> None:
        if event.y != 0:
            return
        self._drag_origin_y = event.screen_y
        self._moved = False
        self.panel.handle.on_drag_start()
        self.capture_mouse()
        event.stop()

    def on_mouse_move(self, event: events.MouseMove) -> None:
        if self._drag_origin_y is None:
            return
        dy = event.screen_y - self._drag_origin_y
        if dy == 0 and not self._moved:
            return
        self._moved = True
        self.panel.handle.on_drag(dy)

    def on_mouse_up(self, event: events.MouseUp) -> None:
        if self._drag_origin_y is None:
            return
        self._drag_origin_y = None
        self.panel.handle.on_drag_end()
        self.release_mouse()
        # A press and release without movement is a click on the handle.
        if not self._moved:
            self.toggle()
        event.stop()
