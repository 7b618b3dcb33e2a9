"""Details panel composition and resize state machine.

Maps the current selection to zero or one panel descriptor and owns the
panel height, manipulated by dragging the handle, clicking its toggle, and
auto-expansion when a panel first appears.

    visibility:  hidden ──(panel appears, height ≤ handle)──▶ shown @ default height
                 shown  ──(panel appears again)──────────────▶ shown @ same height
                 shown  ──(no panel)─────────────────────────▶ hidden, height kept

// [LAW:one-source-of-truth] _PANEL_BUILDERS is the selection → panel mapping; its
//   completeness over SelectionKind is checked at import.
// [LAW:one-way-deps] Pure state; widgets live in tracelens.tui.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from tracelens.app.details_cache import LOG_EXISTS_KEY
from tracelens.core.state import Selection, SelectionKind

UP_ICON = "▲"
DOWN_ICON = "▼"


@dataclass(frozen=True)
class PanelGeometry:
    """Panel sizes in terminal rows; default_height includes the handle."""

    handle_height: int = 2
    default_height: int = 14


class PanelKind(Enum):
    NOTES = "notes"
    SLICE = "slice"
    COUNTER = "counter"
    HEAP_PROFILE = "heap_profile"
    CHROME_SLICE = "chrome_slice"
    THREAD_STATE = "thread_state"
    LOGS = "logs"


@dataclass(frozen=True)
class PanelDescriptor:
    """What to construct; the panel widget itself is an external collaborator."""

    kind: PanelKind
    key: str
    params: dict = field(default_factory=dict)


# ─── Selection → panel ────────────────────────────────────────────────────────


def _notes_panel(sel) -> PanelDescriptor:
    return PanelDescriptor(PanelKind.NOTES, "notes", {"id": sel.id})


def _slice_panel(sel) -> PanelDescriptor:
    return PanelDescriptor(PanelKind.SLICE, "slice", {"id": sel.id})


def _counter_panel(sel) -> PanelDescriptor:
    return PanelDescriptor(
        PanelKind.COUNTER,
        "counter",
        {"id": sel.id, "left_ts": sel.left_ts, "right_ts": sel.right_ts},
    )


def _heap_profile_panel(sel) -> PanelDescriptor:
    return PanelDescriptor(
        PanelKind.HEAP_PROFILE,
        "heap_profile",
        {"id": sel.id, "upid": sel.upid, "ts": sel.ts},
    )


def _chrome_slice_panel(sel) -> PanelDescriptor:
    return PanelDescriptor(PanelKind.CHROME_SLICE, "chrome_slice", {"id": sel.id})


def _thread_state_panel(sel) -> PanelDescriptor:
    return PanelDescriptor(
        PanelKind.THREAD_STATE,
        "thread_state",
        {"ts": sel.ts, "dur": sel.dur, "utid": sel.utid, "state": sel.state, "cpu": sel.cpu},
    )


_PANEL_BUILDERS: dict[SelectionKind, Callable[..., PanelDescriptor]] = {
    SelectionKind.NOTE: _notes_panel,
    SelectionKind.SLICE: _slice_panel,
    SelectionKind.COUNTER: _counter_panel,
    SelectionKind.HEAP_PROFILE: _heap_profile_panel,
    SelectionKind.CHROME_SLICE: _chrome_slice_panel,
    SelectionKind.THREAD_STATE: _thread_state_panel,
}

_missing = set(SelectionKind) - set(_PANEL_BUILDERS)
if _missing:
    raise ImportError(
        "details panel has no builder for selection kinds: "
        + ", ".join(sorted(k.name for k in _missing))
    )
del _missing

LOG_PANEL = PanelDescriptor(PanelKind.LOGS, "logs")


def panels_for_selection(
    selection: Selection | None,
    has_logs: Callable[[], bool],
) -> tuple[PanelDescriptor, ...]:
    """Zero or one panel for the current selection.

    has_logs is only consulted when nothing is selected. Values that are not a
    known selection variant produce no panel.
    """
    if selection is None:
        return (LOG_PANEL,) if has_logs() else ()
    builder = _PANEL_BUILDERS.get(getattr(selection, "kind", None))
    if builder is None:
        return ()
    return (builder(selection),)


def has_logs(registry) -> bool:
    data = registry.track_data_store.get(LOG_EXISTS_KEY)
    return bool(data is not None and getattr(data, "exists", False))


# ─── Drag handle ──────────────────────────────────────────────────────────────


class DragHandle:
    """Gesture state for the handle on top of the details panel.

    Heights flow out through resize(); the owner clamps and stores them and
    feeds the stored height back with sync().
    """

    def __init__(
        self,
        geometry: PanelGeometry,
        resize: Callable[[int], None],
        request_redraw: Callable[[], None],
    ):
        self._geometry = geometry
        self._resize = resize
        self._request_redraw = request_redraw
        self.height = geometry.handle_height
        self.drag_start_height = 0
        self.is_closed = True
        self.dragging = False

    def sync(self, height: int) -> None:
        self.height = height
        self.is_closed = height <= self._geometry.handle_height

    def on_drag_start(self) -> None:
        self.dragging = True
        self.drag_start_height = self.height

    def on_drag(self, dy: float) -> None:
        """dy: pointer movement since drag start, positive = downward."""
        handle = self._geometry.handle_height
        new_height = math.floor(self.drag_start_height + handle / 2 - dy)
        self.is_closed = new_height <= handle
        self._resize(new_height)
        self._request_redraw()

    def on_drag_end(self) -> None:
        self.dragging = False

    def on_toggle(self) -> None:
        if self.height == self._geometry.handle_height:
            self.is_closed = False
            self._resize(self._geometry.default_height)
        else:
            self.is_closed = True
            self._resize(self._geometry.handle_height)
        self._request_redraw()

    @property
    def icon(self) -> str:
        return UP_ICON if self.is_closed else DOWN_ICON

    @property
    def title(self) -> str:
        return "Show panel" if self.is_closed else "Hide panel"


# ─── Panel ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class DetailsView:
    """Result of one composition pass."""

    panels: tuple[PanelDescriptor, ...]
    height: int
    visible: bool
    handle_closed: bool


class DetailsPanel:
    def __init__(
        self,
        geometry: PanelGeometry | None = None,
        request_redraw: Callable[[], None] = lambda: None,
    ):
        self.geometry = geometry or PanelGeometry()
        self.height = self.geometry.handle_height
        # Whether the previous composition showed a panel; drives auto-expand.
        self.showing = False
        self.handle = DragHandle(self.geometry, self.resize, request_redraw)
        self.handle.sync(self.height)

    def resize(self, height: int) -> None:
        self.height = max(int(height), self.geometry.handle_height)
        self.handle.sync(self.height)

    def collapse(self) -> None:
        """Shrink to the bare handle. No-op when already there."""
        self.resize(self.geometry.handle_height)

    def expand(self) -> None:
        self.resize(self.geometry.default_height)

    def compose(
        self,
        selection: Selection | None,
        has_logs: Callable[[], bool],
    ) -> DetailsView:
        panels = panels_for_selection(selection, has_logs)
        was_showing = self.showing
        self.showing = len(panels) > 0
        # Pop the panel open on the first selection.
        if not was_showing and self.showing and self.height <= self.geometry.handle_height:
            self.height = self.geometry.default_height
        self.handle.sync(self.height)
        return DetailsView(
            panels=panels,
            height=self.height,
            visible=self.showing,
            handle_closed=self.handle.is_closed,
        )
