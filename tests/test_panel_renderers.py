"""Tests for the pure details-area renderers."""

from tracelens.app.details_panel import DOWN_ICON, DetailsView, PanelDescriptor, PanelKind
from tracelens.tui.panel_renderers import render_details, render_handle, render_panel, render_status


def test_handle_shows_icon_and_title():
    text = render_handle(DOWN_ICON, "Hide panel").plain
    assert "Current Selection" in text
    assert DOWN_ICON in text
    assert "Hide panel" in text


def test_panel_lists_params_and_cached_details():
    descriptor = PanelDescriptor(PanelKind.SLICE, "slice", {"id": 42})
    text = render_panel(descriptor, {"name": "draw", "cpu": None}).plain

    assert text.splitlines()[0] == "Slice"
    assert "42" in text
    assert "draw" in text
    assert "cpu" not in text


def test_details_without_panels_is_only_the_handle():
    view = DetailsView(panels=(), height=2, visible=False, handle_closed=True)
    assert render_details(view, "▲", "Show panel").plain.count("\n") == 0


def test_status_line():
    text = render_status(1.0, 11.5, "needle", 2, "slice").plain
    assert "1s – 11.5s" in text
    assert "search: 'needle'" in text
    assert "#3" in text
    assert "slice" in text


def test_status_without_selection():
    assert "no selection" in render_status(0.0, 10.0, "", -1, "").plain
