"""Panel rendering logic - pure functions building display text for the details area."""

from rich.text import Text

from tracelens.app.details_panel import DetailsView, PanelDescriptor, PanelKind


_PANEL_TITLES = {
    PanelKind.NOTES: "Note",
    PanelKind.SLICE: "Slice",
    PanelKind.COUNTER: "Counter",
    PanelKind.HEAP_PROFILE: "Heap profile",
    PanelKind.CHROME_SLICE: "Slice (chrome)",
    PanelKind.THREAD_STATE: "Thread state",
    PanelKind.LOGS: "Logs",
}


def _fmt_param(value) -> str:
    if isinstance(value, float):
        return "{:.6f}".format(value).rstrip("0").rstrip(".")
    return str(value)


def render_handle(icon: str, title: str) -> Text:
    """Render the drag handle row: label on the left, toggle icon on the right."""
    text = Text()
    text.append(" Current Selection ", style="bold")
    text.append(" {} ".format(icon), style="reverse")
    text.append(" {}".format(title), style="dim")
    return text


def render_panel(descriptor: PanelDescriptor, details: dict | None = None) -> Text:
    """Render one panel descriptor as a title line plus key/value rows.

    details: optional extra rows taken from the registry caches for this panel.
    """
    text = Text()
    text.append(_PANEL_TITLES.get(descriptor.kind, descriptor.kind.value), style="bold underline")
    rows = dict(descriptor.params)
    rows.update({k: v for k, v in (details or {}).items() if v is not None})
    for key, value in rows.items():
        text.append("\n")
        text.append("{:<12}".format(key), style="dim")
        text.append(_fmt_param(value))
    return text


def render_details(view: DetailsView, icon: str, title: str, details: dict | None = None) -> Text:
    text = render_handle(icon, title)
    for descriptor in view.panels:
        text.append("\n")
        text.append_text(render_panel(descriptor, details))
    return text


def render_status(
    start_sec: float,
    end_sec: float,
    omnibox: str,
    search_index: int,
    selection_label: str,
) -> Text:
    """Render the one-line status strip above the details area."""
    text = Text()
    text.append(" {}s – {}s ".format(_fmt_param(float(start_sec)), _fmt_param(float(end_sec))), style="bold")
    if omnibox:
        text.append(" search: {!r}".format(omnibox))
        if search_index >= 0:
            text.append(" #{}".format(search_index + 1), style="bold")
    text.append("  {}".format(selection_label or "no selection"), style="dim")
    return text
