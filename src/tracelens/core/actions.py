"""Mutation requests: a named intent plus payload.

Callers never mutate ApplicationState; they build an Action here and hand it
to Registry.dispatch(). The reducer owns the meaning of each type.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from tracelens.core.timestamped import OmniboxState, SelectedTimeRange, VisibleState


@dataclass(frozen=True)
class Action:
    type: str
    args: dict = field(default_factory=dict)


# ─── Selection ────────────────────────────────────────────────────────────────


def select_note(id: str) -> Action:
    return Action("select_note", {"id": id})


def select_slice(id: int) -> Action:
    return Action("select_slice", {"id": id})


def select_counter(left_ts: float, right_ts: float, id: int) -> Action:
    return Action("select_counter", {"left_ts": left_ts, "right_ts": right_ts, "id": id})


def select_heap_profile(id: int, upid: int, ts: float) -> Action:
    return Action("select_heap_profile", {"id": id, "upid": upid, "ts": ts})


def select_chrome_slice(id: int) -> Action:
    return Action("select_chrome_slice", {"id": id})


def select_thread_state(utid: int, ts: float, dur: float, state: str, cpu: int) -> Action:
    return Action(
        "select_thread_state",
        # "state" would shadow the reducer's snapshot argument.
        {"utid": utid, "ts": ts, "dur": dur, "state_label": state, "cpu": cpu},
    )


def deselect() -> Action:
    return Action("deselect")


# ─── Tracks ───────────────────────────────────────────────────────────────────


def add_track(
    id: str,
    engine_id: str,
    kind: str,
    name: str,
    track_group: str | None = None,
    config: dict | None = None,
) -> Action:
    return Action(
        "add_track",
        {
            "id": id,
            "engine_id": engine_id,
            "kind": kind,
            "name": name,
            "track_group": track_group,
            "config": dict(config or {}),
        },
    )


def add_track_group(
    id: str,
    engine_id: str,
    name: str,
    summary_track_id: str,
    collapsed: bool = True,
) -> Action:
    return Action(
        "add_track_group",
        {
            "id": id,
            "engine_id": engine_id,
            "name": name,
            "summary_track_id": summary_track_id,
            "collapsed": collapsed,
        },
    )


def toggle_track_group_collapsed(id: str) -> Action:
    return Action("toggle_track_group_collapsed", {"id": id})


def toggle_track_pinned(id: str) -> Action:
    return Action("toggle_track_pinned", {"id": id})


# ─── Notes ────────────────────────────────────────────────────────────────────


def add_note(timestamp: float, color: str) -> Action:
    return Action("add_note", {"timestamp": timestamp, "color": color})


def change_note(id: str, color: str, text: str) -> Action:
    return Action("change_note", {"id": id, "color": color, "text": text})


def remove_note(id: str) -> Action:
    return Action("remove_note", {"id": id})


# ─── Engines / queries / misc ─────────────────────────────────────────────────


def add_engine(id: str, source: str | bytes) -> Action:
    return Action("add_engine", {"id": id, "source": source})


def set_engine_ready(id: str, ready: bool = True) -> Action:
    return Action("set_engine_ready", {"id": id, "ready": ready})


def add_query(id: str, engine_id: str, query: str) -> Action:
    return Action("add_query", {"id": id, "engine_id": engine_id, "query": query})


def delete_query(id: str) -> Action:
    return Action("delete_query", {"id": id})


def set_status(msg: str, timestamp: float) -> Action:
    return Action("set_status", {"msg": msg, "timestamp": timestamp})


def set_trace_time(start_sec: float, end_sec: float) -> Action:
    return Action("set_trace_time", {"start_sec": start_sec, "end_sec": end_sec})


def set_logs_pagination(offset: int, count: int) -> Action:
    return Action("set_logs_pagination", {"offset": offset, "count": count})


def set_route(route: str | None) -> Action:
    return Action("set_route", {"route": route})


def update_local_group(value: OmniboxState | VisibleState | SelectedTimeRange) -> Action:
    """Carry a stamped UI-local group to the worker."""
    return Action("update_local_group", {"value": value})
