"""Synchronous reducer: (snapshot, action) -> new snapshot.

Runs inside the background analysis context. Every handler returns a fresh
ApplicationState; nothing is patched in place.

// [LAW:single-enforcer] apply_action is the only producer of snapshots.
// [LAW:dataflow-not-control-flow] Dispatch is a table lookup keyed by action type.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable

from tracelens.core.actions import Action
from tracelens.core.state import (
    ApplicationState,
    ChromeSliceSelection,
    CounterSelection,
    EngineConfig,
    HeapProfileFlamegraph,
    HeapProfileSelection,
    LogsPagination,
    Note,
    NoteSelection,
    QueryConfig,
    SCROLLING_TRACK_GROUP,
    SliceSelection,
    Status,
    ThreadStateSelection,
    TraceTime,
    TrackGroupState,
    TrackState,
)
from tracelens.core.timestamped import (
    OmniboxState,
    SelectedTimeRange,
    VisibleState,
    merge,
)

logger = logging.getLogger(__name__)

replace = dataclasses.replace


class UnknownActionError(ValueError):
    """Raised for an action type with no registered handler."""


# ─── Selection ────────────────────────────────────────────────────────────────


def _select(state: ApplicationState, selection) -> ApplicationState:
    return replace(state, current_selection=selection)


def _select_note(state, *, id):
    return _select(state, NoteSelection(id=id))


def _select_slice(state, *, id):
    return _select(state, SliceSelection(id=id))


def _select_counter(state, *, left_ts, right_ts, id):
    return _select(state, CounterSelection(left_ts=left_ts, right_ts=right_ts, id=id))


def _select_heap_profile(state, *, id, upid, ts):
    return replace(
        state,
        current_selection=HeapProfileSelection(id=id, upid=upid, ts=ts),
        current_heap_profile_flamegraph=HeapProfileFlamegraph(id=id, upid=upid, ts=ts),
    )


def _select_chrome_slice(state, *, id):
    return _select(state, ChromeSliceSelection(id=id))


def _select_thread_state(state, *, utid, ts, dur, state_label, cpu):
    return _select(
        state,
        ThreadStateSelection(utid=utid, ts=ts, dur=dur, state=state_label, cpu=cpu),
    )


def _deselect(state):
    if state.current_selection is None:
        return state
    return _select(state, None)


# ─── Tracks ───────────────────────────────────────────────────────────────────


def _add_track(state, *, id, engine_id, kind, name, track_group=None, config=None):
    track = TrackState(
        id=id,
        engine_id=engine_id,
        kind=kind,
        name=name,
        track_group=track_group,
        config=dict(config or {}),
    )
    tracks = {**state.tracks, id: track}
    track_groups = state.track_groups
    scrolling = state.scrolling_tracks
    if track_group in track_groups:
        group = track_groups[track_group]
        track_groups = {
            **track_groups,
            track_group: replace(group, tracks=group.tracks + (id,)),
        }
    else:
        # No group (yet): scrolls with the ungrouped tracks until its group is added.
        if track_group not in (None, SCROLLING_TRACK_GROUP):
            logger.debug("track %s references unknown group %s", id, track_group)
        scrolling = scrolling + (id,)
    return replace(state, tracks=tracks, track_groups=track_groups, scrolling_tracks=scrolling)


def _add_track_group(state, *, id, engine_id, name, summary_track_id, collapsed=True):
    # Adopt tracks that named this group before it existed.
    waiting = tuple(
        track_id
        for track_id in state.scrolling_tracks
        if getattr(state.tracks.get(track_id), "track_group", None) == id
    )
    group = TrackGroupState(
        id=id,
        engine_id=engine_id,
        name=name,
        collapsed=collapsed,
        tracks=waiting,
        summary_track_id=summary_track_id,
    )
    return replace(
        state,
        track_groups={**state.track_groups, id: group},
        scrolling_tracks=tuple(t for t in state.scrolling_tracks if t not in waiting),
    )


def _toggle_track_group_collapsed(state, *, id):
    group = state.track_groups.get(id)
    if group is None:
        return state
    return replace(
        state,
        track_groups={**state.track_groups, id: replace(group, collapsed=not group.collapsed)},
    )


def _toggle_track_pinned(state, *, id):
    if id in state.pinned_tracks:
        return replace(
            state,
            pinned_tracks=tuple(t for t in state.pinned_tracks if t != id),
            scrolling_tracks=state.scrolling_tracks + (id,),
        )
    return replace(
        state,
        pinned_tracks=state.pinned_tracks + (id,),
        scrolling_tracks=tuple(t for t in state.scrolling_tracks if t != id),
    )


# ─── Notes ────────────────────────────────────────────────────────────────────


def _add_note(state, *, timestamp, color):
    note_id = str(state.next_id)
    note = Note(id=note_id, timestamp=timestamp, color=color, text="")
    return replace(state, next_id=state.next_id + 1, notes={**state.notes, note_id: note})


def _change_note(state, *, id, color, text):
    note = state.notes.get(id)
    if note is None:
        return state
    return replace(state, notes={**state.notes, id: replace(note, color=color, text=text)})


def _remove_note(state, *, id):
    if id not in state.notes:
        return state
    notes = {k: v for k, v in state.notes.items() if k != id}
    selection = state.current_selection
    if isinstance(selection, NoteSelection) and selection.id == id:
        selection = None
    return replace(state, notes=notes, current_selection=selection)


# ─── Engines / queries / misc ─────────────────────────────────────────────────


def _add_engine(state, *, id, source):
    return replace(state, engines={**state.engines, id: EngineConfig(id=id, ready=False, source=source)})


def _set_engine_ready(state, *, id, ready=True):
    engine = state.engines.get(id)
    if engine is None:
        return state
    return replace(state, engines={**state.engines, id: replace(engine, ready=ready)})


def _add_query(state, *, id, engine_id, query):
    return replace(
        state,
        queries={**state.queries, id: QueryConfig(id=id, engine_id=engine_id, query=query)},
    )


def _delete_query(state, *, id):
    return replace(state, queries={k: v for k, v in state.queries.items() if k != id})


def _set_status(state, *, msg, timestamp):
    return replace(state, status=Status(msg=msg, timestamp=timestamp))


def _set_trace_time(state, *, start_sec, end_sec):
    return replace(state, trace_time=TraceTime(start_sec=start_sec, end_sec=max(start_sec, end_sec)))


def _set_logs_pagination(state, *, offset, count):
    return replace(state, logs_pagination=LogsPagination(offset=offset, count=count))


def _set_route(state, *, route):
    return replace(state, route=route)


_GROUP_FIELDS = {
    OmniboxState: "omnibox_state",
    VisibleState: "visible_state",
    SelectedTimeRange: "selected_time_range",
}


def _update_local_group(state, *, value):
    """Fold a stamped UI group into the snapshot. Older stamps are dropped."""
    field_name = _GROUP_FIELDS[type(value)]
    synced = state.frontend_local_state
    current = getattr(synced, field_name)
    merged = merge(current, value)
    if merged is current:
        return state
    return replace(state, frontend_local_state=replace(synced, **{field_name: merged}))


# [LAW:one-source-of-truth] Action type → handler.
_HANDLERS: dict[str, Callable[..., ApplicationState]] = {
    "select_note": _select_note,
    "select_slice": _select_slice,
    "select_counter": _select_counter,
    "select_heap_profile": _select_heap_profile,
    "select_chrome_slice": _select_chrome_slice,
    "select_thread_state": _select_thread_state,
    "deselect": _deselect,
    "add_track": _add_track,
    "add_track_group": _add_track_group,
    "toggle_track_group_collapsed": _toggle_track_group_collapsed,
    "toggle_track_pinned": _toggle_track_pinned,
    "add_note": _add_note,
    "change_note": _change_note,
    "remove_note": _remove_note,
    "add_engine": _add_engine,
    "set_engine_ready": _set_engine_ready,
    "add_query": _add_query,
    "delete_query": _delete_query,
    "set_status": _set_status,
    "set_trace_time": _set_trace_time,
    "set_logs_pagination": _set_logs_pagination,
    "set_route": _set_route,
    "update_local_group": _update_local_group,
}


def known_action_types() -> frozenset[str]:
    return frozenset(_HANDLERS)


def apply_action(state: ApplicationState, action: Action) -> ApplicationState:
    handler = _HANDLERS.get(action.type)
    if handler is None:
        raise UnknownActionError(f"no handler for action type {action.type!r}")
    return handler(state, **action.args)
