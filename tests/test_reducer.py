"""Tests for the synchronous reducer."""

import pytest

from tracelens.core import actions
from tracelens.core.actions import Action
from tracelens.core.reducer import UnknownActionError, apply_action, known_action_types
from tracelens.core.state import (
    ChromeSliceSelection,
    CounterSelection,
    HeapProfileFlamegraph,
    HeapProfileSelection,
    NoteSelection,
    SCROLLING_TRACK_GROUP,
    SliceSelection,
    ThreadStateSelection,
    create_empty_state,
    get_containing_track_id,
)
from tracelens.core.timestamped import OmniboxState, VisibleState


def _reduce(*acts, state=None):
    state = state or create_empty_state()
    for action in acts:
        state = apply_action(state, action)
    return state


@pytest.mark.parametrize(
    "action,expected",
    [
        (actions.select_note("3"), NoteSelection(id="3")),
        (actions.select_slice(42), SliceSelection(id=42)),
        (actions.select_counter(1.0, 2.0, 9), CounterSelection(left_ts=1.0, right_ts=2.0, id=9)),
        (actions.select_heap_profile(5, 11, 3.5), HeapProfileSelection(id=5, upid=11, ts=3.5)),
        (actions.select_chrome_slice(8), ChromeSliceSelection(id=8)),
        (
            actions.select_thread_state(4, 1.5, 0.25, "Running", 2),
            ThreadStateSelection(utid=4, ts=1.5, dur=0.25, state="Running", cpu=2),
        ),
    ],
)
def test_select_actions_install_variant(action, expected):
    assert _reduce(action).current_selection == expected


def test_new_selection_replaces_previous():
    state = _reduce(actions.select_slice(1), actions.select_note("a"))
    assert state.current_selection == NoteSelection(id="a")


def test_deselect_clears():
    assert _reduce(actions.select_slice(1), actions.deselect()).current_selection is None


def test_heap_profile_selection_sets_flamegraph():
    state = _reduce(actions.select_heap_profile(5, 11, 3.5))
    assert state.current_heap_profile_flamegraph == HeapProfileFlamegraph(id=5, upid=11, ts=3.5)


def test_reducer_never_mutates_input_snapshot():
    before = create_empty_state()
    after = apply_action(before, actions.add_track("t1", "e", "slice", "main"))

    assert before.tracks == {}
    assert before.scrolling_tracks == ()
    assert "t1" in after.tracks


def test_track_without_group_scrolls():
    state = _reduce(actions.add_track("t1", "e", "slice", "main"))
    assert state.scrolling_tracks == ("t1",)
    assert get_containing_track_id(state, "t1") is None


def test_track_with_scrolling_group_scrolls():
    state = _reduce(actions.add_track("t1", "e", "slice", "main", track_group=SCROLLING_TRACK_GROUP))
    assert state.scrolling_tracks == ("t1",)


def test_track_joins_existing_group():
    state = _reduce(
        actions.add_track_group("g1", "e", "process 1", summary_track_id="t0"),
        actions.add_track("t1", "e", "slice", "thread", track_group="g1"),
    )
    assert state.track_groups["g1"].tracks == ("t1",)
    assert get_containing_track_id(state, "t1") == "g1"


def test_track_with_missing_group_scrolls_as_ungrouped():
    state = _reduce(actions.add_track("t1", "e", "slice", "thread", track_group="nope"))
    assert "t1" in state.tracks
    assert state.scrolling_tracks == ("t1",)
    assert get_containing_track_id(state, "t1") is None


def test_late_group_adopts_waiting_tracks():
    state = _reduce(
        actions.add_track("t0", "e", "slice", "main"),
        actions.add_track("t1", "e", "slice", "thread", track_group="g"),
        actions.add_track_group("g", "e", "process 1", summary_track_id="t1"),
    )

    assert get_containing_track_id(state, "t1") == "g"
    assert state.track_groups["g"].tracks == ("t1",)
    assert state.scrolling_tracks == ("t0",)


def test_deselect_without_selection_is_a_no_op():
    state = create_empty_state()
    assert apply_action(state, actions.deselect()) is state


def test_containing_track_of_unknown_track_is_none():
    assert get_containing_track_id(create_empty_state(), "missing") is None


def test_toggle_group_collapsed():
    state = _reduce(
        actions.add_track_group("g1", "e", "p", summary_track_id="t0", collapsed=True),
        actions.toggle_track_group_collapsed("g1"),
    )
    assert state.track_groups["g1"].collapsed is False


def test_toggle_pinned_moves_between_lists():
    state = _reduce(actions.add_track("t1", "e", "slice", "main"), actions.toggle_track_pinned("t1"))
    assert state.pinned_tracks == ("t1",)
    assert state.scrolling_tracks == ()

    state = _reduce(actions.toggle_track_pinned("t1"), state=state)
    assert state.pinned_tracks == ()
    assert state.scrolling_tracks == ("t1",)


def test_notes_get_sequential_ids():
    state = _reduce(actions.add_note(1.0, "#f00"), actions.add_note(2.0, "#0f0"))
    assert sorted(state.notes) == ["0", "1"]
    assert state.next_id == 2


def test_change_note():
    state = _reduce(actions.add_note(1.0, "#f00"), actions.change_note("0", "#00f", "hello"))
    assert state.notes["0"].text == "hello"
    assert state.notes["0"].color == "#00f"


def test_removing_selected_note_clears_selection():
    state = _reduce(
        actions.add_note(1.0, "#f00"),
        actions.select_note("0"),
        actions.remove_note("0"),
    )
    assert state.notes == {}
    assert state.current_selection is None


def test_engine_lifecycle():
    state = _reduce(actions.add_engine("e1", "trace.pftrace"), actions.set_engine_ready("e1"))
    assert state.engines["e1"].ready is True


def test_queries_add_and_delete():
    state = _reduce(actions.add_query("q", "e1", "select 1"))
    assert state.queries["q"].query == "select 1"
    assert _reduce(actions.delete_query("q"), state=state).queries == {}


def test_trace_time_end_not_before_start():
    state = _reduce(actions.set_trace_time(5.0, 1.0))
    assert (state.trace_time.start_sec, state.trace_time.end_sec) == (5.0, 5.0)


def test_status_route_and_pagination():
    state = _reduce(
        actions.set_status("Loading", 12.0),
        actions.set_route("/viewer"),
        actions.set_logs_pagination(100, 50),
    )
    assert state.status.msg == "Loading"
    assert state.route == "/viewer"
    assert (state.logs_pagination.offset, state.logs_pagination.count) == (100, 50)


def test_update_local_group_applies_fresher_value():
    value = VisibleState(start_sec=1.0, end_sec=2.0, last_update=3.0)
    state = _reduce(actions.update_local_group(value))
    assert state.frontend_local_state.visible_state is value


def test_update_local_group_ignores_stale_value():
    fresh = OmniboxState(omnibox="new", last_update=10.0)
    stale = OmniboxState(omnibox="old", last_update=4.0)
    state = _reduce(actions.update_local_group(fresh))

    assert _reduce(actions.update_local_group(stale), state=state) is state


def test_unknown_action_is_a_programming_error():
    with pytest.raises(UnknownActionError, match="frobnicate"):
        apply_action(create_empty_state(), Action("frobnicate"))


def test_every_action_constructor_has_a_handler():
    constructors = [
        actions.select_note("1"),
        actions.select_slice(1),
        actions.select_counter(0, 1, 1),
        actions.select_heap_profile(1, 1, 1),
        actions.select_chrome_slice(1),
        actions.select_thread_state(1, 1, 1, "R", 0),
        actions.deselect(),
        actions.add_track("t", "e", "k", "n"),
        actions.add_track_group("g", "e", "n", "t"),
        actions.toggle_track_group_collapsed("g"),
        actions.toggle_track_pinned("t"),
        actions.add_note(0, "c"),
        actions.change_note("0", "c", "t"),
        actions.remove_note("0"),
        actions.add_engine("e", "src"),
        actions.set_engine_ready("e"),
        actions.add_query("q", "e", "s"),
        actions.delete_query("q"),
        actions.set_status("m", 0),
        actions.set_trace_time(0, 1),
        actions.set_logs_pagination(0, 0),
        actions.set_route(None),
        actions.update_local_group(VisibleState()),
    ]
    assert {a.type for a in constructors} == known_action_types()
