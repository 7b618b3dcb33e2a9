"""Authoritative application state, the snapshot replaced wholesale on every sync.

// [LAW:one-source-of-truth] ApplicationState is a closed, frozen structure;
//   the reducer is its only producer and the registry its only owner.
// [LAW:one-way-deps] No imports from app/ or tui/.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Union

from tracelens.core.timestamped import SyncedViewState


MAX_TIME = 180

SCROLLING_TRACK_GROUP = "ScrollingTracks"


# ─── Keyed collections ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TrackState:
    id: str
    engine_id: str
    kind: str
    name: str
    track_group: str | None = None
    config: dict = field(default_factory=dict)


@dataclass(frozen=True)
class TrackGroupState:
    id: str
    engine_id: str
    name: str
    collapsed: bool = True
    tracks: tuple[str, ...] = ()  # child track ids
    summary_track_id: str = ""


@dataclass(frozen=True)
class EngineConfig:
    id: str
    ready: bool = False
    source: str | bytes = ""


@dataclass(frozen=True)
class QueryConfig:
    id: str
    engine_id: str
    query: str


@dataclass(frozen=True)
class Note:
    id: str
    timestamp: float
    color: str
    text: str = ""


# ─── Scalars ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TraceTime:
    start_sec: float = 0.0
    end_sec: float = 10.0


@dataclass(frozen=True)
class Status:
    msg: str = ""
    timestamp: float = 0.0  # epoch seconds


@dataclass(frozen=True)
class LogsPagination:
    offset: int = 0
    count: int = 0


# ─── Selection ────────────────────────────────────────────────────────────────
# // [LAW:one-source-of-truth] The class IS the variant; kind mirrors it for lookup tables.


class SelectionKind(Enum):
    NOTE = "NOTE"
    SLICE = "SLICE"
    COUNTER = "COUNTER"
    HEAP_PROFILE = "HEAP_PROFILE"
    CHROME_SLICE = "CHROME_SLICE"
    THREAD_STATE = "THREAD_STATE"


@dataclass(frozen=True)
class NoteSelection:
    kind: ClassVar[SelectionKind] = SelectionKind.NOTE
    id: str


@dataclass(frozen=True)
class SliceSelection:
    kind: ClassVar[SelectionKind] = SelectionKind.SLICE
    id: int


@dataclass(frozen=True)
class CounterSelection:
    kind: ClassVar[SelectionKind] = SelectionKind.COUNTER
    left_ts: float
    right_ts: float
    id: int


@dataclass(frozen=True)
class HeapProfileSelection:
    kind: ClassVar[SelectionKind] = SelectionKind.HEAP_PROFILE
    id: int
    upid: int
    ts: float


@dataclass(frozen=True)
class ChromeSliceSelection:
    kind: ClassVar[SelectionKind] = SelectionKind.CHROME_SLICE
    id: int


@dataclass(frozen=True)
class ThreadStateSelection:
    kind: ClassVar[SelectionKind] = SelectionKind.THREAD_STATE
    utid: int
    ts: float
    dur: float
    state: str
    cpu: int


Selection = Union[
    NoteSelection,
    SliceSelection,
    CounterSelection,
    HeapProfileSelection,
    ChromeSliceSelection,
    ThreadStateSelection,
]


@dataclass(frozen=True)
class HeapProfileFlamegraph:
    id: int
    upid: int
    ts: float


# ─── Snapshot ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ApplicationState:
    """One complete, self-consistent snapshot of the shared state."""

    route: str | None = None
    next_id: int = 0
    engines: dict[str, EngineConfig] = field(default_factory=dict)
    trace_time: TraceTime = field(default_factory=TraceTime)
    track_groups: dict[str, TrackGroupState] = field(default_factory=dict)
    tracks: dict[str, TrackState] = field(default_factory=dict)
    visible_tracks: tuple[str, ...] = ()
    scrolling_tracks: tuple[str, ...] = ()
    pinned_tracks: tuple[str, ...] = ()
    queries: dict[str, QueryConfig] = field(default_factory=dict)
    notes: dict[str, Note] = field(default_factory=dict)
    status: Status = field(default_factory=Status)
    current_selection: Selection | None = None
    current_heap_profile_flamegraph: HeapProfileFlamegraph | None = None
    logs_pagination: LogsPagination = field(default_factory=LogsPagination)
    # Updated by the UI at input rate and synchronized to the worker at a lower
    # rate. Consumers pick the fresher copy per group via timestamped.merge().
    frontend_local_state: SyncedViewState = field(default_factory=SyncedViewState)


def create_empty_state() -> ApplicationState:
    return ApplicationState()


def get_containing_track_id(state: ApplicationState, track_id: str) -> str | None:
    """Return the id of the group containing track_id, or None.

    A parent id that names no existing group counts as no parent.
    """
    track = state.tracks.get(track_id)
    if track is None:
        return None
    parent_id = track.track_group
    if not parent_id or parent_id not in state.track_groups:
        return None
    return parent_id
