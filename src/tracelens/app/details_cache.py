"""Value types for the registry's auxiliary caches.

These are derived, locally owned data. They never travel in a snapshot and
are not subject to timestamped merging.
"""

from __future__ import annotations

from dataclasses import dataclass, field


# Key in the track data store under which the log loader publishes LogExists.
LOG_EXISTS_KEY = "log-exists"


@dataclass
class LogExists:
    exists: bool = False


@dataclass
class SliceDetails:
    ts: float | None = None
    dur: float | None = None
    priority: int | None = None
    end_state: str | None = None
    cpu: int | None = None
    id: int | None = None
    utid: int | None = None
    wakeup_ts: float | None = None
    waker_utid: int | None = None
    waker_cpu: int | None = None
    category: str | None = None
    name: str | None = None


@dataclass
class CounterDetails:
    start_time: float | None = None
    value: float | None = None
    delta: float | None = None
    duration: float | None = None


@dataclass
class HeapProfileDetails:
    ts: float | None = None
    ts_ns: int | None = None
    allocated: int | None = None
    allocated_not_freed: int | None = None
    pid: int | None = None


@dataclass(frozen=True)
class QuantizedLoad:
    start_sec: float
    end_sec: float
    load: float


@dataclass(frozen=True)
class ThreadDesc:
    utid: int
    tid: int
    thread_name: str
    pid: int | None = None
    proc_name: str | None = None


@dataclass
class CurrentSearchResults:
    slice_ids: list[int] = field(default_factory=list)
    ts_starts: list[float] = field(default_factory=list)
    utids: list[int] = field(default_factory=list)
    track_ids: list[str] = field(default_factory=list)
    ref_types: list[str] = field(default_factory=list)
    total_results: int = 0


@dataclass
class SearchSummary:
    ts_starts: list[float] = field(default_factory=list)
    ts_ends: list[float] = field(default_factory=list)
    count: list[int] = field(default_factory=list)
