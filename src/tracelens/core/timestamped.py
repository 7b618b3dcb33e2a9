"""Timestamped field groups with last-writer-wins merge at group granularity.

// [LAW:one-source-of-truth] merge() is the only conflict-resolution rule between
//   the UI-local copy of a group and the copy carried by a synchronized snapshot.
// [LAW:one-type-per-behavior] Fields of one group are never merged individually.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import TypeVar


@dataclass(frozen=True)
class Timestamped:
    """Base for a group of fields sharing one freshness marker."""

    last_update: float = field(default=0.0, kw_only=True)


T = TypeVar("T", bound=Timestamped)


def stamp(value: T, last_update: float, **changes) -> T:
    """Return a copy of value with changes applied and last_update set."""
    return dataclasses.replace(value, last_update=last_update, **changes)


def merge(local: T, incoming: T) -> T:
    """Pick the fresher of two candidate values for the same group.

    Ties keep local.
    """
    if incoming.last_update > local.last_update:
        return incoming
    return local


# ─── Groups ───────────────────────────────────────────────────────────────────


class OmniboxMode(Enum):
    SEARCH = "SEARCH"
    COMMAND = "COMMAND"


@dataclass(frozen=True)
class OmniboxState(Timestamped):
    omnibox: str = ""
    mode: OmniboxMode = OmniboxMode.SEARCH


@dataclass(frozen=True)
class VisibleState(Timestamped):
    """Visible time window in seconds plus the current resolution."""

    start_sec: float = 0.0
    end_sec: float = 10.0
    resolution: float = 0.0


@dataclass(frozen=True)
class SelectedTimeRange(Timestamped):
    start_sec: float | None = None
    end_sec: float | None = None


@dataclass(frozen=True)
class SyncedViewState:
    """The timestamped groups as carried inside the authoritative snapshot."""

    omnibox_state: OmniboxState = field(default_factory=OmniboxState)
    visible_state: VisibleState = field(default_factory=VisibleState)
    selected_time_range: SelectedTimeRange = field(default_factory=SelectedTimeRange)
