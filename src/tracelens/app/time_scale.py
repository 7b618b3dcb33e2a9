"""Mutable view transform between trace time (seconds) and screen position."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TimeSpan:
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start

    def contains(self, t: float) -> bool:
        return self.start <= t < self.end


class TimeScale:
    """Linear map from a time span onto a pixel (or cell) range.

    Owned by FrontendLocalState and mutated in place on every pan/zoom.
    """

    def __init__(self, span: TimeSpan, start_px: float = 0.0, end_px: float = 0.0):
        self._span = span
        self._start_px = start_px
        self._end_px = end_px

    @property
    def span(self) -> TimeSpan:
        return self._span

    @property
    def start_px(self) -> float:
        return self._start_px

    @property
    def end_px(self) -> float:
        return self._end_px

    def set_time_bounds(self, span: TimeSpan) -> None:
        self._span = span

    def set_limits_px(self, start_px: float, end_px: float) -> None:
        self._start_px = start_px
        self._end_px = max(start_px, end_px)

    def _width_px(self) -> float:
        return self._end_px - self._start_px

    def time_to_px(self, t: float) -> float:
        if self._span.duration <= 0:
            return self._start_px
        fraction = (t - self._span.start) / self._span.duration
        return self._start_px + fraction * self._width_px()

    def px_to_time(self, px: float) -> float:
        width = self._width_px()
        if width <= 0:
            return self._span.start
        fraction = (px - self._start_px) / width
        return self._span.start + fraction * self._span.duration

    def delta_time_to_px(self, dt: float) -> float:
        if self._span.duration <= 0:
            return 0.0
        return dt * self._width_px() / self._span.duration

    def delta_px_to_duration(self, dpx: float) -> float:
        width = self._width_px()
        if width <= 0:
            return 0.0
        return dpx * self._span.duration / width
