"""Pytest configuration and shared fixtures for tracelens tests."""

import pytest

from tracelens.app.analysis_worker import InlineWorker
from tracelens.app.redraw_scheduler import FrameQueue, RedrawScheduler
from tracelens.app.registry import Registry, RegistryPhase


class FakeClock:
    """Deterministic stand-in for time.time()."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float = 1.0) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def frames():
    """Frames requested by a scheduler; run them with frames.run_pending()."""
    return FrameQueue()


@pytest.fixture
def scheduler(frames):
    return RedrawScheduler(frames.request)


@pytest.fixture
def dispatched():
    """Recording dispatch target."""
    return []


@pytest.fixture
def registry(clock, frames):
    """Initialized registry whose dispatch reduces synchronously and applies the result."""
    reg = Registry()
    worker = InlineWorker(lambda snapshot: reg.apply_snapshot(snapshot))
    reg.initialize(worker.post, worker, request_frame=frames.request, clock=clock)
    yield reg
    if reg.phase is RegistryPhase.INITIALIZED:
        reg.shutdown()


@pytest.fixture
def recording_registry(clock, frames, dispatched):
    """Initialized registry whose dispatch only records actions."""
    reg = Registry()
    reg.initialize(
        dispatched.append,
        InlineWorker(lambda snapshot: None),
        request_frame=frames.request,
        clock=clock,
    )
    yield reg
    if reg.phase is RegistryPhase.INITIALIZED:
        reg.shutdown()
