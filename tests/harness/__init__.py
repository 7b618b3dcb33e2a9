"""Textual in-process test harness for tracelens.

Re-exports all public API for convenient imports:
    from tests.harness import run_app, press_and_settle, settle, ...
"""

from tests.harness.app_runner import run_app
from tests.harness.interactions import (
    settle,
    press_and_settle,
    click_and_settle,
    resize_and_settle,
)

__all__ = [
    "run_app",
    "settle",
    "press_and_settle",
    "click_and_settle",
    "resize_and_settle",
]
