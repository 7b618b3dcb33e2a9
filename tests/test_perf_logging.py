"""Tests for slow-path perf logging utilities."""

import logging

from tracelens.io import perf_logging
from tracelens.io.perf_logging import monitor_slow_path


def test_monitor_slow_path_no_log_below_threshold(caplog):
    logger = logging.getLogger("tracelens.test.perf")
    with caplog.at_level(logging.WARNING, logger="tracelens.test.perf"):
        with monitor_slow_path(
            "test.stage",
            logger=logger,
            threshold_ms=10_000.0,
            context={"k": "v"},
        ):
            pass
    assert "perf threshold exceeded" not in caplog.text


def test_monitor_slow_path_logs_context_on_threshold(caplog):
    logger = logging.getLogger("tracelens.test.perf")
    with caplog.at_level(logging.WARNING, logger="tracelens.test.perf"):
        with monitor_slow_path(
            "test.stage",
            logger=logger,
            threshold_ms=0.0,
            context=lambda: {"alpha": 1, "beta": "two"},
        ):
            pass
    assert "perf threshold exceeded stage=test.stage" in caplog.text
    assert "alpha=1" in caplog.text
    assert "beta='two'" in caplog.text


def test_frame_stages_have_frame_budget():
    assert perf_logging.SLOW_STAGE_THRESHOLDS_MS["frontend.redraw_frame"] == 16.0
    assert perf_logging.SLOW_STAGE_THRESHOLDS_MS["frontend.apply_snapshot"] == 16.0


def test_lazy_context_not_evaluated_on_fast_path():
    logger = logging.getLogger("tracelens.test.perf")

    def context():
        raise AssertionError("context evaluated")

    with monitor_slow_path("test.stage", logger=logger, threshold_ms=10_000.0, context=context):
        pass
