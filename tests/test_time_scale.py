import pytest

from tracelens.app.time_scale import TimeScale, TimeSpan


def test_span_duration_and_contains():
    span = TimeSpan(2.0, 6.0)
    assert span.duration == 4.0
    assert span.contains(2.0)
    assert not span.contains(6.0)


def test_time_px_conversion():
    scale = TimeScale(TimeSpan(0.0, 10.0), 0, 200)

    assert scale.time_to_px(5.0) == 100.0
    assert scale.px_to_time(50) == 2.5
    assert scale.delta_time_to_px(1.0) == 20.0
    assert scale.delta_px_to_duration(20) == pytest.approx(1.0)


def test_set_bounds_and_limits():
    scale = TimeScale(TimeSpan(0.0, 1.0))
    scale.set_time_bounds(TimeSpan(10.0, 20.0))
    scale.set_limits_px(10, 110)

    assert scale.time_to_px(15.0) == 60.0
    assert scale.px_to_time(10) == 10.0


def test_degenerate_widths_do_not_divide_by_zero():
    scale = TimeScale(TimeSpan(5.0, 5.0), 0, 0)

    assert scale.time_to_px(7.0) == 0.0
    assert scale.px_to_time(3) == 5.0
    assert scale.delta_time_to_px(1.0) == 0.0
    assert scale.delta_px_to_duration(1) == 0.0


def test_inverted_pixel_limits_collapse():
    scale = TimeScale(TimeSpan(0.0, 1.0))
    scale.set_limits_px(50, 10)
    assert scale.end_px == 50
