"""Tests for the trend chart: axis helpers, layout and rendered pixels."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conftest import assert_matches_reference, hourly_series
from housedash.charts import dispatch, elements
from housedash.charts.canvas import Circle, Line, Rect, Text
from housedash.charts.models import TrendSpec
from housedash.charts.trend import layout, time_ticks, value_ticks, y_range
from housedash.errors import RenderError
from housedash.series.models import TimeWindow
from housedash.sink import encode_bitmap
from housedash.style import Style, StyleResolver

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_value_ticks_are_round() -> None:
    assert value_ticks(0.0, 10.0, 5) == [0.0, 5.0, 10.0]
    assert value_ticks(18.3, 21.7, 5) == [19.0, 20.0, 21.0]
    assert len(value_ticks(-3.0, 1234.0, 4)) <= 4
    assert value_ticks(2.0, 2.0, 5) == [2.0]


def test_time_ticks_fall_on_round_hours() -> None:
    window = TimeWindow(start=START, end=START + timedelta(days=1))
    ticks = time_ticks(window, 4, timezone.utc)
    assert [t.hour for t in ticks] == [0, 6, 12, 18]
    shifted = TimeWindow(start=START + timedelta(minutes=20), end=START + timedelta(hours=3))
    assert [t.hour for t in time_ticks(shifted, 4, timezone.utc)] == [1, 2]


def test_y_range() -> None:
    buckets = {"a": [(START, 10.0), (START, None)], "b": [(START, 20.0)]}
    assert y_range(buckets) == (10.0, 20.0)
    assert y_range(buckets, top_padding=0.5) == (10.0, 25.0)
    assert y_range({}) == (0.0, 1.0)
    assert y_range({"a": [(START, 5.0)]}) == (4.5, 5.5)
    low, high = y_range({"a": [(START, 5.0)]}, min_y_range=2.0)
    assert high - low >= 2.0
    assert (low + high) / 2 == pytest.approx(5.0)


def _two_series_day():
    return {
        "indoor": hourly_series("indoor", [20.0] * 24, START),
        "outdoor": hourly_series("outdoor", [10.0] * 24, START),
    }


def _plot_box(resolver: StyleResolver, title: str):
    _, title_height = elements.title(resolver, title)
    return 55, title_height + 5, resolver.width - 6, resolver.height - 25


def test_layout_draws_axes_before_series_and_legend_last(light_style: Style, now) -> None:
    spec = TrendSpec(title="Temperature", ylabel="T", yunit="°C", draw_last_value=True)
    instructions = layout(spec, StyleResolver(light_style), _two_series_day(), now)
    widths = [i.width for i in instructions if isinstance(i, Line)]
    first_series = widths.index(3)
    assert 1 in widths[:first_series]
    assert isinstance(instructions[-1], Text)
    assert any(isinstance(i, Rect) and i.outline == (32, 32, 32) for i in instructions)
    texts = [i.text for i in instructions if isinstance(i, Text)]
    assert "T [°C]" in texts
    assert texts.count("20") >= 1 and "indoor" in texts and "outdoor" in texts


def test_layout_breaks_lines_at_gaps_and_skips_unlisted_tags(light_style: Style, now) -> None:
    data = {
        "a": hourly_series("a", [1.0, 2.0] + [None] * 22, START - timedelta(hours=2)),
        "b": hourly_series("b", [5.0] + [None] * 23, START),
        "c": hourly_series("c", [7.0] * 24, START),
    }
    spec = TrendSpec(title="T", tag_values=["b", "a"], hide_legend=True)
    instructions = layout(spec, StyleResolver(light_style), data, now)
    colors = {i.color for i in instructions if isinstance(i, Line) and i.width == 3}
    palette = StyleResolver(light_style)
    # "a" has no samples in the window: its buckets are all null.
    assert colors == {palette.color_for_series_index(0)}
    assert not any(isinstance(i, Circle) for i in instructions)


def test_single_point_run_is_a_dot(light_style: Style, now) -> None:
    data = {"x": hourly_series("x", [3.0], now - timedelta(hours=1))}
    spec = TrendSpec(title="T", hide_legend=True)
    instructions = layout(spec, StyleResolver(light_style), data, now)
    assert len([i for i in instructions if isinstance(i, Circle)]) == 1


def test_layout_rejects_tiny_canvas(now) -> None:
    style = Style(resolution=(40, 30))
    with pytest.raises(RenderError):
        layout(TrendSpec(title="T"), StyleResolver(style), _two_series_day(), now)


def test_two_series_day_pixels(light_style: Style, now) -> None:
    """Hourly two-series day at 320x240 under the light palette."""
    resolver = StyleResolver(light_style)
    spec = TrendSpec(title="Temperature", how_long_ago="P1D", how_often="PT1H")
    canvas = dispatch.render(spec, resolver, _two_series_day(), now)
    assert canvas.size == (320, 240)

    left, top, right, bottom = _plot_box(resolver, spec.title)
    x_mid = int((left + right) / 2)
    indoor = resolver.color_for_series_index(0)
    outdoor = resolver.color_for_series_index(1)

    # The higher series runs along the top of the plot area, the lower
    # one along the X axis, painted over it.
    assert canvas.getpixel((x_mid, top)) == indoor
    assert canvas.getpixel((x_mid, bottom)) == outdoor
    assert canvas.getpixel((x_mid, int((top + bottom) / 2))) == (255, 255, 255)
    assert canvas.getpixel((left, int((top + bottom) / 2))) == (0, 0, 0)
    assert canvas.getpixel((0, 239)) == (255, 255, 255)
    assert canvas.getpixel((319, 0)) == (255, 255, 255)


def test_two_series_day_matches_reference(light_style: Style, now) -> None:
    spec = TrendSpec(title="Temperature", how_long_ago="P1D", how_often="PT1H")
    canvas = dispatch.render(spec, StyleResolver(light_style), _two_series_day(), now)
    assert_matches_reference(canvas, "trend_day_light")


def test_render_is_deterministic(light_style: Style, now) -> None:
    resolver = StyleResolver(light_style)
    spec = TrendSpec(title="Temperature", draw_horizontal_grid=True, draw_last_value=True)
    first = encode_bitmap(dispatch.render(spec, resolver, _two_series_day(), now))
    second = encode_bitmap(
        dispatch.render(spec, StyleResolver(light_style), _two_series_day(), now)
    )
    assert first == second
