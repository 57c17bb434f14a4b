"""Tests for value-to-color mapping and colorbar legends."""

from __future__ import annotations

import math

import pytest

from housedash.colormap import (
    NAMED_COLORMAPS,
    ColorMap,
    blend,
    build_colormap,
    color_for,
    colors_for,
    legend,
)
from housedash.errors import RenderError

BLUES = NAMED_COLORMAPS["Blues"]


@pytest.mark.parametrize("name", sorted(NAMED_COLORMAPS))
def test_bounds_map_to_end_control_points(name: str) -> None:
    """The low bound gives the first control point, the high bound the last."""
    cm = build_colormap(name, (10.0, 30.0))
    assert color_for(10.0, cm) == NAMED_COLORMAPS[name][0]
    assert color_for(30.0, cm) == NAMED_COLORMAPS[name][-1]


def test_nan_and_none_map_to_lowest_control_point() -> None:
    """Missing values are shown with the lowest color, not rejected."""
    cm = build_colormap("Reds", (0.0, 100.0))
    assert color_for(math.nan, cm) == NAMED_COLORMAPS["Reds"][0]
    assert color_for(None, cm) == NAMED_COLORMAPS["Reds"][0]


def test_values_outside_bounds_are_clamped() -> None:
    cm = build_colormap("Blues", (0.0, 1.0))
    assert color_for(-5.0, cm) == BLUES[0]
    assert color_for(42.0, cm) == BLUES[-1]


def test_reversed_swaps_ends() -> None:
    cm = build_colormap("Blues", (0.0, 1.0), reversed=True)
    assert color_for(0.0, cm) == BLUES[-1]
    assert color_for(1.0, cm) == BLUES[0]
    assert color_for(math.nan, cm) == BLUES[-1]


def test_control_points_are_hit_exactly() -> None:
    """Evenly spaced control points are reproduced at their positions."""
    cm = build_colormap("Status", (0.0, 2.0))
    assert colors_for([0.0, 1.0, 2.0], cm) == NAMED_COLORMAPS["Status"]


def test_interpolation_is_monotonic_between_two_grays() -> None:
    cm = ColorMap(colors=((0, 0, 0), (255, 255, 255)))
    reds = [c[0] for c in colors_for([i / 10 for i in range(11)], cm)]
    assert reds == sorted(reds)
    assert reds[0] == 0 and reds[-1] == 255
    assert all(c[0] == c[1] == c[2] for c in colors_for([0.3, 0.7], cm))


def test_custom_hex_colormap_and_positions() -> None:
    cm = build_colormap(["#000000", "#ff0000", "#ffffff"], (0, 10), positions=[0.0, 0.2, 1.0])
    assert color_for(2.0, cm) == (255, 0, 0)


def test_equal_bounds_split_at_the_bound() -> None:
    cm = build_colormap("Greens", (5.0, 5.0))
    assert color_for(4.0, cm) == NAMED_COLORMAPS["Greens"][0]
    assert color_for(5.0, cm) == NAMED_COLORMAPS["Greens"][0]
    assert color_for(6.0, cm) == NAMED_COLORMAPS["Greens"][-1]


def test_invalid_colormaps_raise_render_error() -> None:
    with pytest.raises(RenderError):
        build_colormap("Blues", (3.0, 1.0))
    with pytest.raises(RenderError):
        build_colormap("NoSuchMap")
    with pytest.raises(RenderError):
        ColorMap(colors=((0, 0, 0),))
    with pytest.raises(RenderError):
        build_colormap(["#000000", "nonsense"])
    with pytest.raises(RenderError):
        ColorMap(colors=((0, 0, 0), (1, 1, 1)), lo=math.nan)


def test_fit_uses_finite_extent() -> None:
    cm = build_colormap("Blues").fit([3.0, None, math.nan, -1.0, 7.5])
    assert (cm.lo, cm.hi) == (-1.0, 7.5)
    assert build_colormap("Blues").fit([]).hi == 1.0


def test_legend_runs_from_high_to_low() -> None:
    cm = build_colormap("Blues", (0.0, 100.0))
    ticks = legend(cm, 5, precision=1, unit="%")
    assert [p for p, _, _ in ticks] == [0.0, 0.25, 0.5, 0.75, 1.0]
    assert [label for _, label, _ in ticks] == ["100.0%", "75.0%", "50.0%", "25.0%", "0.0%"]
    assert ticks[0][2] == BLUES[-1]
    assert ticks[-1][2] == BLUES[0]
    with pytest.raises(RenderError):
        legend(cm, 0)


def test_blend() -> None:
    assert blend((0, 0, 0), (255, 255, 255)) == (128, 128, 128)
    assert blend((10, 20, 30), (0, 0, 0), 0.0) == (10, 20, 30)
    assert blend((10, 20, 30), (0, 0, 0), 2.0) == (0, 0, 0)
