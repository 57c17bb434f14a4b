"""Tests for region geometry and the geographical heat map."""

from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import assert_matches_reference
from housedash.charts import dispatch, elements
from housedash.charts.canvas import Line, Polygon, Text
from housedash.charts.geographical_heatmap import (
    area_of,
    centroid_of,
    layout,
    normalize_regions,
    project_isometric,
)
from housedash.charts.models import GeographicalHeatMapSpec
from housedash.colormap import build_colormap, color_for
from housedash.errors import RenderError
from housedash.series.models import Series
from housedash.style import Style, StyleResolver

SQUARES = {
    "a": [(0, 0), (1, 0), (1, 1), (0, 1)],
    "b": [(1, 0), (2, 0), (2, 1), (1, 1)],
    "c": [(0, 1), (1, 1), (1, 2), (0, 2)],
    "d": [(1, 1), (2, 1), (2, 2), (1, 2)],
}
VALUES = {"a": 1.0, "b": 2.0, "c": 3.0, "d": 4.0}


def test_centroid_of_square_and_triangle() -> None:
    assert centroid_of([(0, 0), (2, 0), (2, 2), (0, 2)]) == pytest.approx((1.0, 1.0))
    assert centroid_of([(0, 0), (3, 0), (0, 3)]) == pytest.approx((1.0, 1.0))


def test_centroid_of_concave_polygon() -> None:
    """The L shape's centroid is its area centroid, not the vertex mean."""
    l_shape = [(0, 0), (2, 0), (2, 1), (1, 1), (1, 2), (0, 2)]
    assert area_of(l_shape) == pytest.approx(3.0)
    assert centroid_of(l_shape) == pytest.approx((5 / 6, 5 / 6))
    assert centroid_of(list(reversed(l_shape))) == pytest.approx((5 / 6, 5 / 6))


def test_degenerate_polygon_falls_back_to_vertex_mean() -> None:
    assert centroid_of([(0, 0), (1, 1), (2, 2)]) == pytest.approx((1.0, 1.0))
    assert centroid_of([(26, 27)] * 4) == (26.0, 27.0)


def test_isometric_projection() -> None:
    assert project_isometric((1, 0)) == (0.5, 0.25)
    assert project_isometric((0, 1)) == (-0.5, 0.25)
    assert project_isometric((1, 1)) == (0.0, 0.5)


def test_normalize_regions_keeps_aspect_ratio_and_centers() -> None:
    result = normalize_regions({"a": [(0, 0), (1, 0), (1, 1), (0, 1)]}, (110, 60), margin=5)
    assert result["a"] == [(30.0, 5.0), (80.0, 5.0), (80.0, 55.0), (30.0, 55.0)]
    with pytest.raises(RenderError):
        normalize_regions({"a": [(0, 0), (1, 0), (2, 0)]}, (100, 100))
    with pytest.raises(RenderError):
        normalize_regions(SQUARES, (8, 8))


def _spec(**kwargs) -> GeographicalHeatMapSpec:
    regions = [{"name": name, "coordinates": path} for name, path in SQUARES.items()]
    return GeographicalHeatMapSpec(title="Rooms", regions=regions, **kwargs)


def _data(now, values=VALUES):
    return {
        name: Series(tag=name, samples=[(now - timedelta(minutes=5), value)])
        for name, value in values.items()
    }


def _square_boxes(resolver: StyleResolver, spec: GeographicalHeatMapSpec):
    _, title_height = elements.title(resolver, spec.title)
    normalized = normalize_regions(
        SQUARES, (resolver.width - spec.right_margin, resolver.height - title_height)
    )
    boxes = {}
    for name, path in normalized.items():
        xs = [int(x) for x, _ in path]
        ys = [int(y + title_height) for _, y in path]
        boxes[name] = (min(xs), min(ys), max(xs), max(ys))
    return boxes


@pytest.mark.parametrize("palette", ["Light", "Dark"])
def test_four_squares_pixels(palette: str, now) -> None:
    """Four adjacent unit squares, one value each, under both palettes."""
    style = Style(system_palette=palette, resolution=(320, 240), timezone="UTC")
    resolver = StyleResolver(style)
    spec = _spec(colormap="Blues", bounds=(0, 5))
    canvas = dispatch.render(spec, resolver, _data(now), now)
    colormap = build_colormap("Blues", (0, 5))

    for name, (x0, y0, x1, y1) in _square_boxes(resolver, spec).items():
        side = x1 - x0
        assert side > 40
        probe = (x0 + side // 5, y0 + side // 5)
        assert canvas.getpixel(probe) == color_for(VALUES[name], colormap), name

    assert canvas.getpixel((319, 239)) == resolver.background_color()


@pytest.mark.parametrize("palette", ["Light", "Dark"])
def test_four_squares_match_reference(palette: str, now) -> None:
    style = Style(system_palette=palette, resolution=(320, 240), timezone="UTC")
    spec = _spec(colormap="Blues", bounds=(0, 5))
    canvas = dispatch.render(spec, StyleResolver(style), _data(now), now)
    assert_matches_reference(canvas, f"geo_squares_{palette.lower()}")


def test_layout_labels_borders_and_missing_regions(light_style: Style, now) -> None:
    resolver = StyleResolver(light_style)
    spec = _spec(precision=1, colored_tag_values=["d"])
    instructions = layout(spec, resolver, _data(now, {"a": 1.0, "b": 2.0, "d": 4.0}), now)

    labels = [i.text for i in instructions if isinstance(i, Text) and i.color == (0, 0, 0)]
    assert {"1.0", "2.0", "4.0"} <= set(labels)
    assert "3.0" not in labels

    missing = [i for i in instructions if isinstance(i, Polygon) and i.fill == (192, 192, 192)]
    assert len(missing) == 1

    borders = [i for i in instructions if isinstance(i, Line) and len(i.points) == 5]
    assert len(borders) == 4
    assert {(b.color, b.width) for b in borders} == {
        ((32, 32, 32), 1),
        (resolver.color_for_series_index(0), 2),
    }


def test_auto_bounds_span_the_values(light_style: Style, now) -> None:
    resolver = StyleResolver(light_style)
    spec = _spec(colormap="Reds")
    instructions = layout(spec, resolver, _data(now), now)
    fills = {i.fill for i in instructions if isinstance(i, Polygon)}
    reds = build_colormap("Reds")
    assert color_for(0.0, reds) in fills
    assert color_for(1.0, reds) in fills


def test_isometric_layout_and_missing_regions_error(light_style: Style, now) -> None:
    resolver = StyleResolver(light_style)
    instructions = layout(_spec(isometric=True), resolver, _data(now), now)
    assert len([i for i in instructions if isinstance(i, Polygon)]) == 4
    with pytest.raises(RenderError):
        layout(GeographicalHeatMapSpec(title="Empty"), resolver, {}, now)


def test_region_smaller_than_a_pixel_keeps_the_map(light_style: Style, now) -> None:
    """A tiny room next to a large one is drawn and labeled, not fatal."""
    spec = GeographicalHeatMapSpec(
        title="Rooms",
        precision=2,
        bounds=(0, 10),
        regions=[
            {"name": "big", "coordinates": [(0, 0), (100, 0), (100, 100), (0, 100)]},
            {"name": "closet", "coordinates": [(0, 0), (0.3, 0), (0.3, 0.3), (0, 0.3)]},
        ],
    )
    resolver = StyleResolver(light_style)
    data = _data(now, {"big": 1.25, "closet": 3.75})
    instructions = layout(spec, resolver, data, now)

    labels = {
        i.text: i.position
        for i in instructions
        if isinstance(i, Text) and i.text in ("1.25", "3.75")
    }
    assert set(labels) == {"1.25", "3.75"}
    _, title_height = elements.title(resolver, spec.title)
    big_x, big_y = labels["1.25"]
    closet_x, closet_y = labels["3.75"]
    assert closet_y > title_height
    assert closet_x < big_x and closet_y < big_y
    assert dispatch.render(spec, resolver, data, now).size == (320, 240)
