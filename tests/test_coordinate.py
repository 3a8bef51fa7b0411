import pytest

from conftest import inside_canvas
from renderers.coordinate import PlaneRange, clip_line, expand_range, grid_spacing


def test_expand_range_pads_points_outside():
    expanded = expand_range(PlaneRange(-10, 10, -10, 10), [(12, 12)])

    assert expanded == PlaneRange(-10, 13, -10, 13)


def test_expand_range_leaves_inside_points_alone():
    rng = PlaneRange(-5, 5, -5, 5)

    assert expand_range(rng, [(4.5, -5), (0, 0)]) == rng


def test_expand_range_is_idempotent():
    points = [(-14.5, 3), (2, 22), (7, -8)]
    once = expand_range(PlaneRange(-10, 10, -10, 10), points)

    assert expand_range(once, points) == once
    assert once.x_min <= -14.5 and once.y_max >= 22


def test_grid_spacing_fills_eighty_percent():
    assert grid_spacing(PlaneRange(-10, 10, -10, 10), 350, 350) == pytest.approx(14)


def test_grid_spacing_never_overflows_canvas():
    rng = PlaneRange(-40, 40, -40, 40)
    spacing = grid_spacing(rng, 350, 350)

    assert spacing * (rng.x_max - rng.x_min) <= 350


def test_clip_line_cuts_to_range():
    start, end = clip_line((0, 0), (1, 1), PlaneRange(-5, 5, -3, 3))

    assert start == pytest.approx((-3, -3))
    assert end == pytest.approx((3, 3))


def test_far_point_grows_range(render):
    scene = render("coordinate-plane", data={"point": {"x": 12, "y": 12}, "coordinateRange": 10})

    x_min, x_max = scene.meta["x_range"]
    assert x_min <= -10 and x_max >= 13
    assert len(scene.primitives(role="highlight")) == 1
    assert inside_canvas(scene)


def test_far_plotted_point_grows_range_and_is_drawn(render):
    scene = render("coordinate-plane", data={"points": [{"x": 12, "y": 12}], "coordinateRange": 10})

    assert scene.meta["x_range"] == (-10, 13)
    assert scene.meta["y_range"] == (-10, 13)
    dots = scene.primitives(role="point")
    assert len(dots) == 1
    assert 0 <= dots[0].cx <= scene.width and 0 <= dots[0].cy <= scene.height
    assert inside_canvas(scene)


def test_grid_and_axes_for_default_range(render):
    scene = render("coordinate-plane", data={"points": []})

    assert len(scene.primitives(role="axis", kind="line")) == 2
    assert len(scene.primitives(role="grid")) == 40
    assert len(scene.primitives(role="axis", kind="polygon")) == 2
    assert sorted(scene.texts("axis-label")) == ["x", "y"]


def test_grid_can_be_turned_off(render):
    scene = render("coordinate-plane", config={"showGrid": False})

    assert scene.primitives(role="grid") == []
    assert len(scene.primitives(role="axis", kind="line")) == 2


def test_origin_labelled_once(render):
    scene = render("coordinate-plane", data={"coordinateRange": 5})

    assert scene.texts("tick").count("0") == 1
    assert "5" in scene.texts("tick")


def test_tick_labels_can_be_hidden(render):
    scene = render("coordinate-plane", data={"showGridNumbers": False})

    assert scene.texts("tick") == []


def test_config_range_overrides_default(render):
    scene = render("coordinate-plane", config={"xRange": [-4, 6], "yRange": 3})

    assert scene.meta["x_range"] == (-4, 6)
    assert scene.meta["y_range"] == (-3, 3)


def test_plotting_hides_the_answer_point(render):
    question = render("coordinate-plane", data={"point": {"x": 3, "y": 4}, "problemType": "plotting"})
    answer = render("coordinate-plane", data={"point": {"x": 3, "y": 4}, "problemType": "plotting-answer"})

    assert question.primitives(role="highlight") == []
    assert len(answer.primitives(role="highlight")) == 1
    assert "(3, 4)" in answer.texts("label")


def test_points_are_plotted_and_labelled(render):
    scene = render(
        "coordinate-plane",
        config={"showLabels": True},
        data={"points": [{"x": 1, "y": 2, "label": "P"}, {"x": -3, "y": 4}]},
    )

    assert len(scene.primitives(role="point")) == 2
    assert scene.texts("label") == ["P", "B"]


def test_distance_overlay(render):
    scene = render(
        "coordinate-plane",
        config={"showMeasurements": True},
        data={"points": [{"x": 0, "y": 0}, {"x": 3, "y": 4}], "problemType": "distance"},
    )

    assert len(scene.primitives(role="segment")) == 1
    assert len(scene.primitives(role="construction")) == 1
    assert scene.texts("measurement") == ["d = 5"]


def test_midpoint_overlay(render):
    scene = render(
        "coordinate-plane",
        data={"point1": {"x": -2, "y": 0}, "point2": {"x": 4, "y": 6}, "problemType": "midpoint"},
    )

    assert len(scene.primitives(role="midpoint")) == 1


def test_line_overlay_is_clipped_to_grid(render):
    scene = render(
        "coordinate-plane",
        data={"points": [{"x": 0, "y": 1}, {"x": 1, "y": 3}], "problemType": "slope"},
    )

    line = scene.primitives(role="line")[0]
    assert inside_canvas(scene)
    assert line.length > 0


def test_polygon_overlay(render):
    scene = render(
        "coordinate-plane",
        data={"points": [{"x": 0, "y": 0}, {"x": 4, "y": 0}, {"x": 4, "y": 3}], "problemType": "polygon"},
    )

    assert len(scene.primitives(role="face")) == 1


def test_overlay_with_too_few_points_warns(render):
    scene = render("coordinate-plane", data={"points": [{"x": 1, "y": 1}], "problemType": "distance"})

    assert scene.warnings
    assert scene.primitives(role="segment") == []


def test_invalid_coordinate_data_warns(render):
    scene = render("coordinate-plane", data={"points": "not-a-list"})

    assert scene.warnings
    assert len(scene.primitives(role="axis", kind="line")) == 2


def test_distance_points_shape(render):
    scene = render(
        "distance-points",
        {"points": {"x1": 1, "y1": 1, "x2": 4, "y2": 5, "distance": 5}},
        {"showMeasurements": True},
        unit="units",
    )

    assert scene.texts("measurement") == ["d = 5 units"]
    assert (scene.width, scene.height) == (350, 350)


def test_distance_points_missing_coordinates_warns(render):
    scene = render("distance-points", {"points": {"x1": 1}})

    assert scene.warnings
    assert scene.primitives(role="segment") == []


@pytest.mark.parametrize(
    "points",
    [
        [{"x": 25, "y": -30}],
        [{"x": -3, "y": 3}, {"x": 9.5, "y": 0.5}],
        [{"x": 100, "y": 100}, {"x": -100, "y": -100}],
    ],
)
def test_every_point_lands_on_canvas(render, points):
    scene = render("coordinate-plane", data={"points": points})
    x_min, x_max = scene.meta["x_range"]
    y_min, y_max = scene.meta["y_range"]

    for point in points:
        assert x_min <= point["x"] <= x_max
        assert y_min <= point["y"] <= y_max
    assert inside_canvas(scene)
