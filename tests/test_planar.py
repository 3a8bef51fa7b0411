import pytest

from conftest import inside_canvas
from core.themes import get_theme

MEASURED = {"showMeasurements": True}


def test_rectangle_labels_length_and_width(render):
    scene = render("rectangle", {"length": 5, "width": 3}, MEASURED, unit="cm")

    assert len(scene.primitives(role="face")) == 1
    assert scene.texts("measurement") == ["l = 5 cm", "w = 3 cm"]


def test_rectangle_without_measurements_has_no_labels(render):
    scene = render("rectangle", {"length": 5, "width": 3})

    assert scene.texts("measurement") == []


def test_rectangle_fits_axis_by_axis(render):
    scene = render("rectangle", {"length": 12, "width": 2})
    face = scene.primitives(role="face")[0]
    xs = [p[0] for p in face.points]

    # 300px wide canvas: 80% of it is spent on the long side
    assert max(xs) - min(xs) == pytest.approx(240)
    assert inside_canvas(scene)


def test_small_shapes_are_capped_at_eighty_pixels_per_unit(render):
    scene = render("square", {"side": 1})
    face = scene.primitives(role="face")[0]
    xs = [p[0] for p in face.points]

    assert max(xs) - min(xs) == pytest.approx(80)


def test_square_shows_one_side_label(render):
    scene = render("square", {"side": 4}, MEASURED)

    assert scene.texts("measurement") == ["s = 4"]


def test_show_labels_adds_vertex_letters(render):
    scene = render("rectangle", config={"showLabels": True})

    assert scene.texts("label") == ["A", "B", "C", "D"]


def test_highlight_area_uses_accent_fill(render):
    scene = render("triangle", config={"highlightArea": True})

    assert scene.primitives(role="face")[0].style.fill == get_theme().accent_color


def test_triangle_has_dashed_altitude(render):
    scene = render("triangle", {"base": 6, "height": 4}, MEASURED)
    construction = scene.primitives(role="construction")

    assert len(construction) == 1
    assert construction[0].style.dash == "5,5"
    assert scene.texts("measurement") == ["b = 6", "h = 4"]


def test_parallelogram_and_trapezoid_labels(render):
    parallelogram = render("parallelogram", {"base": 6, "height": 4}, MEASURED)
    trapezoid = render("trapezoid", {"base1": 8, "base2": 4, "height": 5}, MEASURED)

    assert parallelogram.texts("measurement") == ["b = 6", "h = 4"]
    assert trapezoid.texts("measurement") == ["b1 = 8", "b2 = 4", "h = 5"]


def test_right_triangle_marks_missing_side(render):
    scene = render("right-triangle", {"sides": {"a": 3, "b": 4, "missing": "c"}}, MEASURED)

    assert scene.texts("measurement") == ["a = 3", "b = 4", "c = ?"]
    assert len(scene.primitives(role="mark")) == 1


def test_right_triangle_derives_leg_from_hypotenuse(render):
    scene = render("right-triangle", {"sides": {"b": 4, "c": 5, "missing": "a"}}, MEASURED)
    face = scene.primitives(role="face")[0]
    ys = [p[1] for p in face.points]
    xs = [p[0] for p in face.points]

    assert "a = ?" in scene.texts("measurement")
    assert (max(ys) - min(ys)) / (max(xs) - min(xs)) == pytest.approx(3 / 4)


def test_circle_uses_square_canvas_and_radius_label(render):
    scene = render("circle", {"radius": 5}, MEASURED, unit="cm")
    circle = scene.primitives(role="face")[0]

    assert (scene.width, scene.height) == (350, 350)
    assert circle.r == pytest.approx(350 * 0.8 / 2)
    assert scene.texts("measurement") == ["r = 5 cm"]


def test_circle_coordinate_mode_draws_axes_and_center(render):
    scene = render("circle", {"radius": 3, "centerX": 2, "centerY": -1}, {"coordinateMode": True})

    assert len(scene.primitives(role="axis")) == 2
    assert "(2, -1)" in scene.texts("label")
    assert inside_canvas(scene)


@pytest.mark.parametrize(
    "shape",
    ["rectangle", "square", "triangle", "circle", "parallelogram", "trapezoid", "right-triangle"],
)
def test_planar_shapes_stay_inside_canvas(render, shape):
    scene = render(shape, config={"showLabels": True, "showGrid": True})

    assert not scene.warnings
    assert inside_canvas(scene)


@pytest.mark.parametrize("uniform, height", [(True, 24), (False, 80)])
def test_uniform_scale_switch(render, uniform, height):
    scene = render("rectangle", {"length": 10, "width": 1}, {"uniformScale": uniform})
    ys = [p[1] for p in scene.primitives(role="face")[0].points]
    xs = [p[0] for p in scene.primitives(role="face")[0].points]

    assert max(xs) - min(xs) == pytest.approx(240)
    assert max(ys) - min(ys) == pytest.approx(height)
    assert inside_canvas(scene)


def test_uniform_scale_is_the_default(render):
    default = render("rectangle", {"length": 10, "width": 1})
    uniform = render("rectangle", {"length": 10, "width": 1}, {"uniformScale": True})

    assert default.primitives(role="face")[0].points == uniform.primitives(role="face")[0].points


def test_regular_polygon_has_flat_bottom(render):
    scene = render("polygon", {"sides": 6, "sideLength": 4}, MEASURED, unit="cm")
    corners = scene.primitives(role="face")[0].points

    assert len(corners) == 6
    assert corners[0][1] == pytest.approx(corners[1][1])
    assert scene.texts("measurement") == ["s = 4 cm"]
    assert (scene.width, scene.height) == (350, 350)


def test_polygon_defaults_to_pentagon(render):
    assert len(render("polygon").primitives(role="face")[0].points) == 5


def test_polygon_with_too_few_sides_warns(render):
    scene = render("polygon", {"sides": 2})

    assert scene.warnings
    assert len(scene.primitives(role="face")[0].points) == 5


def test_polygon_through_vertices(render):
    vertices = [{"x": 0, "y": 0}, {"x": 4, "y": 0}, {"x": 4, "y": 3}]
    scene = render("polygon", {"vertices": vertices}, MEASURED | {"showLabels": True}, unit="cm")

    assert len(scene.primitives(role="face")[0].points) == 3
    assert scene.texts("measurement") == ["4 cm", "3 cm", "5 cm"]
    assert scene.texts("label") == ["A", "B", "C"]
    assert inside_canvas(scene)
