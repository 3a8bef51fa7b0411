import pytest

from conftest import inside_canvas

MEASURED = {"showMeasurements": True}


def test_rectangular_prism_has_three_faces_and_labels(render):
    scene = render("rectangularPrism", {"length": 8, "width": 6, "height": 10}, MEASURED)

    assert len(scene.primitives(role="face")) == 3
    assert sorted(scene.texts("measurement")) == ["h = 10", "l = 8", "w = 6"]
    assert len(scene.primitives(role="hidden")) == 3


def test_prism_faces_paint_front_top_right(render):
    scene = render("rectangularPrism", {"length": 4, "width": 2, "height": 3})
    front, top, right = scene.primitives(role="face")

    # Front face is an axis aligned rectangle; the top sits above it
    assert len({round(y, 6) for _, y in front.points}) == 2
    assert min(y for _, y in top.points) < min(y for _, y in front.points)
    assert max(x for x, _ in right.points) > max(x for x, _ in front.points)


def test_prism_depth_uses_isometric_offset(render):
    scene = render("rectangularPrism", {"length": 4, "width": 2, "height": 3})
    scale = scene.meta["scale"]
    front, top, _ = scene.primitives(role="face")

    front_top_left = front.points[3]
    back_top_left = top.points[3]
    assert back_top_left[0] - front_top_left[0] == pytest.approx(2 * scale * 0.5)
    assert front_top_left[1] - back_top_left[1] == pytest.approx(2 * scale * 0.3)


def test_cube_has_single_side_label(render):
    scene = render("cube", {"side": 4}, MEASURED, unit="cm")

    assert len(scene.primitives(role="face")) == 3
    assert scene.texts("measurement") == ["s = 4 cm"]


def test_cylinder_parts(render):
    scene = render("cylinder", {"radius": 3, "height": 6}, MEASURED)
    faces = scene.primitives(role="face")
    rim = scene.primitives(role="rim")[0]

    assert [f.kind for f in faces] == ["ellipse", "polygon"]
    assert faces[0].ry == pytest.approx(faces[0].rx * 0.3)
    assert (rim.start, rim.end) == (180, 360)
    assert scene.texts("measurement") == ["r = 3", "h = 6"]


def test_cone_parts_and_slant_label(render):
    scene = render("cone", {"radius": 3, "height": 5, "slantHeight": 5.83}, MEASURED)

    assert [f.kind for f in scene.primitives(role="face")] == ["ellipse", "polygon", "polygon"]
    assert len(scene.primitives(role="construction")) == 2
    assert scene.texts("measurement") == ["h = 5", "r = 3", "l = 5.83"]


def test_cone_without_slant_height(render):
    scene = render("cone", {"radius": 3, "height": 5}, MEASURED)

    assert scene.texts("measurement") == ["h = 5", "r = 3"]


def test_sphere_gradient_and_equator(render):
    scene = render("sphere", {"radius": 4}, MEASURED)
    ball = scene.primitives(role="face")[0]
    equator = scene.primitives(role="equator")[0]
    gradient = scene.defs[0]

    assert ball.kind == "circle"
    assert ball.r == pytest.approx(4 * scene.meta["scale"])
    assert ball.style.fill == f"url(#{gradient.id})"
    assert (gradient.cx, gradient.cy, gradient.r) == (0.3, 0.3, 0.7)
    assert equator.ry == pytest.approx(equator.rx * 0.3)
    assert equator.style.opacity == 0.5
    assert scene.texts("measurement") == ["r = 4"]


def test_sphere_scale_is_capped(render):
    scene = render("sphere", {"radius": 0.5})

    assert scene.meta["scale"] == 60


def test_triangular_prism_and_pyramid_labels(render):
    prism = render("triangularPrism", {"base": 6, "height": 4, "length": 8}, MEASURED)
    pyramid = render("pyramid", {"base": 4, "height": 6}, MEASURED)

    assert len(prism.primitives(role="face")) == 2
    assert prism.texts("measurement") == ["b = 6", "h = 4", "l = 8"]
    assert len(pyramid.primitives(role="face")) == 3
    assert pyramid.primitives(role="hidden")
    assert pyramid.texts("measurement") == ["b = 4", "h = 6"]


def test_composite_stacks_hemisphere_on_cylinder(render):
    scene = render("composite", {"radius": 2, "cylinderHeight": 5}, MEASURED)
    cap = scene.primitives(role="face", kind="path")[0]
    body = scene.primitives(role="face", kind="polygon")[0]

    assert (cap.start, cap.end) == (0, 180)
    assert cap.cy == pytest.approx(min(y for _, y in body.points))
    assert scene.texts("measurement") == ["r = 2", "h = 5"]


def test_prism_net_has_six_faces(render):
    scene = render("rectangularPrism", {"length": 4, "width": 2, "height": 3},
                   {"showNetDiagram": True, "showMeasurements": True})

    assert len(scene.primitives(role="net-face")) == 6
    assert scene.primitives(role="face") == []
    assert sorted(scene.texts("measurement")) == ["h = 3", "l = 4", "w = 2"]


def test_cylinder_net_rectangle_and_circles(render):
    scene = render("cylinder", {"radius": 1, "height": 4}, {"showNetDiagram": True})
    kinds = sorted(p.kind for p in scene.primitives(role="net-face"))

    assert kinds == ["circle", "circle", "polygon"]


def test_net_unavailable_for_sphere(render):
    scene = render("sphere", {"radius": 2}, {"showNetDiagram": True})

    assert scene.warnings
    assert len(scene.primitives(role="face")) == 1


def test_flat_fallback_without_perspective(render):
    scene = render("cube", {"side": 3}, {"show3DPerspective": False})

    assert len(scene.primitives(role="face")) == 1
    assert scene.primitives(role="hidden") == []


def test_background_grid(render):
    scene = render("cylinder", config={"showGrid": True})

    assert scene.primitives(role="grid")


@pytest.mark.parametrize(
    "shape, measurements",
    [
        ("rectangularPrism", {"length": 8, "width": 6, "height": 10}),
        ("rectangularPrism", {"length": 20, "width": 1, "height": 1}),
        ("cube", {"side": 5}),
        ("cylinder", {"radius": 3, "height": 6}),
        ("cylinder", {"radius": 8, "height": 1}),
        ("cone", {"radius": 2, "height": 9}),
        ("sphere", {"radius": 4}),
        ("triangularPrism", {"base": 6, "height": 4, "length": 8}),
        ("pyramid", {"base": 4, "height": 6}),
        ("pyramid", {"base": 8, "height": 1}),
        ("composite", {"radius": 3, "cylinderHeight": 5}),
    ],
)
@pytest.mark.parametrize("config", [{}, {"show3DPerspective": False}, {"showNetDiagram": True}])
def test_solids_stay_inside_canvas(render, shape, measurements, config):
    scene = render(shape, measurements, config)

    assert not scene.is_empty
    assert inside_canvas(scene)
