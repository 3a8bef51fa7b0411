import pytest

from conftest import inside_canvas
from renderers.engine import DiagramEngine
from renderers.planar import PlanarRenderer
from schemas.diagram import RenderRequest


def test_every_family_is_registered(engine):
    assert engine.family_of("rectangle") == "planar"
    assert engine.family_of("sector") == "advanced"
    assert engine.family_of("coordinate-plane") == "coordinate"
    assert engine.family_of("cylinder") == "three-d"
    assert engine.family_of("hexagonal-prism") is None
    assert engine.family_of("polygon") == "planar"
    for shape in ("transformation", "composite-transformation", "similarity", "congruence"):
        assert engine.family_of(shape) == "advanced"
    assert len(engine.shapes()) == len(set(engine.shapes())) == 44


def test_duplicate_shape_registration_is_rejected():
    with pytest.raises(ValueError):
        DiagramEngine(renderers=[PlanarRenderer(), PlanarRenderer()])


def test_default_ids_count_up_per_engine(engine):
    first = engine.render(RenderRequest(shape="square"))
    second = engine.render(RenderRequest(shape="square"))
    other = DiagramEngine().render(RenderRequest(shape="square"))

    assert (first.id, second.id) == ("square-1", "square-2")
    assert other.id == "square-1"


def test_caller_supplied_id_wins(engine):
    scene = engine.render(RenderRequest(shape="circle", svgId="diagram-q7"))

    assert scene.id == "diagram-q7"


def test_custom_id_factory():
    engine = DiagramEngine(id_factory=lambda shape: f"fixed-{shape}")

    assert engine.render(RenderRequest(shape="cone")).id == "fixed-cone"


def test_identical_requests_render_identically(engine):
    request = RenderRequest(shape="cylinder", measurements={"radius": 2, "height": 7}, svg_id="same")

    assert engine.render(request) == engine.render(request)


def test_canvas_follows_size_family(render):
    assert (render("sphere").width, render("sphere").height) == (300, 200)
    assert (render("circle").width, render("circle").height) == (350, 350)
    assert (render("line-segment").width, render("line-segment").height) == (400, 250)
    assert (render("square", config={"size": "large"}).width) == 400


def test_size_overrides(render):
    family = render("square", config={"diagramFamily": "wide", "size": "small"})
    explicit = render("square", config={"width": 640, "height": 480})

    assert (family.width, family.height) == (300, 200)
    assert (explicit.width, explicit.height) == (640, 480)
    assert inside_canvas(explicit)


def test_theme_is_applied(render):
    scene = render("square", config={"theme": "blueprint"})

    assert scene.background == "#1e3a8a"
    assert scene.primitives(role="face")[0].style.stroke == "#93c5fd"


def test_unknown_theme_falls_back(render):
    scene = render("square", config={"theme": "sepia"})

    assert scene.background == "#ffffff"


def test_unknown_shape_returns_empty_scene(render):
    scene = render("unknown-shape")

    assert scene.is_empty
    assert scene.bounds() is None
    assert any("unknown-shape" in warning for warning in scene.warnings)


def test_failing_draw_routine_becomes_warning(render):
    scene = render("sphere", {"radius": 0})

    assert any("failed" in warning for warning in scene.warnings)


def test_render_payload(engine):
    scene = engine.render_payload({
        "type": "geometry-renderer",
        "shape": "line-element",
        "element": "ray",
        "svgId": "ray-1",
    })

    assert scene.id == "ray-1"
    assert len(scene.primitives(role="arrow")) == 1


MEASURED_SHAPES = {
    "rectangle": {},
    "square": {},
    "triangle": {},
    "circle": {},
    "parallelogram": {},
    "trapezoid": {},
    "right-triangle": {"sides": {"a": 6, "b": 8}},
    "polygon": {"sideLength": 4},
    "arc": {},
    "sector": {},
    "inscribed-square": {},
    "circumscribed-circle": {},
    "tangent": {},
    "angle": {},
    "complementary-angles": {},
    "supplementary-angles": {},
    "triangle-angles": {},
    "line-segment": {},
    "transformation": {},
    "composite-transformation": {},
    "similarity": {},
    "congruence": {},
    "rectangularPrism": {},
    "cube": {},
    "cylinder": {},
    "cone": {},
    "sphere": {},
    "triangularPrism": {},
    "pyramid": {},
    "composite": {},
}


@pytest.mark.parametrize("shape", sorted(MEASURED_SHAPES))
def test_measurement_labels_follow_switch(render, shape):
    shown = render(shape, MEASURED_SHAPES[shape], {"showMeasurements": True})
    hidden = render(shape, MEASURED_SHAPES[shape], {"showMeasurements": False})

    assert shown.texts("measurement")
    assert hidden.texts("measurement") == []


@pytest.mark.parametrize("shape", DiagramEngine().shapes())
@pytest.mark.parametrize("size", ["small", "medium", "large"])
def test_no_shape_overflows_canvas(render, shape, size):
    scene = render(shape, config={"size": size})

    assert inside_canvas(scene)


# ----- end to end scenarios ----- #

def test_scenario_sphere(render):
    scene = render("sphere", {"radius": 4}, {"showMeasurements": True})
    circles = scene.primitives(role="face", kind="circle")

    assert len(circles) == 1
    assert circles[0].r == pytest.approx(4 * scene.meta["scale"])
    assert len(scene.primitives(kind="ellipse")) == 1
    assert scene.texts("measurement") == ["r = 4"]


def test_scenario_sector(render):
    scene = render("sector", {"radius": 5, "angle": 200}, {"showMeasurements": True}, unit="cm")

    assert scene.primitives(kind="path")[0].large_arc == 1
    assert "r = 5 cm" in scene.texts("measurement")
    assert "200°" in scene.texts("measurement")


def test_scenario_coordinate_growth(render):
    scene = render("coordinate-plane", data={"point": {"x": 12, "y": 12}, "coordinateRange": 10})
    x_min, x_max = scene.meta["x_range"]

    assert x_min <= -10 and x_max >= 13


def test_scenario_prism(render):
    scene = render("rectangularPrism", {"length": 8, "width": 6, "height": 10}, {"showMeasurements": True})

    assert len(scene.primitives(role="face")) == 3
    assert len(scene.texts("measurement")) == 3


def test_scenario_unknown_shape(render):
    scene = render("unknown-shape")

    assert scene.is_empty
    assert scene.warnings
