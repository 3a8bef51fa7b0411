import pytest
from pydantic import ValidationError

from schemas.diagram import CoordinateData, DiagramConfig, RenderRequest


def test_config_accepts_camel_case_and_snake_case():
    camel = DiagramConfig.model_validate({"showMeasurements": True, "show3DPerspective": False})
    snake = DiagramConfig(show_measurements=True, show_3d_perspective=False)

    assert camel.show_measurements is True
    assert camel.show_3d_perspective is False
    assert camel.show_measurements == snake.show_measurements


def test_config_defaults():
    config = DiagramConfig()

    assert config.size == "medium"
    assert config.theme == "educational"
    assert config.show_measurements is False
    assert config.show_grid is None
    assert config.center is True
    assert config.show_3d_perspective is True
    assert config.uniform_scale is True
    assert config.show_correspondence is False


def test_scale_and_correspondence_switches():
    config = DiagramConfig.model_validate({"uniformScale": False, "showCorrespondence": True})

    assert config.uniform_scale is False
    assert config.show_correspondence is True
    assert config.option("uniformScale") is False


def test_config_option_reads_extras_and_fields():
    config = DiagramConfig.model_validate({"showParallelMarks": False, "showGrid": True})

    assert config.option("showParallelMarks", True) is False
    assert config.option("showGrid") is True
    assert config.option("show_grid") is True
    assert config.option("highlightIntersections", True) is True


def test_config_option_treats_none_as_missing():
    config = DiagramConfig.model_validate({"coordinateRange": None})

    assert config.option("coordinateRange", 10) == 10
    assert config.option("problemType", "plotPoints") == "plotPoints"


def test_bare_number_range_is_symmetric():
    config = DiagramConfig.model_validate({"xRange": 6, "yRange": [-2, 8]})

    assert config.x_range == [-6, 6]
    assert config.y_range == [-2, 8]


def test_request_is_frozen():
    request = RenderRequest(shape="square")

    with pytest.raises(ValidationError):
        request.shape = "circle"


def test_request_requires_shape():
    with pytest.raises(ValidationError):
        RenderRequest(measurements={"side": 4})


def test_request_blank_unit_and_lookup_helpers():
    request = RenderRequest(shape="circle", unit=None, measurements={"radius": 2}, data={"element": "ray"})

    assert request.unit == ""
    assert request.measure("radius", 3) == 2
    assert request.measure("diameter", 6) == 6
    assert request.datum("element") == "ray"
    assert request.datum("pairCount", 1) == 1


def test_from_payload_folds_unknown_keys_into_data():
    request = RenderRequest.from_payload({
        "type": "geometry-renderer",
        "shape": "parallel-lines",
        "pairCount": 2,
        "config": {"showParallelMarks": False},
        "svgId": "lines-7",
    })

    assert request.shape == "parallel-lines"
    assert request.data == {"pairCount": 2}
    assert request.svg_id == "lines-7"
    assert request.config.option("showParallelMarks", True) is False


def test_from_payload_keeps_explicit_data_over_top_level():
    request = RenderRequest.from_payload({
        "shape": "line-element",
        "element": "ray",
        "data": {"element": "point"},
    })

    assert request.datum("element") == "point"


def test_coordinate_data_folds_two_point_form():
    data = CoordinateData.model_validate({
        "point1": {"x": 1, "y": 2},
        "point2": {"x": 4, "y": 6, "label": "Q"},
        "problemType": "distance",
    })

    points = data.all_points()

    assert [(p.x, p.y, p.label) for p in points] == [(1, 2, "A"), (4, 6, "Q")]
    assert data.problem_type == "distance"


def test_coordinate_data_highlight_label():
    data = CoordinateData.model_validate({"point": {"x": 3, "y": -2}, "pointLabel": "P"})

    assert data.highlighted().label == "P"
    assert CoordinateData().highlighted() is None
