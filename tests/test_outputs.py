from concurrent.futures import ThreadPoolExecutor
from xml.etree import ElementTree as ET

import pytest

from formatting.raster_preview import to_png
from formatting.svg_builder import SVG_NS, to_svg
from schemas.diagram import RenderRequest
from tools.render_diagram_tool import render_diagram_from_payload

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def _tag(name):
    return f"{{{SVG_NS}}}{name}"


def test_svg_document_layout(engine):
    scene = engine.render(RenderRequest(shape="rectangle", svg_id="rect-a", config={"showMeasurements": True}))
    root = ET.fromstring(to_svg(scene))

    assert root.tag == _tag("svg")
    assert root.get("width") == "300"
    assert root.get("viewBox") == "0 0 300 200"
    assert root.find(_tag("rect")).get("fill") == "#ffffff"
    group = root.find(_tag("g"))
    assert group.get("id") == "rect-a"
    assert [t.text for t in group.iter(_tag("text"))] == ["l = 5", "w = 3"]


def test_svg_sphere_carries_gradient(engine):
    scene = engine.render(RenderRequest(shape="sphere", svg_id="ball"))
    root = ET.fromstring(to_svg(scene))

    gradient = root.find(f"{_tag('defs')}/{_tag('radialGradient')}")
    assert gradient.get("cx") == "30%"
    assert len(gradient.findall(_tag("stop"))) == 3
    circle = root.find(f".//{_tag('circle')}")
    assert circle.get("fill") == f"url(#{gradient.get('id')})"


def test_svg_sector_path(engine):
    scene = engine.render(RenderRequest(shape="sector", measurements={"radius": 5, "angle": 270}))
    root = ET.fromstring(to_svg(scene))
    paths = root.findall(f".//{_tag('path')}")

    assert len(paths) == 1
    assert paths[0].get("d").startswith("M ")
    assert paths[0].get("d").endswith("Z")


def test_svg_dashes_and_classes(engine):
    scene = engine.render(RenderRequest(shape="triangle"))
    root = ET.fromstring(to_svg(scene))
    construction = [el for el in root.iter(_tag("line")) if el.get("class") == "construction"]

    assert construction[0].get("stroke-dasharray") == "5,5"


def test_empty_scene_serializes(engine):
    scene = engine.render(RenderRequest(shape="nonsense"))
    root = ET.fromstring(to_svg(scene))

    assert list(root.find(_tag("g"))) == []


@pytest.mark.parametrize("shape", ["sphere", "sector", "coordinate-plane", "symmetry-drawing", "nonsense"])
def test_png_preview(engine, shape):
    scene = engine.render(RenderRequest(shape=shape, config={"showMeasurements": True}))
    data = to_png(scene, dpi=72)

    assert data.startswith(PNG_MAGIC)


def test_tool_writes_svg(tmp_path):
    output = render_diagram_from_payload(
        {"shape": "cube", "measurements": {"side": 3}, "config": {"showMeasurements": True}},
        tmp_path / "out" / "cube.svg",
    )

    assert output.exists()
    assert "s = 3" in output.read_text(encoding="utf-8")


def test_tool_writes_png(tmp_path):
    output = render_diagram_from_payload({"shape": "cone"}, tmp_path / "cone.png", fmt="PNG")

    assert output.read_bytes().startswith(PNG_MAGIC)


def test_tool_rejects_unknown_format(tmp_path):
    with pytest.raises(ValueError):
        render_diagram_from_payload({"shape": "cone"}, tmp_path / "cone.gif", fmt="gif")


def test_png_preview_leaves_pyplot_state_alone(engine):
    from matplotlib import pyplot as plt

    before = plt.get_fignums()
    to_png(engine.render(RenderRequest(shape="cube")), dpi=72)

    assert plt.get_fignums() == before


def test_png_previews_render_concurrently(engine):
    scenes = [engine.render(RenderRequest(shape=shape)) for shape in ("sphere", "sector", "similarity", "transformation")]

    with ThreadPoolExecutor(max_workers=4) as pool:
        images = list(pool.map(lambda scene: to_png(scene, dpi=72), scenes * 2))

    assert len(images) == 8
    assert all(image.startswith(PNG_MAGIC) for image in images)
