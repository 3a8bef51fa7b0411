"""
svg_builder.py

Turns a SceneGraph into a standalone SVG document. All geometry is already in
canvas pixels, so this module only maps primitives and styles onto elements.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Union
from xml.etree import ElementTree as ET

from renderers.scene import (
    ArcPath,
    Circle,
    Ellipse,
    Group,
    Line,
    Polygon,
    Polyline,
    Primitive,
    SceneGraph,
    Style,
    Text,
    fmt_coord,
)

SVG_NS = "http://www.w3.org/2000/svg"


def _style_attrs(style: Style, is_text: bool = False) -> Dict[str, str]:
    attrs: Dict[str, str] = {}
    if is_text:
        attrs["fill"] = style.fill or "#000000"
        if style.font_size:
            attrs["font-size"] = fmt_coord(style.font_size)
        if style.font_family:
            attrs["font-family"] = style.font_family
        if style.font_weight:
            attrs["font-weight"] = style.font_weight
        return attrs

    attrs["fill"] = style.fill or "none"
    if style.fill and style.fill != "none" and style.fill_opacity != 1.0:
        attrs["fill-opacity"] = fmt_coord(style.fill_opacity)
    if style.stroke:
        attrs["stroke"] = style.stroke
        attrs["stroke-width"] = fmt_coord(style.stroke_width)
    if style.dash:
        attrs["stroke-dasharray"] = style.dash
    if style.opacity != 1.0:
        attrs["opacity"] = fmt_coord(style.opacity)
    return attrs


def _points_attr(points) -> str:
    return " ".join(f"{fmt_coord(x)},{fmt_coord(y)}" for x, y in points)


def _append(parent: ET.Element, primitive: Primitive) -> None:
    attrs: Dict[str, str] = {}
    if primitive.role:
        attrs["class"] = primitive.role

    if isinstance(primitive, Group):
        if primitive.id:
            attrs["id"] = primitive.id
        group = ET.SubElement(parent, "g", attrs)
        for child in primitive.children:
            _append(group, child)
        return

    if isinstance(primitive, Text):
        attrs.update(x=fmt_coord(primitive.x), y=fmt_coord(primitive.y))
        attrs["text-anchor"] = primitive.anchor
        attrs.update(_style_attrs(primitive.style, is_text=True))
        element = ET.SubElement(parent, "text", attrs)
        element.text = primitive.text
        return

    attrs.update(_style_attrs(primitive.style))
    if isinstance(primitive, Line):
        attrs.update(x1=fmt_coord(primitive.x1), y1=fmt_coord(primitive.y1),
                     x2=fmt_coord(primitive.x2), y2=fmt_coord(primitive.y2))
        ET.SubElement(parent, "line", attrs)
    elif isinstance(primitive, Polygon):
        attrs["points"] = _points_attr(primitive.points)
        ET.SubElement(parent, "polygon", attrs)
    elif isinstance(primitive, Polyline):
        attrs["points"] = _points_attr(primitive.points)
        ET.SubElement(parent, "polyline", attrs)
    elif isinstance(primitive, Circle):
        attrs.update(cx=fmt_coord(primitive.cx), cy=fmt_coord(primitive.cy), r=fmt_coord(primitive.r))
        ET.SubElement(parent, "circle", attrs)
    elif isinstance(primitive, Ellipse):
        attrs.update(cx=fmt_coord(primitive.cx), cy=fmt_coord(primitive.cy),
                     rx=fmt_coord(primitive.rx), ry=fmt_coord(primitive.ry))
        ET.SubElement(parent, "ellipse", attrs)
    elif isinstance(primitive, ArcPath):
        attrs["d"] = primitive.d
        ET.SubElement(parent, "path", attrs)
    else:
        raise TypeError(f"cannot serialize primitive of kind {primitive.kind!r}")


def to_element(scene: SceneGraph) -> ET.Element:
    width, height = fmt_coord(scene.width), fmt_coord(scene.height)
    svg = ET.Element(
        "svg",
        {
            "xmlns": SVG_NS,
            "version": "1.1",
            "width": width,
            "height": height,
            "viewBox": f"0 0 {width} {height}",
        },
    )
    if scene.defs:
        defs = ET.SubElement(svg, "defs")
        for gradient in scene.defs:
            node = ET.SubElement(defs, "radialGradient", {
                "id": gradient.id,
                "cx": f"{fmt_coord(gradient.cx * 100)}%",
                "cy": f"{fmt_coord(gradient.cy * 100)}%",
                "r": f"{fmt_coord(gradient.r * 100)}%",
            })
            for stop in gradient.stops:
                ET.SubElement(node, "stop", {
                    "offset": f"{fmt_coord(stop.offset * 100)}%",
                    "stop-color": stop.color,
                    "stop-opacity": fmt_coord(stop.opacity),
                })
    if scene.background:
        ET.SubElement(svg, "rect", {"width": "100%", "height": "100%", "fill": scene.background})
    _append(svg, scene.root)
    return svg


def to_svg(scene: SceneGraph) -> str:
    """Serialize a scene graph to SVG markup."""
    return ET.tostring(to_element(scene), encoding="unicode")


def write_svg(scene: SceneGraph, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.write_text(to_svg(scene), encoding="utf-8")
    return path
