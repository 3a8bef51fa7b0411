"""
scene.py

Scene graph produced by the rendering engine. Every primitive already carries
canvas-space coordinates (pixels, y growing downward) and a resolved style,
so serializers only translate; they never compute geometry.

Primitives are tagged with a ``role`` ("face", "measurement", "grid", ...)
which lets callers and tests query a drawing without caring about paint
order details.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

import numpy as np

Point = Tuple[float, float]


@dataclass
class Style:
    stroke: Optional[str] = None
    stroke_width: float = 0.0
    fill: Optional[str] = None
    fill_opacity: float = 1.0
    opacity: float = 1.0
    dash: Optional[str] = None
    font_size: Optional[float] = None
    font_family: Optional[str] = None
    font_weight: Optional[str] = None


@dataclass
class Primitive:
    style: Style = field(default_factory=Style)
    role: str = "shape"

    kind = "primitive"

    def extent_points(self) -> np.ndarray:
        """Points whose bounding box covers the primitive."""
        return np.empty((0, 2))


@dataclass
class Line(Primitive):
    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0

    kind = "line"

    @property
    def length(self) -> float:
        return math.hypot(self.x2 - self.x1, self.y2 - self.y1)

    def extent_points(self) -> np.ndarray:
        return np.array([[self.x1, self.y1], [self.x2, self.y2]], dtype=float)


@dataclass
class Polyline(Primitive):
    points: List[Point] = field(default_factory=list)

    kind = "polyline"

    def extent_points(self) -> np.ndarray:
        return np.array(self.points, dtype=float).reshape(-1, 2)


@dataclass
class Polygon(Polyline):
    kind = "polygon"


@dataclass
class Circle(Primitive):
    cx: float = 0.0
    cy: float = 0.0
    r: float = 0.0

    kind = "circle"

    def extent_points(self) -> np.ndarray:
        return np.array([[self.cx - self.r, self.cy - self.r],
                         [self.cx + self.r, self.cy + self.r]], dtype=float)


@dataclass
class Ellipse(Primitive):
    cx: float = 0.0
    cy: float = 0.0
    rx: float = 0.0
    ry: float = 0.0

    kind = "ellipse"

    def extent_points(self) -> np.ndarray:
        return np.array([[self.cx - self.rx, self.cy - self.ry],
                         [self.cx + self.rx, self.cy + self.ry]], dtype=float)


@dataclass
class ArcPath(Primitive):
    """
    Elliptical arc from ``start`` to ``end`` degrees, measured
    counter-clockwise as seen on screen. ``closed`` turns it into a wedge
    through the center (sector).
    """

    cx: float = 0.0
    cy: float = 0.0
    rx: float = 0.0
    ry: float = 0.0
    start: float = 0.0
    end: float = 90.0
    closed: bool = False

    kind = "path"

    @property
    def span(self) -> float:
        return self.end - self.start

    @property
    def large_arc(self) -> int:
        return 1 if self.span > 180 else 0

    def point_at(self, degrees: float) -> Point:
        theta = math.radians(degrees)
        return (self.cx + self.rx * math.cos(theta), self.cy - self.ry * math.sin(theta))

    @property
    def d(self) -> str:
        """SVG path data. Sweep flag 0 draws counter-clockwise on screen."""
        end = self.end if self.span < 360 else self.start + 359.99
        sx, sy = self.point_at(self.start)
        ex, ey = self.point_at(end)
        arc = f"A {fmt_coord(self.rx)} {fmt_coord(self.ry)} 0 {self.large_arc} 0 {fmt_coord(ex)} {fmt_coord(ey)}"
        if self.closed:
            return f"M {fmt_coord(self.cx)} {fmt_coord(self.cy)} L {fmt_coord(sx)} {fmt_coord(sy)} {arc} Z"
        return f"M {fmt_coord(sx)} {fmt_coord(sy)} {arc}"

    def sample(self, count: int = 48) -> np.ndarray:
        angles = np.radians(np.linspace(self.start, self.end, count))
        xs = self.cx + self.rx * np.cos(angles)
        ys = self.cy - self.ry * np.sin(angles)
        return np.column_stack([xs, ys])

    def extent_points(self) -> np.ndarray:
        pts = self.sample()
        if self.closed:
            pts = np.vstack([pts, [[self.cx, self.cy]]])
        return pts


@dataclass
class Text(Primitive):
    x: float = 0.0
    y: float = 0.0
    text: str = ""
    anchor: str = "middle"

    kind = "text"

    def extent_points(self) -> np.ndarray:
        return np.array([[self.x, self.y]], dtype=float)


@dataclass
class Group(Primitive):
    id: Optional[str] = None
    children: List[Primitive] = field(default_factory=list)

    kind = "group"

    def add(self, primitive: Primitive) -> Primitive:
        self.children.append(primitive)
        return primitive

    def walk(self) -> Iterator[Primitive]:
        for child in self.children:
            yield child
            if isinstance(child, Group):
                yield from child.walk()


@dataclass
class GradientStop:
    offset: float
    color: str
    opacity: float = 1.0


@dataclass
class RadialGradient:
    id: str
    cx: float = 0.5
    cy: float = 0.5
    r: float = 0.5
    stops: List[GradientStop] = field(default_factory=list)


@dataclass
class SceneGraph:
    """Output of one render call."""

    width: float
    height: float
    root: Group
    background: Optional[str] = None
    defs: List[RadialGradient] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> Optional[str]:
        return self.root.id

    @property
    def is_empty(self) -> bool:
        return not self.root.children

    def iter_primitives(self, role: Optional[str] = None,
                        kind: Optional[str] = None) -> Iterator[Primitive]:
        for primitive in self.root.walk():
            if isinstance(primitive, Group):
                continue
            if role is not None and primitive.role != role:
                continue
            if kind is not None and primitive.kind != kind:
                continue
            yield primitive

    def primitives(self, role: Optional[str] = None, kind: Optional[str] = None) -> List[Primitive]:
        return list(self.iter_primitives(role=role, kind=kind))

    def texts(self, role: Optional[str] = None) -> List[str]:
        return [p.text for p in self.iter_primitives(role=role, kind="text")]

    def bounds(self, include_text: bool = False) -> Optional[Tuple[float, float, float, float]]:
        """(min_x, min_y, max_x, max_y) of every drawn coordinate, or None."""
        chunks: List[np.ndarray] = []
        for primitive in self.iter_primitives():
            if primitive.kind == "text" and not include_text:
                continue
            pts = primitive.extent_points()
            if pts.size:
                chunks.append(pts)
        if not chunks:
            return None
        stacked = np.vstack(chunks)
        mins = stacked.min(axis=0)
        maxs = stacked.max(axis=0)
        return float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1])


def fmt_coord(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text

