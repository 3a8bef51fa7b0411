"""
base.py

Shared plumbing for the four family renderers: the render context handed to
every draw routine (canvas size, theme, config, root group, diagnostics), the
style and label helpers built on the active theme, and the small geometry
helpers (polar points, scale fitting, angle marks, arrowheads) the families
reuse.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from core.themes import Theme
from renderers.scene import (
    ArcPath,
    Circle,
    Ellipse,
    Group,
    Line,
    Polygon,
    Polyline,
    Primitive,
    RadialGradient,
    Style,
    Text,
)
from schemas.diagram import DiagramConfig, RenderRequest

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
DrawFn = Callable[["RenderContext"], None]

# Fraction of the smaller canvas side a figure may occupy; the rest is label room
AVAILABLE_FRACTION = 0.8
PLANAR_SCALE_CLAMP = 80
ANGLE_MARK_RADIUS = 20
RIGHT_ANGLE_MARK = 12
ARROW_LENGTH = 8
ARROW_HALF_WIDTH = 4
LABEL_OFFSET = 15
CONSTRUCTION_DASH = "5,5"
HIDDEN_DASH = "4,3"


# =============================================================================
# FORMATTING
# =============================================================================

def format_number(value: Any) -> str:
    """4.0 -> "4", 2.50 -> "2.5", anything else passes through str()."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return str(value)
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def measurement_text(symbol: str, value: Any, unit: str = "") -> str:
    suffix = f" {unit}" if unit else ""
    return f"{symbol} = {format_number(value)}{suffix}"


def angle_text(degrees: Any) -> str:
    return f"{format_number(degrees)}°"


def as_number(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


# =============================================================================
# GEOMETRY HELPERS
# =============================================================================

def polar(cx: float, cy: float, r: float, degrees: float) -> Point:
    """Point at ``degrees`` counter-clockwise on screen (canvas y grows down)."""
    theta = math.radians(degrees)
    return cx + r * math.cos(theta), cy - r * math.sin(theta)


def direction(start: Point, end: Point) -> float:
    """Screen angle in degrees of the ray start -> end."""
    return math.degrees(math.atan2(-(end[1] - start[1]), end[0] - start[0]))


def midpoint(a: Point, b: Point) -> Point:
    return (a[0] + b[0]) / 2, (a[1] + b[1]) / 2


def fit_scale(extent_x: float, extent_y: float, avail_w: float, avail_h: float,
              clamp: float) -> float:
    """Largest px/unit factor that fits the extent box, capped at ``clamp``."""
    candidates = [clamp]
    if extent_x > 0:
        candidates.append(avail_w / extent_x)
    if extent_y > 0:
        candidates.append(avail_h / extent_y)
    return min(candidates)


def outward_normal(a: Point, b: Point, centroid: Point, distance: float) -> Point:
    """Point ``distance`` px off the midpoint of a-b, on the side away from centroid."""
    mx, my = midpoint(a, b)
    dx, dy = b[0] - a[0], b[1] - a[1]
    length = math.hypot(dx, dy) or 1.0
    nx, ny = -dy / length, dx / length
    if (mx + nx - centroid[0]) ** 2 + (my + ny - centroid[1]) ** 2 < (mx - centroid[0]) ** 2 + (my - centroid[1]) ** 2:
        nx, ny = -nx, -ny
    return mx + nx * distance, my + ny * distance


def centroid(points: Sequence[Point]) -> Point:
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return sum(xs) / len(xs), sum(ys) / len(ys)


def vertex_points(raw: Any) -> Optional[List[Point]]:
    """[{x, y}, ...] or [[x, y], ...] -> points; anything else -> None."""
    if isinstance(raw, dict):
        raw = raw.get("vertices")
    if not isinstance(raw, (list, tuple)):
        return None
    points = []
    for item in raw:
        if isinstance(item, dict):
            x, y = as_number(item.get("x"), math.nan), as_number(item.get("y"), math.nan)
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            x, y = as_number(item[0], math.nan), as_number(item[1], math.nan)
        else:
            return None
        if math.isnan(x) or math.isnan(y):
            return None
        points.append((x, y))
    return points


# =============================================================================
# RENDER CONTEXT
# =============================================================================

@dataclass
class RenderContext:
    """
    Everything a draw routine may look at. ``content_width`` and
    ``content_height`` are the only canvas numbers layout depends on.
    """

    request: RenderRequest
    theme: Theme
    content_width: float
    content_height: float
    root: Group
    warnings: List[str] = field(default_factory=list)
    defs: List[RadialGradient] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)

    # --------------------------------------------------------------------- #
    # Request accessors
    # --------------------------------------------------------------------- #

    @property
    def shape(self) -> str:
        return self.request.shape

    @property
    def config(self) -> DiagramConfig:
        return self.request.config

    @property
    def unit(self) -> str:
        return self.request.unit

    @property
    def show_measurements(self) -> bool:
        return self.config.show_measurements

    def measure(self, key: str, default: float) -> float:
        return as_number(self.request.measure(key, default), default)

    def datum(self, key: str, default: Any = None) -> Any:
        return self.request.datum(key, default)

    def option(self, name: str, default: Any = None) -> Any:
        return self.config.option(name, default)

    # --------------------------------------------------------------------- #
    # Canvas geometry
    # --------------------------------------------------------------------- #

    @property
    def center(self) -> Point:
        return self.content_width / 2, self.content_height / 2

    @property
    def available_size(self) -> float:
        return min(self.content_width, self.content_height) * AVAILABLE_FRACTION

    @property
    def available_box(self) -> Tuple[float, float]:
        return self.content_width * AVAILABLE_FRACTION, self.content_height * AVAILABLE_FRACTION

    def anchor(self, width: float, height: float) -> Point:
        """
        Center point for a figure of the given pixel size. With centering
        turned off the figure hugs the top-left corner of the available box.
        """
        if self.config.center:
            return self.center
        margin_x = self.content_width * (1 - AVAILABLE_FRACTION) / 2
        margin_y = self.content_height * (1 - AVAILABLE_FRACTION) / 2
        return margin_x + width / 2, margin_y + height / 2

    # --------------------------------------------------------------------- #
    # Diagnostics
    # --------------------------------------------------------------------- #

    def warn(self, message: str) -> None:
        logger.warning("[%s] %s", self.shape, message)
        self.warnings.append(message)

    def new_id(self, suffix: str) -> str:
        return f"{self.root.id}-{suffix}"

    # --------------------------------------------------------------------- #
    # Styles
    # --------------------------------------------------------------------- #

    def face_style(self, color: Optional[str] = None, opacity: Optional[float] = None) -> Style:
        return Style(
            stroke=self.theme.stroke_color,
            stroke_width=self.theme.stroke_width,
            fill=color or self.theme.primary_color,
            fill_opacity=self.theme.fill_opacity if opacity is None else opacity,
        )

    def stroke_style(self, color: Optional[str] = None, width: Optional[float] = None,
                     dash: Optional[str] = None, opacity: float = 1.0) -> Style:
        return Style(
            stroke=color or self.theme.stroke_color,
            stroke_width=self.theme.stroke_width if width is None else width,
            fill="none",
            opacity=opacity,
            dash=dash,
        )

    def construction_style(self, color: Optional[str] = None) -> Style:
        return self.stroke_style(color=color or self.theme.secondary_color, width=1.5,
                                 dash=CONSTRUCTION_DASH)

    def dot_style(self, color: Optional[str] = None) -> Style:
        return Style(fill=color or self.theme.stroke_color, fill_opacity=1.0)

    def text_style(self, color: Optional[str] = None, size: Optional[float] = None,
                   weight: Optional[str] = None) -> Style:
        return Style(
            fill=color or self.theme.stroke_color,
            font_size=size or self.theme.font_size,
            font_family=self.theme.font_family,
            font_weight=weight,
        )

    # --------------------------------------------------------------------- #
    # Primitive helpers
    # --------------------------------------------------------------------- #

    def add(self, primitive: Primitive) -> Primitive:
        return self.root.add(primitive)

    def line(self, a: Point, b: Point, style: Optional[Style] = None, role: str = "edge") -> Line:
        return self.add(Line(x1=a[0], y1=a[1], x2=b[0], y2=b[1],
                             style=style or self.stroke_style(), role=role))

    def polygon(self, points: Sequence[Point], style: Optional[Style] = None,
                role: str = "face") -> Polygon:
        return self.add(Polygon(points=[(float(x), float(y)) for x, y in points],
                                style=style or self.face_style(), role=role))

    def polyline(self, points: Sequence[Point], style: Optional[Style] = None,
                 role: str = "edge") -> Polyline:
        return self.add(Polyline(points=[(float(x), float(y)) for x, y in points],
                                 style=style or self.stroke_style(), role=role))

    def circle(self, c: Point, r: float, style: Optional[Style] = None, role: str = "face") -> Circle:
        return self.add(Circle(cx=c[0], cy=c[1], r=r, style=style or self.face_style(), role=role))

    def ellipse(self, c: Point, rx: float, ry: float, style: Optional[Style] = None,
                role: str = "face") -> Ellipse:
        return self.add(Ellipse(cx=c[0], cy=c[1], rx=rx, ry=ry,
                                style=style or self.face_style(), role=role))

    def arc(self, c: Point, rx: float, ry: float, start: float, end: float,
            style: Optional[Style] = None, closed: bool = False, role: str = "edge") -> ArcPath:
        return self.add(ArcPath(cx=c[0], cy=c[1], rx=rx, ry=ry, start=start, end=end,
                                closed=closed, style=style or self.stroke_style(), role=role))

    def dot(self, c: Point, r: float = 3, color: Optional[str] = None, role: str = "point") -> Circle:
        return self.circle(c, r, style=self.dot_style(color), role=role)

    def text(self, at: Point, text: str, role: str = "label", anchor: str = "middle",
             color: Optional[str] = None, size: Optional[float] = None,
             weight: Optional[str] = None) -> Text:
        return self.add(Text(x=at[0], y=at[1], text=text, anchor=anchor,
                             style=self.text_style(color, size, weight), role=role))

    def measurement(self, at: Point, symbol: str, value: Any, anchor: str = "middle",
                    unit: Optional[str] = None) -> Optional[Text]:
        """Measurement label, drawn only when measurements are switched on."""
        if not self.show_measurements:
            return None
        text = measurement_text(symbol, value, self.unit if unit is None else unit)
        return self.text(at, text, role="measurement", anchor=anchor, weight="bold")

    def angle_label(self, at: Point, degrees: Any, anchor: str = "middle") -> Optional[Text]:
        if not self.show_measurements:
            return None
        return self.text(at, angle_text(degrees), role="measurement", anchor=anchor,
                         color=self.theme.accent_color, weight="bold")

    def vertex_labels(self, points: Sequence[Point], names: Optional[Sequence[str]] = None,
                      offset: float = LABEL_OFFSET) -> None:
        """A, B, C ... pushed outward from the centroid; only with showLabels."""
        if not self.config.show_labels or not points:
            return
        cx, cy = centroid(points)
        names = names or [chr(ord("A") + i) for i in range(len(points))]
        for name, (x, y) in zip(names, points):
            dx, dy = x - cx, y - cy
            length = math.hypot(dx, dy) or 1.0
            self.text((x + dx / length * offset, y + dy / length * offset + 4), name,
                      role="label", weight="bold")

    # --------------------------------------------------------------------- #
    # Marks
    # --------------------------------------------------------------------- #

    def angle_mark(self, vertex: Point, start: float, end: float,
                   radius: float = ANGLE_MARK_RADIUS) -> ArcPath:
        """Small arc between two ray directions; fixed radius at any scale."""
        if end < start:
            end += 360
        return self.arc(vertex, radius, radius, start, end,
                        style=self.stroke_style(color=self.theme.accent_color, width=1.5),
                        role="mark")

    def right_angle_mark(self, vertex: Point, dir_a: float, dir_b: float,
                         size: float = RIGHT_ANGLE_MARK) -> Polyline:
        a = polar(vertex[0], vertex[1], size, dir_a)
        b = polar(vertex[0], vertex[1], size, dir_b)
        corner = (a[0] + b[0] - vertex[0], a[1] + b[1] - vertex[1])
        return self.polyline([a, corner, b],
                             style=self.stroke_style(color=self.theme.accent_color, width=1.5),
                             role="mark")

    def arrowhead(self, tip: Point, degrees: float, color: Optional[str] = None,
                  role: str = "arrow") -> Polygon:
        back = polar(tip[0], tip[1], ARROW_LENGTH, degrees + 180)
        left = polar(back[0], back[1], ARROW_HALF_WIDTH, degrees + 90)
        right = polar(back[0], back[1], ARROW_HALF_WIDTH, degrees - 90)
        color = color or self.theme.stroke_color
        return self.polygon([tip, left, right],
                            style=Style(fill=color, fill_opacity=1.0, stroke=color, stroke_width=1),
                            role=role)

    def tick_marks(self, a: Point, b: Point, count: int = 1, size: float = 6,
                   chevron: bool = False) -> None:
        """Equal-length ticks, or parallel chevrons, at the middle of segment a-b."""
        heading = direction(a, b)
        mx, my = midpoint(a, b)
        for i in range(count):
            shift = (i - (count - 1) / 2) * 5
            cx, cy = polar(mx, my, shift, heading)
            if chevron:
                tail_l = polar(cx, cy, size, heading + 180 - 40)
                tail_r = polar(cx, cy, size, heading + 180 + 40)
                self.polyline([tail_l, (cx, cy), tail_r],
                              style=self.stroke_style(color=self.theme.accent_color, width=1.5),
                              role="mark")
            else:
                p = polar(cx, cy, size / 2, heading + 90)
                q = polar(cx, cy, size / 2, heading - 90)
                self.line(p, q, style=self.stroke_style(width=1.5), role="mark")


# =============================================================================
# FAMILY RENDERER BASE
# =============================================================================

class FamilyRenderer:
    """
    Base for a shape family. Subclasses list their draw routines in
    ``draw_methods()``; the engine flattens all families into one table.
    """

    family = "family"
    default_size_family = "standard"
    size_families: Dict[str, str] = {}

    def draw_methods(self) -> Dict[str, DrawFn]:
        raise NotImplementedError

    def size_family(self, shape: str) -> str:
        return self.size_families.get(shape, self.default_size_family)
