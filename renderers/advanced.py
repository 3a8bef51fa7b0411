"""
advanced.py

Flat constructions beyond the basic shapes: arcs and sectors, inscribed and
circumscribed figures, tangents, angles and angle pairs, line elements
(lines, rays, segments, parallel / perpendicular / intersecting lines),
symmetry, reflection and completion figures, transformations, labelled
property figures, and similar or congruent pairs.

Every routine follows the same recipe:

    1. available size = min(content width, content height) * 0.8
    2. scale = min(available / (2 * dominant measurement), 80 px per unit)
    3. center on the canvas center (unless ``center`` is turned off)
    4. derive points with polar formulas (angles counter-clockwise on screen)
    5. primary geometry, then dashed construction lines, then labels

Transformations are the exception: they sit on a coordinate plane so the
pre-image and image can be read off the grid.
"""

from __future__ import annotations

import functools
import itertools
import math
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from renderers.base import (
    ANGLE_MARK_RADIUS,
    AVAILABLE_FRACTION,
    PLANAR_SCALE_CLAMP,
    DrawFn,
    FamilyRenderer,
    RenderContext,
    as_number,
    centroid,
    direction,
    fit_scale,
    format_number,
    midpoint,
    outward_normal,
    polar,
    vertex_points,
)
from renderers.coordinate import (
    CoordinateRenderer,
    GridLayout,
    PlaneRange,
    clip_line,
    expand_range,
    layout_grid,
)
from renderers.outlines import (
    INFINITE_SYMMETRY,
    Figure,
    clip_polygon,
    clip_polyline,
    equal_edge_groups,
    get_figure,
    reflect_path,
    regular_polygon,
)

Point = Tuple[float, float]
UnitMap = Callable[[Point], Point]

REFLECTION_AXES = {"horizontal": 90.0, "vertical": 0.0, "diagonal": 45.0}
LINE_ANGLES = (0, 60, 120, 30, 90, 150, 15, 75, 135, 165)

# ----- Transformations ----- #
TRANSFORM_RANGE = 6
DEFAULT_PREIMAGE = ((1.0, 1.0), (4.0, 1.0), (2.0, 3.0))
TRANSFORM_ALIASES = {
    "translate": "translation",
    "rotate": "rotation",
    "reflect": "reflection",
    "dilate": "dilation",
    "dilatation": "dilation",
}
TRANSFORM_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "translation": {"dx": -5, "dy": -4},
    "rotation": {"angle": 90, "center": (0, 0)},
    "reflection": {"line": "y-axis"},
    "dilation": {"scale": 1.5, "center": (0, 0)},
}
TRANSFORM_KEYS = ("dx", "dy", "angle", "center", "line", "slope", "intercept", "scale")
DEFAULT_COMPOSITE = (
    {"type": "translation", "dx": -5, "dy": 0},
    {"type": "reflection", "line": "x-axis"},
)
# Mirror lines as (point on line, direction)
MIRROR_LINES = {
    "x-axis": ((0.0, 0.0), (1.0, 0.0)),
    "y-axis": ((0.0, 0.0), (0.0, 1.0)),
    "y=x": ((0.0, 0.0), (1.0, 1.0)),
    "y=-x": ((0.0, 0.0), (1.0, -1.0)),
}
STAGE_ROLES = ("preimage", "intermediate", "image")

# ----- Similarity & congruence ----- #
REGULAR_SIDES = {"triangle": 3, "square": 4, "pentagon": 5, "hexagon": 6, "octagon": 8}
DEFAULT_SIMILAR = ({"name": "triangle", "sides": [3, 4, 5]}, {"name": "triangle", "sides": [6, 8, 10]})
SIMILAR_DEFAULTS = {
    "triangles": DEFAULT_SIMILAR,
    "rectangles": ({"name": "rectangle", "length": 4, "width": 2}, {"name": "rectangle", "length": 6, "width": 3}),
}
DEFAULT_CONGRUENT = ({"name": "triangle", "sides": [3, 4, 5]}, {"name": "triangle", "sides": [3, 4, 5]})
COMPARE_HEADROOM = 36


class AdvancedGeometryRenderer(FamilyRenderer):
    """Arcs, angles, lines, symmetry and property figures."""

    family = "advanced"
    size_families = {
        "line-element": "wide",
        "line-segment": "wide",
        "line-figure": "wide",
        "parallel-lines": "wide",
        "perpendicular-lines": "wide",
        "intersecting-lines": "wide",
        "rays-figure": "wide",
        "comparison": "wide",
        "symmetry-figure": "square",
        "symmetry-drawing": "square",
        "reflection": "square",
        "completion": "square",
        "transformation": "square",
        "composite-transformation": "square",
        "similarity": "wide",
        "congruence": "wide",
    }

    def __init__(self):
        self._plane = CoordinateRenderer()

    def draw_methods(self) -> Dict[str, DrawFn]:
        return {
            # Circles
            "arc": self._draw_arc,
            "sector": self._draw_sector,
            "inscribed-square": self._draw_inscribed_square,
            "circumscribed-circle": self._draw_circumscribed_circle,
            "tangent": self._draw_tangent,
            # Angles
            "angle": self._draw_angle,
            "complementary-angles": self._draw_complementary_angles,
            "supplementary-angles": self._draw_supplementary_angles,
            "triangle-angles": self._draw_triangle_angles,
            # Lines
            "line-element": self._draw_line_element,
            "parallel-lines": self._draw_parallel_lines,
            "perpendicular-lines": self._draw_perpendicular_lines,
            "intersecting-lines": self._draw_intersecting_lines,
            "rays-figure": self._draw_rays_figure,
            "line-segment": self._draw_line_segment,
            "line-figure": self._draw_line_figure,
            # Symmetry & transformations
            "symmetry-figure": self._draw_symmetry,
            "symmetry-drawing": functools.partial(self._draw_symmetry, grid=True),
            "reflection": self._draw_reflection,
            "completion": self._draw_completion,
            "transformation": self._draw_transformation,
            "composite-transformation": self._draw_composite_transformation,
            # Properties
            "properties-figure": self._draw_properties_figure,
            "comparison": self._draw_comparison,
            "similarity": functools.partial(self._draw_pair, congruent=False),
            "congruence": functools.partial(self._draw_pair, congruent=True),
        }

    # --------------------------------------------------------------------- #
    # Internal helpers
    # --------------------------------------------------------------------- #

    @staticmethod
    def _scale(ctx: RenderContext, dominant: float) -> float:
        return min(ctx.available_size / (2 * dominant), PLANAR_SCALE_CLAMP)

    @staticmethod
    def _fit_unit_points(ctx: RenderContext, points: Sequence[Point]) -> List[Point]:
        """Stretch math-space points (y up) over the available box, keeping aspect."""
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        ext_x, ext_y = max(xs) - min(xs), max(ys) - min(ys)
        avail_w, avail_h = ctx.available_box
        scale = fit_scale(ext_x, ext_y, avail_w, avail_h, math.inf)
        mid_x, mid_y = (max(xs) + min(xs)) / 2, (max(ys) + min(ys)) / 2
        cx, cy = ctx.anchor(ext_x * scale, ext_y * scale)
        return [(cx + (x - mid_x) * scale, cy - (y - mid_y) * scale) for x, y in points]

    @staticmethod
    def _unit_map(center: Point, radius: float) -> UnitMap:
        def to_canvas(point: Point) -> Point:
            return center[0] + point[0] * radius, center[1] - point[1] * radius
        return to_canvas

    def _disc(self, ctx: RenderContext) -> Tuple[Point, float]:
        """Center and radius of the square drawing area used by line figures."""
        radius = ctx.available_size / 2
        return ctx.anchor(2 * radius, 2 * radius), radius

    @staticmethod
    def _chord(center: Point, radius: float, degrees: float, offset: float = 0.0) -> Tuple[Point, Point]:
        """Ends of the chord at ``degrees`` shifted ``offset`` px off the center."""
        base = polar(center[0], center[1], offset, degrees + 90)
        half = math.sqrt(max(radius * radius - offset * offset, 0.0))
        return polar(base[0], base[1], half, degrees + 180), polar(base[0], base[1], half, degrees)

    def _full_line(self, ctx: RenderContext, a: Point, b: Point, role: str = "element",
                   arrows: bool = True) -> None:
        ctx.line(a, b, style=ctx.stroke_style(), role=role)
        if arrows:
            ctx.arrowhead(b, direction(a, b))
            ctx.arrowhead(a, direction(b, a))

    # =========================================================================
    # CIRCLES
    # =========================================================================

    def _arc_parts(self, ctx: RenderContext) -> Tuple[float, float, Point, float]:
        radius = ctx.measure("radius", 5)
        angle = ctx.measure("angle", 90)
        r_px = radius * self._scale(ctx, radius)
        center = ctx.anchor(2 * r_px, 2 * r_px)
        return radius, angle, center, r_px

    def _arc_labels(self, ctx: RenderContext, radius: float, angle: float,
                    center: Point, r_px: float) -> None:
        if ctx.config.show_angle_marks:
            ctx.angle_mark(center, 0, angle)
        ctx.measurement((center[0] + r_px / 2, center[1] + 18), "r", radius)
        label_at = polar(center[0], center[1], ANGLE_MARK_RADIUS + 16, angle / 2)
        ctx.angle_label((label_at[0], label_at[1] + 5), angle)

    def _draw_arc(self, ctx: RenderContext) -> None:
        radius, angle, center, r_px = self._arc_parts(ctx)
        ctx.circle(center, r_px, style=ctx.stroke_style(width=1, opacity=0.3), role="outline")
        ctx.arc(center, r_px, r_px, 0, angle,
                style=ctx.stroke_style(color=ctx.theme.accent_color, width=ctx.theme.stroke_width + 1),
                role="arc")
        ctx.line(center, polar(center[0], center[1], r_px, 0), style=ctx.construction_style(),
                 role="construction")
        ctx.line(center, polar(center[0], center[1], r_px, angle), style=ctx.construction_style(),
                 role="construction")
        ctx.dot(center, 3)
        self._arc_labels(ctx, radius, angle, center, r_px)

    def _draw_sector(self, ctx: RenderContext) -> None:
        radius, angle, center, r_px = self._arc_parts(ctx)
        ctx.circle(center, r_px, style=ctx.stroke_style(width=1, opacity=0.3), role="outline")
        ctx.arc(center, r_px, r_px, 0, angle, closed=True,
                style=ctx.face_style(color=ctx.theme.secondary_color, opacity=0.3), role="face")
        ctx.dot(center, 3)
        self._arc_labels(ctx, radius, angle, center, r_px)

    def _draw_inscribed_square(self, ctx: RenderContext) -> None:
        radius = ctx.measure("radius", 5)
        side = ctx.measure("sideLength", round(radius * math.sqrt(2), 2))
        r_px = radius * self._scale(ctx, radius)
        center = ctx.anchor(2 * r_px, 2 * r_px)

        ctx.circle(center, r_px, role="face")
        corners = [polar(center[0], center[1], r_px, a) for a in (45, 135, 225, 315)]
        ctx.polygon(corners, style=ctx.face_style(color=ctx.theme.secondary_color), role="face")
        ctx.line(corners[0], corners[2], style=ctx.construction_style(), role="construction")
        ctx.line(center, (center[0] + r_px, center[1]),
                 style=ctx.stroke_style(color=ctx.theme.accent_color, width=1.5), role="construction")
        ctx.dot(center, 3)

        ctx.measurement((center[0] + r_px / 2, center[1] - 8), "r", radius)
        ctx.measurement((center[0], corners[2][1] + 18), "s", side)
        ctx.vertex_labels(corners)

    def _draw_circumscribed_circle(self, ctx: RenderContext) -> None:
        side = ctx.measure("sideLength", 4)
        radius = ctx.measure("radius", round(side / math.sqrt(2), 2))
        scale = self._scale(ctx, max(radius, side / math.sqrt(2)))
        r_px, half = radius * scale, side * scale / 2
        center = ctx.anchor(2 * max(r_px, half * math.sqrt(2)), 2 * max(r_px, half * math.sqrt(2)))

        corners = [(center[0] - half, center[1] - half), (center[0] + half, center[1] - half),
                   (center[0] + half, center[1] + half), (center[0] - half, center[1] + half)]
        ctx.polygon(corners, role="face")
        ctx.circle(center, r_px, style=ctx.stroke_style(color=ctx.theme.secondary_color), role="outline")
        ctx.line(center, corners[1], style=ctx.construction_style(), role="construction")
        ctx.dot(center, 3)

        ctx.measurement((center[0], corners[2][1] - 8), "s", side)
        r_mid = midpoint(center, corners[1])
        ctx.measurement((r_mid[0] + 6, r_mid[1] + 4), "r", radius, anchor="start")
        ctx.vertex_labels(corners)

    def _draw_tangent(self, ctx: RenderContext) -> None:
        radius = ctx.measure("radius", 3)
        distance = ctx.measure("distance", 5)
        span = radius + max(distance, radius)
        scale = self._scale(ctx, span / 2)
        r_px = radius * scale
        cx, cy = ctx.anchor(span * scale, 2 * r_px)
        origin = (cx - span * scale / 2 + r_px, cy)

        ctx.circle(origin, r_px, role="face")
        ctx.dot(origin, 3)
        if distance <= radius:
            ctx.warn(f"tangent point distance {format_number(distance)} is inside the circle; "
                     "drawing the circle only")
            return

        tangent_length = ctx.measure("tangentLength", round(math.sqrt(distance ** 2 - radius ** 2), 2))
        outside = (origin[0] + distance * scale, origin[1])
        touch = polar(origin[0], origin[1], r_px, math.degrees(math.acos(radius / distance)))

        ctx.line(touch, outside, style=ctx.stroke_style(color=ctx.theme.accent_color), role="tangent")
        ctx.line(origin, touch, style=ctx.construction_style(), role="construction")
        ctx.line(origin, outside, style=ctx.construction_style(), role="construction")
        ctx.right_angle_mark(touch, direction(touch, origin), direction(touch, outside), size=10)
        ctx.dot(outside, 4)
        ctx.dot(touch, 3)

        mid = centroid([origin, touch, outside])
        ctx.measurement(outward_normal(origin, touch, mid, 14), "r", radius)
        ctx.measurement((midpoint(origin, outside)[0], origin[1] + 18), "d", distance)
        ctx.measurement(outward_normal(touch, outside, mid, 14), "t", tangent_length)
        if ctx.config.show_labels:
            ctx.text((origin[0] - 10, origin[1] + 16), "O", weight="bold")
            ctx.text((outside[0] + 8, outside[1] + 16), "P", weight="bold")
            ctx.text((touch[0], touch[1] - 10), "T", weight="bold")

    # =========================================================================
    # ANGLES
    # =========================================================================

    def _rays(self, ctx: RenderContext, directions: Sequence[float],
              extra_points: Sequence[Point] = ()) -> Tuple[Point, List[Point]]:
        """Vertex plus ray ends for unit rays at ``directions``, fitted to the canvas."""
        unit = [(0.0, 0.0)] + [(math.cos(math.radians(d)), math.sin(math.radians(d))) for d in directions]
        fitted = self._fit_unit_points(ctx, list(unit) + list(extra_points))
        vertex, ends = fitted[0], fitted[1:1 + len(directions)]
        for end in ends:
            ctx.line(vertex, end, style=ctx.stroke_style(), role="ray")
            ctx.arrowhead(end, direction(vertex, end))
        ctx.dot(vertex, 3)
        return vertex, ends

    def _mark(self, ctx: RenderContext, vertex: Point, start: float, end: float,
              radius: float = ANGLE_MARK_RADIUS) -> None:
        if not ctx.config.show_angle_marks:
            return
        if abs((end - start) % 360 - 90) < 1e-6:
            ctx.right_angle_mark(vertex, start, end)
        else:
            ctx.angle_mark(vertex, start, end, radius=radius)

    def _draw_angle(self, ctx: RenderContext) -> None:
        angle = ctx.measure("angle", 45)
        vertex, ends = self._rays(ctx, [0, angle], extra_points=[(-0.15, -0.15)])
        self._mark(ctx, vertex, 0, angle)
        label_at = polar(vertex[0], vertex[1], ANGLE_MARK_RADIUS + 18, angle / 2)
        ctx.angle_label((label_at[0], label_at[1] + 5), angle)
        if ctx.config.show_labels:
            for name, at in zip("ABC", (ends[0], vertex, ends[1])):
                ctx.text((at[0], at[1] + 18), name, weight="bold")

    def _draw_complementary_angles(self, ctx: RenderContext) -> None:
        first = ctx.measure("angle1", 60)
        second = ctx.measure("angle2", 90 - first)
        vertex, _ = self._rays(ctx, [0, first, first + second], extra_points=[(-0.15, -0.15)])
        self._mark(ctx, vertex, 0, first)
        self._mark(ctx, vertex, first, first + second, radius=ANGLE_MARK_RADIUS + 6)
        for start, size in ((0, first), (first, second)):
            at = polar(vertex[0], vertex[1], ANGLE_MARK_RADIUS + 24, start + size / 2)
            ctx.angle_label((at[0], at[1] + 5), size)

    def _draw_supplementary_angles(self, ctx: RenderContext) -> None:
        first = ctx.measure("angle1", 120)
        second = ctx.measure("angle2", 180 - first)
        vertex, _ = self._rays(ctx, [0, first, 180], extra_points=[(0.0, -0.2)])
        self._mark(ctx, vertex, 0, first)
        self._mark(ctx, vertex, first, first + second, radius=ANGLE_MARK_RADIUS + 6)
        for start, size in ((0, first), (first, second)):
            at = polar(vertex[0], vertex[1], ANGLE_MARK_RADIUS + 24, start + size / 2)
            ctx.angle_label((at[0], at[1] + 5), size)

    def _draw_triangle_angles(self, ctx: RenderContext) -> None:
        raw = list(ctx.request.measurements.get("angles") or [60, 60, 60])[:3]
        raw += [None] * (3 - len(raw))
        values: List[Optional[float]] = [as_number(v, math.nan) if v not in (None, "?") else None for v in raw]
        values = [None if v is not None and math.isnan(v) else v for v in values]
        missing = [i for i, v in enumerate(values) if v is None]
        if len(missing) == 1:
            known = sum(v for v in values if v is not None)
            values[missing[0]] = 180 - known
        elif missing:
            ctx.warn("triangle-angles needs at least two known angles")
            return
        if any(v <= 0 or v >= 180 for v in values) or abs(sum(values) - 180) > 0.5:
            ctx.warn(f"angles {values} do not form a triangle")
            return

        a0, a1, a2 = (math.radians(v) for v in values)
        unit = [(0.0, 0.0), (math.sin(a2), 0.0),
                (math.sin(a1) * math.cos(a0), math.sin(a1) * math.sin(a0))]
        corners = self._fit_unit_points(ctx, unit)
        ctx.polygon(corners, role="face")

        for i, vertex in enumerate(corners):
            after, before = corners[(i + 1) % 3], corners[(i - 1) % 3]
            start, end = direction(vertex, after), direction(vertex, before)
            self._mark(ctx, vertex, start, end, radius=ANGLE_MARK_RADIUS - 4)
            if not ctx.show_measurements:
                continue
            sweep = (end - start) % 360
            at = polar(vertex[0], vertex[1], ANGLE_MARK_RADIUS + 14, start + sweep / 2)
            if i in missing:
                ctx.text((at[0], at[1] + 5), "?", role="measurement", weight="bold",
                         color=ctx.theme.accent_color)
            else:
                ctx.angle_label((at[0], at[1] + 5), values[i])
        ctx.vertex_labels(corners)

    # =========================================================================
    # LINES
    # =========================================================================

    def _draw_line_element(self, ctx: RenderContext) -> None:
        element = str(ctx.datum("element", "line segment")).lower()
        avail_w, _ = ctx.available_box
        cx, cy = ctx.anchor(avail_w, 0)
        left, right = (cx - avail_w / 2, cy), (cx + avail_w / 2, cy)
        near, far = (cx - avail_w * 0.3, cy), (cx + avail_w * 0.3, cy)

        if element == "point":
            ctx.dot((cx, cy), 5, role="element")
            ctx.text((cx, cy - 12), "A", weight="bold")
            return
        if element == "line":
            self._full_line(ctx, left, right)
            named = (near, far)
        elif element == "ray":
            ctx.line(near, right, style=ctx.stroke_style(), role="element")
            ctx.arrowhead(right, 0)
            named = (near, far)
        else:
            if element not in ("line segment", "segment"):
                ctx.warn(f"unknown line element {element!r}; drawing a segment")
            ctx.line(near, far, style=ctx.stroke_style(), role="element")
            named = (near, far)

        for name, at in zip("AB", named):
            ctx.dot(at, 4)
            ctx.text((at[0], at[1] - 12), name, weight="bold")

    def _draw_parallel_lines(self, ctx: RenderContext) -> None:
        pairs = max(1, int(as_number(ctx.datum("pairCount", ctx.option("pairCount", 1)), 1)))
        center, radius = self._disc(ctx)
        gap = radius * 0.35
        show_marks = ctx.option("showParallelMarks", True)

        for i in range(pairs):
            angle = LINE_ANGLES[i % len(LINE_ANGLES)]
            for side in (-1, 1):
                a, b = self._chord(center, radius, angle, side * gap)
                self._full_line(ctx, a, b)
                if show_marks:
                    ctx.tick_marks(a, b, count=i + 1, chevron=True)

    def _draw_perpendicular_lines(self, ctx: RenderContext) -> None:
        center, radius = self._disc(ctx)
        base = 20
        for angle in (base, base + 90):
            self._full_line(ctx, *self._chord(center, radius, angle))
        if ctx.option("showRightAngleMarks", True):
            ctx.right_angle_mark(center, base, base + 90)
        ctx.dot(center, 3)

    def _line_set(self, center: Point, radius: float, count: int,
                  concurrent: bool) -> List[Tuple[Point, Point]]:
        lines = []
        for i in range(count):
            angle = 15 + i * 180.0 / count
            offset = 0.0 if concurrent else (i - (count - 1) / 2) * radius * 0.3
            lines.append(self._chord(center, radius, angle, offset))
        return lines

    @staticmethod
    def _intersections(lines: Sequence[Tuple[Point, Point]], center: Point,
                       radius: float) -> List[Point]:
        found: List[Point] = []
        for (p1, p2), (q1, q2) in itertools.combinations(lines, 2):
            d1 = (p2[0] - p1[0], p2[1] - p1[1])
            d2 = (q2[0] - q1[0], q2[1] - q1[1])
            denom = d1[0] * d2[1] - d1[1] * d2[0]
            if abs(denom) < 1e-9:
                continue
            t = ((q1[0] - p1[0]) * d2[1] - (q1[1] - p1[1]) * d2[0]) / denom
            hit = (p1[0] + d1[0] * t, p1[1] + d1[1] * t)
            if math.dist(hit, center) > radius:
                continue
            if any(math.dist(hit, known) < 1e-6 for known in found):
                continue
            found.append(hit)
        return found

    def _draw_intersecting_lines(self, ctx: RenderContext) -> None:
        count = max(2, int(as_number(ctx.datum("lineCount", ctx.option("lineCount", 2)), 2)))
        points = int(as_number(ctx.datum("intersectionPoints", ctx.option("intersectionPoints", 1)), 1))
        center, radius = self._disc(ctx)
        lines = self._line_set(center, radius, count, concurrent=points <= 1)
        for a, b in lines:
            self._full_line(ctx, a, b)
        if ctx.option("highlightIntersections", True):
            for hit in self._intersections(lines, center, radius):
                ctx.dot(hit, 4, color=ctx.theme.accent_color, role="intersection")

    def _draw_rays_figure(self, ctx: RenderContext) -> None:
        count = max(1, int(as_number(ctx.datum("rayCount", ctx.option("rayCount", 3)), 3)))
        center, radius = self._disc(ctx)
        show_arrows = ctx.option("showArrows", True)
        for i in range(count):
            end = polar(center[0], center[1], radius, 20 + i * 360.0 / count)
            ctx.line(center, end, style=ctx.stroke_style(), role="element")
            if show_arrows:
                ctx.arrowhead(end, direction(center, end))
        ctx.dot(center, 4)
        if ctx.config.show_labels:
            ctx.text((center[0] - 10, center[1] + 18), "O", weight="bold")

    def _draw_line_segment(self, ctx: RenderContext) -> None:
        length = ctx.measure("length", 5)
        avail_w, _ = ctx.available_box
        scale = min(avail_w / length, PLANAR_SCALE_CLAMP)
        cx, cy = ctx.anchor(length * scale, 0)
        start, end = (cx - length * scale / 2, cy), (cx + length * scale / 2, cy)

        ctx.line(start, end, style=ctx.stroke_style(width=ctx.theme.stroke_width + 1), role="element")
        for name, at in zip("AB", (start, end)):
            ctx.dot(at, 4)
            ctx.text((at[0], at[1] - 12), name, weight="bold")

        if ctx.option("showRuler", False):
            ruler_y = cy + 14
            ctx.line((start[0], ruler_y), (end[0], ruler_y), style=ctx.stroke_style(width=1), role="ruler")
            for tick in range(int(math.floor(length)) + 1):
                x = start[0] + tick * scale
                ctx.line((x, ruler_y), (x, ruler_y + 8), style=ctx.stroke_style(width=1), role="ruler")
                ctx.text((x, ruler_y + 22), str(tick), role="ruler", size=ctx.theme.font_size - 3)
        if ctx.show_measurements:
            unit = ctx.unit or ctx.datum("unit", "")
            text = f"{format_number(length)} {unit}".strip()
            ctx.text((cx, cy - 14), text, role="measurement", weight="bold",
                     color=ctx.theme.accent_color)

    def _draw_line_figure(self, ctx: RenderContext) -> None:
        count_type = str(ctx.datum("countType", "segments")).lower()
        count = max(1, int(as_number(ctx.datum("elementCount", 4), 4)))
        center, radius = self._disc(ctx)

        if count_type == "lines":
            lines = self._line_set(center, radius, count, concurrent=False)
            for a, b in lines:
                self._full_line(ctx, a, b)
        elif count_type == "rays":
            for i in range(count):
                end = polar(center[0], center[1], radius, 30 + i * 360.0 / count)
                ctx.line(center, end, style=ctx.stroke_style(), role="element")
                ctx.arrowhead(end, direction(center, end))
            ctx.dot(center, 4)
        elif count_type == "intersections":
            hits = max(1, int(as_number(ctx.datum("intersectionCount", count), count)))
            # One transversal crossing ``hits`` parallel lines gives exactly ``hits`` crossings
            transversal = self._chord(center, radius, 0)
            self._full_line(ctx, *transversal)
            spacing = 2 * radius * 0.7 / max(hits, 1)
            for i in range(hits):
                x = center[0] + (i - (hits - 1) / 2) * spacing
                half = math.sqrt(max(radius ** 2 - (x - center[0]) ** 2, 0)) * 0.9
                top, bottom = (x + half * 0.3, center[1] - half), (x - half * 0.3, center[1] + half)
                self._full_line(ctx, bottom, top, role="line")
                ctx.dot((x, center[1]), 4, color=ctx.theme.accent_color, role="intersection")
        else:
            if count_type != "segments":
                ctx.warn(f"unknown count type {count_type!r}; drawing segments")
            if count >= 3:
                corners = [polar(center[0], center[1], radius, 90 + i * 360.0 / count) for i in range(count)]
                edges = list(zip(corners, corners[1:] + corners[:1]))
            else:
                corners = [polar(center[0], center[1], radius, 180 - i * 180.0 / count) for i in range(count + 1)]
                edges = list(zip(corners, corners[1:]))
            for a, b in edges:
                ctx.line(a, b, style=ctx.stroke_style(), role="element")
            for corner in corners:
                ctx.dot(corner, 4)

    # =========================================================================
    # SYMMETRY & TRANSFORMATIONS
    # =========================================================================

    def _subject(self, ctx: RenderContext) -> Figure:
        subject = ctx.datum("subject", {"type": "shape", "name": "square"})
        figure = get_figure(subject)
        if figure is None:
            ctx.warn(f"no outline for subject {subject!r}; drawing a square")
            figure = get_figure("square")
        return figure

    def _draw_figure(self, ctx: RenderContext, figure: Figure, to_canvas: UnitMap,
                     transform: Optional[Callable[[Sequence[Point]], Sequence[Point]]] = None,
                     color: Optional[str] = None, dashed: bool = False, role: str = "face") -> None:
        transform = transform or (lambda path: path)
        for face in figure.faces:
            points = [to_canvas(p) for p in transform(face)]
            style = ctx.face_style(color=color)
            if dashed:
                style.dash = "6,4"
                style.fill_opacity = 0.05
            ctx.polygon(points, style=style, role=role)
        for stroke in figure.strokes:
            points = [to_canvas(p) for p in transform(stroke)]
            style = ctx.stroke_style(color=color or ctx.theme.primary_color,
                                     width=ctx.theme.stroke_width * 3,
                                     dash="6,4" if dashed else None)
            ctx.polyline(points, style=style, role=role)

    def _axis_line(self, ctx: RenderContext, to_canvas: UnitMap, degrees: float,
                   role: str = "symmetry-line") -> None:
        reach = 1.1
        a = (-reach * math.cos(math.radians(degrees)), -reach * math.sin(math.radians(degrees)))
        b = (reach * math.cos(math.radians(degrees)), reach * math.sin(math.radians(degrees)))
        style = ctx.stroke_style(color=ctx.theme.accent_color, width=1.5, dash="8,4")
        ctx.line(to_canvas(a), to_canvas(b), style=style, role=role)

    def _figure_area(self, ctx: RenderContext) -> Tuple[UnitMap, float]:
        # 1.1 leaves room for axis overhang past the outline
        center, radius = self._disc(ctx)
        return self._unit_map(center, radius / 1.1), radius / 1.1

    def _drawing_grid(self, ctx: RenderContext, to_canvas: UnitMap, cells: int = 8) -> None:
        style = ctx.stroke_style(width=0.5, opacity=0.3)
        for i in range(cells + 1):
            t = -1 + 2.0 * i / cells
            ctx.line(to_canvas((t, -1)), to_canvas((t, 1)), style=style, role="grid")
            ctx.line(to_canvas((-1, t)), to_canvas((1, t)), style=style, role="grid")

    def _symmetry_axes(self, ctx: RenderContext, figure: Figure) -> Tuple[float, ...]:
        symmetry = ctx.datum("symmetryData", {}) or {}
        wanted = symmetry.get("lineSymmetry")
        axes = figure.axes
        if wanted is None or wanted == INFINITE_SYMMETRY:
            return axes
        wanted = int(as_number(wanted, len(axes)))
        if wanted > len(axes):
            ctx.warn(f"{figure.name} has {len(axes)} lines of symmetry, {wanted} requested")
        return axes[:max(wanted, 0)]

    def _draw_symmetry(self, ctx: RenderContext, grid: bool = False) -> None:
        """Symmetry figure; ``grid`` is the grid default when showGrid is unset."""
        figure = self._subject(ctx)
        to_canvas, _ = self._figure_area(ctx)
        show_grid = grid if ctx.config.show_grid is None else ctx.config.show_grid
        if show_grid:
            self._drawing_grid(ctx, to_canvas)
        self._draw_figure(ctx, figure, to_canvas)
        if ctx.option("showSymmetryLines", False):
            for axis in self._symmetry_axes(ctx, figure):
                self._axis_line(ctx, to_canvas, axis)

    def _draw_reflection(self, ctx: RenderContext) -> None:
        figure = self._subject(ctx)
        to_canvas, _ = self._figure_area(ctx)
        direction_name = str(ctx.datum("reflectionDirection", "horizontal")).lower()
        if direction_name not in REFLECTION_AXES:
            ctx.warn(f"unknown reflection direction {direction_name!r}; using horizontal")
            direction_name = "horizontal"
        axis = REFLECTION_AXES[direction_name]
        # Shrink the figure and push it to the left side of the mirror line
        nx, ny = -math.sin(math.radians(axis)), math.cos(math.radians(axis))
        shrink, push = 0.4, 0.55

        def place(path: Sequence[Point]) -> Sequence[Point]:
            return [(x * shrink + nx * push, y * shrink + ny * push) for x, y in path]

        def mirrored(path: Sequence[Point]) -> Sequence[Point]:
            return reflect_path(place(path), axis)

        if ctx.config.show_grid:
            self._drawing_grid(ctx, to_canvas)
        if ctx.option("showReflectionLine", True):
            self._axis_line(ctx, to_canvas, axis, role="mirror")
        if ctx.option("showOriginal", True):
            self._draw_figure(ctx, figure, to_canvas, transform=place, role="face")
        if ctx.option("showReflected", True):
            self._draw_figure(ctx, figure, to_canvas, transform=mirrored,
                              color=ctx.theme.secondary_color, dashed=True, role="image")
        if ctx.config.show_labels and figure.vertices:
            original = [to_canvas(p) for p in place(figure.vertices)]
            image = [to_canvas(p) for p in mirrored(figure.vertices)]
            names = [chr(ord("A") + i) for i in range(len(original))]
            ctx.vertex_labels(original, names)
            ctx.vertex_labels(image, [f"{n}'" for n in names])

    def _draw_completion(self, ctx: RenderContext) -> None:
        figure = self._subject(ctx)
        to_canvas, _ = self._figure_area(ctx)
        if not figure.axes:
            ctx.warn(f"{figure.name} has no line of symmetry; completing across a vertical line")
        axis = 90.0 if (90 in figure.axes or not figure.axes) else figure.axes[0]

        if ctx.config.show_grid is not False:
            self._drawing_grid(ctx, to_canvas)
        faces = tuple(face for face in (clip_polygon(f, axis) for f in figure.faces) if len(face) >= 3)
        strokes = tuple(piece for stroke in figure.strokes for piece in clip_polyline(stroke, axis))
        half = Figure(figure.name, figure.kind, faces=faces, strokes=strokes)

        if ctx.option("showHalf", True):
            self._draw_figure(ctx, half, to_canvas)
        if ctx.option("showSymmetryLine", True):
            self._axis_line(ctx, to_canvas, axis)
        if ctx.option("showComplete", False):
            self._draw_figure(ctx, half, to_canvas, transform=lambda path: reflect_path(path, axis),
                              color=ctx.theme.secondary_color, dashed=True, role="image")

    # --------------------------------------------------------------------- #
    # Transformations on the coordinate plane
    # --------------------------------------------------------------------- #

    def _preimage(self, ctx: RenderContext) -> List[Point]:
        raw = ctx.request.measurements.get("originalShape", ctx.datum("vertices"))
        points = vertex_points(raw)
        if points is None or len(points) < 3:
            if raw is not None:
                ctx.warn("original shape needs at least three {x, y} vertices; using a default triangle")
            return list(DEFAULT_PREIMAGE)
        return points

    @staticmethod
    def _given_stage(ctx: RenderContext, key: str, count: int) -> Optional[List[Point]]:
        points = vertex_points(ctx.request.measurements.get(key))
        if points is None or len(points) != count:
            return None
        return points

    def _transform_step(self, ctx: RenderContext) -> Dict[str, Any]:
        step = ctx.datum("transformation")
        step = dict(step) if isinstance(step, dict) else {}
        for key in TRANSFORM_KEYS:
            value = ctx.datum(key)
            if value is not None:
                step.setdefault(key, value)
        step.setdefault("type", ctx.datum("transformType", ctx.option("transformationType", "translation")))
        return normalize_step(step)

    def _composite_steps(self, ctx: RenderContext) -> List[Dict[str, Any]]:
        raw = ctx.datum("transformations", ctx.option("transformations"))
        if not isinstance(raw, (list, tuple)) or not raw:
            return [normalize_step(dict(step)) for step in DEFAULT_COMPOSITE]
        steps = []
        for item in raw:
            # A bare name stands for that transformation with its default parameters
            steps.append(normalize_step(dict(item) if isinstance(item, dict) else {"type": item}))
        return steps

    def _transform_plane(self, ctx: RenderContext, stages: Sequence[Sequence[Point]],
                         steps: Sequence[Dict[str, Any]]) -> GridLayout:
        extent = abs(as_number(ctx.datum("coordinateRange", ctx.option("coordinateRange")), TRANSFORM_RANGE))
        wanted = [p for stage in stages for p in stage]
        wanted += [step["center"] for step in steps if "center" in step]
        rng = expand_range(PlaneRange(-extent, extent, -extent, extent), wanted)
        grid = layout_grid(rng, ctx.content_width, ctx.content_height, center=ctx.config.center)
        ctx.meta.update(x_range=(rng.x_min, rng.x_max), y_range=(rng.y_min, rng.y_max),
                        grid_spacing=grid.spacing, transformations=[step["type"] for step in steps])
        self._plane.draw_plane(ctx, grid, ctx.option("showGridNumbers", True))
        return grid

    def _draw_stage(self, ctx: RenderContext, grid: GridLayout, points: Sequence[Point],
                    index: int, last: bool) -> None:
        role = STAGE_ROLES[0] if index == 0 else STAGE_ROLES[2] if last else STAGE_ROLES[1]
        corners = [grid.to_canvas(x, y) for x, y in points]
        if role == "preimage":
            style = ctx.face_style(opacity=0.1)
            style.dash = "6,4"
        elif role == "intermediate":
            style = ctx.face_style(color=ctx.theme.accent_color, opacity=0.15)
        else:
            style = ctx.face_style(color=ctx.theme.secondary_color)
        ctx.polygon(corners, style=style, role=role)
        names = [chr(ord("A") + i % 26) + "'" * index for i in range(len(corners))]
        ctx.vertex_labels(corners, names)

    def _draw_step_guide(self, ctx: RenderContext, grid: GridLayout, step: Dict[str, Any],
                         before: Sequence[Point], after: Sequence[Point]) -> None:
        """Vector, center and arc, mirror line or dilation rays for one step."""
        kind = step["type"]
        accent = ctx.theme.accent_color
        if kind == "translation":
            tail, tip = grid.to_canvas(*before[0]), grid.to_canvas(*after[0])
            if math.dist(tail, tip) < 1e-6:
                return
            ctx.line(tail, tip, style=ctx.stroke_style(color=accent, width=1.5), role="vector")
            ctx.arrowhead(tip, direction(tail, tip), color=accent)
            if ctx.show_measurements:
                shift = (after[0][0] - before[0][0], after[0][1] - before[0][1])
                label = f"<{format_number(shift[0])}, {format_number(shift[1])}>"
                mid = midpoint(tail, tip)
                ctx.text((mid[0] + 8, mid[1] - 8), label, role="measurement", anchor="start", weight="bold")
        elif kind == "rotation":
            center = grid.to_canvas(*step["center"])
            start_at, end_at = grid.to_canvas(*before[0]), grid.to_canvas(*after[0])
            for end in (start_at, end_at):
                ctx.line(center, end, style=ctx.construction_style(), role="construction")
            start = direction(center, start_at)
            sweep = as_number(step["angle"], 0)
            low, high = (start, start + sweep) if sweep >= 0 else (start + sweep, start)
            ctx.arc(center, ANGLE_MARK_RADIUS + 4, ANGLE_MARK_RADIUS + 4, low, high,
                    style=ctx.stroke_style(color=accent, width=1.5), role="mark")
            ctx.dot(center, 4, color=accent, role="center")
            if ctx.show_measurements:
                at = polar(center[0], center[1], ANGLE_MARK_RADIUS + 18, start + sweep / 2)
                ctx.angle_label((at[0], at[1] + 5), sweep)
        elif kind == "reflection":
            try:
                mirror = mirror_line(step)
            except ValueError as exc:
                ctx.warn(str(exc))
                return
            if mirror is None:
                ctx.dot(grid.to_canvas(*step.get("center", (0.0, 0.0))), 4, color=accent, role="center")
                return
            (px, py), (dx, dy) = mirror
            ends = clip_line((px, py), (px + dx, py + dy), grid.rng)
            if ends is not None:
                ctx.line(grid.to_canvas(*ends[0]), grid.to_canvas(*ends[1]),
                         style=ctx.stroke_style(color=accent, width=1.5, dash="8,4"), role="mirror")
        elif kind == "dilation":
            center = grid.to_canvas(*step["center"])
            for far in (after if abs(as_number(step["scale"], 1)) >= 1 else before):
                ctx.line(center, grid.to_canvas(*far), style=ctx.construction_style(), role="construction")
            ctx.dot(center, 4, color=accent, role="center")
            if ctx.show_measurements:
                ctx.text((center[0] + 8, center[1] + 18), f"k = {format_number(step['scale'])}",
                         role="measurement", anchor="start", weight="bold")

    def _draw_transform_stages(self, ctx: RenderContext, stages: Sequence[Sequence[Point]],
                               steps: Sequence[Dict[str, Any]]) -> None:
        grid = self._transform_plane(ctx, stages, steps)
        if ctx.option("showTransformationGuide", True):
            for step, before, after in zip(steps, stages, stages[1:]):
                self._draw_step_guide(ctx, grid, step, before, after)
        show_preimage = ctx.option("showPreImage", True)
        for index, points in enumerate(stages):
            if index == 0 and not show_preimage:
                continue
            self._draw_stage(ctx, grid, points, index, last=index == len(stages) - 1)

    def _apply_or_warn(self, ctx: RenderContext, points: Sequence[Point],
                       step: Dict[str, Any]) -> Optional[List[Point]]:
        try:
            return apply_transform(points, step)
        except ValueError as exc:
            ctx.warn(f"{exc}; drawing the pre-image only")
            return None

    def _draw_transformation(self, ctx: RenderContext) -> None:
        original = self._preimage(ctx)
        step = self._transform_step(ctx)
        image = self._given_stage(ctx, "transformedShape", len(original))
        if image is None:
            image = self._apply_or_warn(ctx, original, step)
        if image is None:
            self._draw_transform_stages(ctx, [original], [])
            return
        self._draw_transform_stages(ctx, [original, image], [step])

    def _draw_composite_transformation(self, ctx: RenderContext) -> None:
        original = self._preimage(ctx)
        steps = self._composite_steps(ctx)
        stages = [original]
        for index, step in enumerate(steps):
            if index == len(steps) - 1:
                given = self._given_stage(ctx, "finalShape", len(original))
            elif index == 0:
                given = self._given_stage(ctx, "intermediateShape", len(original))
            else:
                given = None
            nxt = given or self._apply_or_warn(ctx, stages[-1], step)
            if nxt is None:
                steps = steps[:index]
                break
            stages.append(nxt)
        self._draw_transform_stages(ctx, stages, steps)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    def _shape_figure(self, ctx: RenderContext, shape_data: Dict[str, Any]) -> Figure:
        name = shape_data.get("name", "square")
        figure = get_figure(name, shape_data.get("triangleType"))
        if figure is None and shape_data.get("type") == "circle":
            figure = get_figure("circle")
        if figure is None:
            sides = int(as_number(shape_data.get("sides"), 0))
            if sides >= 3:
                figure = Figure(str(name), faces=(regular_polygon(sides),))
            else:
                ctx.warn(f"no outline for shape {name!r}; drawing a square")
                figure = get_figure("square")
        return figure

    def _property_figure(self, ctx: RenderContext, figure: Figure, center: Point, radius: float,
                         highlight: Optional[str]) -> List[Point]:
        to_canvas = self._unit_map(center, radius)
        if figure.round:
            ctx.circle(center, radius, role="face")
            if highlight in ("radius", "sides"):
                ctx.line(center, (center[0] + radius, center[1]), style=ctx.construction_style(),
                         role="construction")
            return []

        path = list(figure.vertices)
        corners = [to_canvas(p) for p in path]
        ctx.polygon(corners, role="face")
        edges = list(zip(corners, corners[1:] + corners[:1]))

        if highlight == "sides":
            for (a, b), ticks in zip(edges, equal_edge_groups(path)):
                ctx.line(a, b, style=ctx.stroke_style(color=ctx.theme.accent_color,
                                                      width=ctx.theme.stroke_width + 1),
                         role="highlight")
                if ticks:
                    ctx.tick_marks(a, b, count=ticks)
        elif highlight in ("angles", "right-angles"):
            clockwise = _signed_area(path) < 0
            count = len(corners)
            for i, vertex in enumerate(corners):
                after, before = corners[(i + 1) % count], corners[(i - 1) % count]
                start, end = direction(vertex, after), direction(vertex, before)
                if clockwise:
                    start, end = end, start
                sweep = (end - start) % 360
                if abs(sweep - 90) < 0.5:
                    ctx.right_angle_mark(vertex, start, end)
                elif highlight == "angles":
                    ctx.angle_mark(vertex, start, end, radius=ANGLE_MARK_RADIUS - 6)
        elif highlight == "vertices":
            for corner in corners:
                ctx.dot(corner, 5, color=ctx.theme.accent_color)
        elif highlight == "parallel":
            for group, (i, j) in enumerate(figure.parallel_pairs):
                for index in (i, j):
                    a, b = edges[index]
                    ctx.tick_marks(a, b, count=group + 1, chevron=True)
        return corners

    def _draw_properties_figure(self, ctx: RenderContext) -> None:
        shape_data = ctx.datum("shapeData", {}) or {}
        figure = self._shape_figure(ctx, shape_data)
        highlight = ctx.datum("highlightProperty", ctx.option("highlightProperty"))
        center, radius = self._disc(ctx)
        corners = self._property_figure(ctx, figure, center, radius, highlight)
        if highlight == "vertices" and not ctx.config.show_labels and corners:
            names = [chr(ord("A") + i) for i in range(len(corners))]
            mid = centroid(corners)
            for name, (x, y) in zip(names, corners):
                dx, dy = x - mid[0], y - mid[1]
                length = math.hypot(dx, dy) or 1.0
                ctx.text((x + dx / length * 15, y + dy / length * 15 + 4), name, weight="bold")
        else:
            ctx.vertex_labels(corners)

    def _draw_comparison(self, ctx: RenderContext) -> None:
        first = ctx.datum("shape1Data", {"name": "square"}) or {}
        second = ctx.datum("shape2Data", {"name": "rectangle"}) or {}
        side_by_side = ctx.datum("sideBySide", ctx.option("sideBySide", True))
        highlight = ctx.datum("highlightProperty", ctx.option("highlightProperty"))

        w, h = ctx.content_width, ctx.content_height
        if side_by_side:
            cells = [(w / 4, h / 2), (3 * w / 4, h / 2)]
            cell_w, cell_h = w / 2, h
        else:
            cells = [(w / 2, h / 4), (w / 2, 3 * h / 4)]
            cell_w, cell_h = w, h / 2
        # Leave a caption line under each figure
        radius = min(cell_w, cell_h - 24) * 0.8 / 2
        for center, shape_data in zip(cells, (first, second)):
            figure = self._shape_figure(ctx, shape_data)
            fig_center = (center[0], center[1] - 10)
            corners = self._property_figure(ctx, figure, fig_center, radius, highlight)
            ctx.vertex_labels(corners)
            caption = str(shape_data.get("name", figure.name)).title()
            ctx.text((center[0], fig_center[1] + radius + 18), caption, role="caption",
                     size=ctx.theme.font_size - 1)

    # --------------------------------------------------------------------- #
    # Similar and congruent pairs
    # --------------------------------------------------------------------- #

    def _pair_shapes(self, ctx: RenderContext, congruent: bool) -> List[List[Point]]:
        if congruent:
            keys, defaults = ("triangle1", "triangle2"), DEFAULT_CONGRUENT
        else:
            keys = ("shape1", "shape2")
            defaults = SIMILAR_DEFAULTS.get(str(ctx.option("comparisonType", "triangles")).lower(),
                                            DEFAULT_SIMILAR)
        shapes = []
        for index, (key, fallback) in enumerate(zip(keys, defaults)):
            raw = ctx.request.measurements.get(key, ctx.request.measurements.get(f"shape{index + 1}"))
            if isinstance(raw, (list, tuple)):
                raw = {"name": "triangle", "sides": list(raw)}
            try:
                shapes.append(shape_vertices(raw or fallback))
            except ValueError as exc:
                ctx.warn(f"{key}: {exc}; using the default")
                shapes.append(shape_vertices(fallback))
        return shapes

    def _draw_pair(self, ctx: RenderContext, congruent: bool = False) -> None:
        """
        Two figures side by side at one common scale, so a similar pair shows
        its size ratio. With showCorrespondence, dashed lines join matching
        vertices and a congruent pair also gets tick marks on matching sides.
        """
        shapes = self._pair_shapes(ctx, congruent)
        w, h = ctx.content_width, ctx.content_height
        avail_w = w / 2 * AVAILABLE_FRACTION
        avail_h = h * AVAILABLE_FRACTION - COMPARE_HEADROOM
        extents = [(max(p[0] for p in pts) - min(p[0] for p in pts),
                    max(p[1] for p in pts) - min(p[1] for p in pts)) for pts in shapes]
        scale = min(fit_scale(ex, ey, avail_w, avail_h, PLANAR_SCALE_CLAMP) for ex, ey in extents)

        placed = []
        for cell_x, points in zip((w / 4, 3 * w / 4), shapes):
            mid_x = (max(p[0] for p in points) + min(p[0] for p in points)) / 2
            mid_y = (max(p[1] for p in points) + min(p[1] for p in points)) / 2
            placed.append([(cell_x + (x - mid_x) * scale, h / 2 - (y - mid_y) * scale) for x, y in points])

        letters = [chr(ord("A") + i % 26) for i in range(sum(len(c) for c in placed))]
        styles = (ctx.face_style(), ctx.face_style(color=ctx.theme.secondary_color))
        offset = 0
        for corners, points, style in zip(placed, shapes, styles):
            ctx.polygon(corners, style=style, role="face")
            ctx.vertex_labels(corners, letters[offset:offset + len(corners)])
            offset += len(corners)
            if ctx.show_measurements:
                mid = centroid(corners)
                for (a, b), length in zip(_edges(corners), _edge_lengths(points)):
                    at = outward_normal(a, b, mid, 14)
                    text = f"{format_number(round(length, 2))} {ctx.unit}".strip()
                    ctx.text((at[0], at[1] + 4), text, role="measurement", weight="bold")

        matched = len(shapes[0]) == len(shapes[1])
        if ctx.config.show_correspondence:
            if not matched:
                ctx.warn("the two shapes have different vertex counts; no correspondence drawn")
            else:
                style = ctx.stroke_style(color=ctx.theme.accent_color, width=1, dash="4,4", opacity=0.6)
                for a, b in zip(*placed):
                    ctx.line(a, b, style=style, role="correspondence")
                if congruent:
                    for count, (first, second) in enumerate(zip(_edges(placed[0]), _edges(placed[1])), 1):
                        ctx.tick_marks(*first, count=count)
                        ctx.tick_marks(*second, count=count)

        ratio = side_ratio(shapes[0], shapes[1]) if matched else None
        if congruent and (ratio is None or abs(ratio - 1) > 1e-6):
            ctx.warn("corresponding sides of the two triangles are not equal")
        elif not congruent and ratio is None:
            ctx.warn("corresponding sides of the two shapes are not proportional")
        ctx.meta.update(scale_factor=ratio)

        top = h * (1 - AVAILABLE_FRACTION) / 2
        title = "Congruent Shapes" if congruent else "Similar Shapes"
        postulate = ctx.option("postulate") if congruent else None
        if postulate:
            title = f"{title} ({postulate})"
        ctx.text((w / 2, top), title, role="caption", weight="bold")
        if not congruent and ratio is not None and ctx.option("showScaleFactor", True):
            ctx.text((w / 2, h - top / 2), f"Scale Factor: {format_number(round(ratio, 4))}",
                     role="caption")


def _signed_area(path: Sequence[Point]) -> float:
    count = len(path)
    return sum(path[i][0] * path[(i + 1) % count][1] - path[(i + 1) % count][0] * path[i][1]
               for i in range(count)) / 2


def _edges(points: Sequence[Point]) -> List[Tuple[Point, Point]]:
    return list(zip(points, list(points[1:]) + list(points[:1])))


def _edge_lengths(points: Sequence[Point]) -> List[float]:
    return [math.dist(a, b) for a, b in _edges(points)]


# =============================================================================
# TRANSFORMATION MATH
# =============================================================================

def _as_point(raw: Any) -> Optional[Point]:
    found = vertex_points([raw]) if raw is not None else None
    return found[0] if found else None


def normalize_step(step: Dict[str, Any]) -> Dict[str, Any]:
    """Canonical type name, default parameters filled in, numbers and center parsed."""
    kind = str(step.get("type") or "translation").strip().lower()
    kind = TRANSFORM_ALIASES.get(kind, kind)
    defaults = TRANSFORM_DEFAULTS.get(kind, {})
    merged = dict(defaults)
    merged.update({key: value for key, value in step.items() if value is not None})
    merged["type"] = kind
    for key in ("dx", "dy", "angle", "scale", "slope", "intercept"):
        if key in merged:
            merged[key] = as_number(merged[key], as_number(defaults.get(key), 0.0))
    if kind == "reflection" and str(merged.get("line", "")).lower() in ("origin", "point"):
        merged.setdefault("center", (0.0, 0.0))
    if "center" in merged:
        merged["center"] = _as_point(merged["center"]) or (0.0, 0.0)
    return merged


def mirror_line(step: Dict[str, Any]) -> Optional[Tuple[Point, Point]]:
    """(point, direction) of a reflection's mirror line; None for a point reflection."""
    if "slope" in step:
        return (0.0, as_number(step.get("intercept"), 0.0)), (1.0, step["slope"])
    line = str(step.get("line", "y-axis")).replace(" ", "").lower()
    if line in ("origin", "point"):
        return None
    if line not in MIRROR_LINES:
        raise ValueError(f"unknown reflection line {step.get('line')!r}")
    return MIRROR_LINES[line]


def apply_transform(points: Sequence[Point], step: Dict[str, Any]) -> List[Point]:
    """
    Image of ``points`` (plane coordinates, y up) under one normalized step.

        >>> apply_transform([(1, 0)], normalize_step({"type": "rotation"}))
        [(0.0, 1.0)]
    """
    pts = np.asarray(points, dtype=float)
    kind = step["type"]
    if kind == "translation":
        out = pts + np.array([step["dx"], step["dy"]])
    elif kind == "rotation":
        theta = math.radians(step["angle"])
        turn = np.array([[math.cos(theta), -math.sin(theta)], [math.sin(theta), math.cos(theta)]])
        center = np.asarray(step["center"], dtype=float)
        out = (pts - center) @ turn.T + center
    elif kind == "reflection":
        mirror = mirror_line(step)
        if mirror is None:
            out = 2 * np.asarray(step["center"], dtype=float) - pts
        else:
            base = np.asarray(mirror[0], dtype=float)
            heading = np.asarray(mirror[1], dtype=float)
            heading = heading / np.linalg.norm(heading)
            rel = pts - base
            out = base + 2 * np.outer(rel @ heading, heading) - rel
    elif kind == "dilation":
        center = np.asarray(step["center"], dtype=float)
        out = center + (pts - center) * step["scale"]
    else:
        raise ValueError(f"unknown transformation {step.get('type')!r}")
    # Float noise would keep a quarter turn off the grid points
    out = np.round(out, 9) + 0.0
    return [(float(x), float(y)) for x, y in out]


# =============================================================================
# COMPARISON SHAPES
# =============================================================================

def sss_triangle(a: float, b: float, c: float) -> List[Point]:
    """Triangle with base a along the x axis, then sides b and c counter-clockwise."""
    longest = max(a, b, c)
    if min(a, b, c) <= 0 or longest >= a + b + c - longest:
        raise ValueError(f"sides {format_number(a)}, {format_number(b)}, {format_number(c)} "
                         "do not form a triangle")
    x = (a * a + c * c - b * b) / (2 * a)
    return [(0.0, 0.0), (a, 0.0), (x, math.sqrt(max(c * c - x * x, 0.0)))]


def regular_points(count: int, side: float) -> List[Point]:
    """Regular polygon with the given side length and a horizontal bottom edge."""
    radius = side / (2 * math.sin(math.pi / count))
    start = -90 - 180.0 / count
    return [(radius * math.cos(math.radians(start + i * 360.0 / count)),
             radius * math.sin(math.radians(start + i * 360.0 / count))) for i in range(count)]


def shape_vertices(shape: Dict[str, Any]) -> List[Point]:
    """
    Plane vertices for a comparison shape: ``{vertices: [...]}``,
    ``{name: 'triangle', sides: [a, b, c]}``, ``{name: 'rectangle', length, width}``
    or a regular polygon by name with ``sides: [s, ...]``.
    """
    if not isinstance(shape, dict):
        raise ValueError(f"shape {shape!r} is not an object")
    explicit = vertex_points(shape.get("vertices"))
    if explicit is not None and len(explicit) >= 3:
        return explicit
    name = str(shape.get("name", "triangle")).lower()
    sides = shape.get("sides")
    lengths = [as_number(s, math.nan) for s in sides] if isinstance(sides, (list, tuple)) else []

    if name == "rectangle":
        length = as_number(shape.get("length"), math.nan)
        width = as_number(shape.get("width"), math.nan)
        if not (length > 0 and width > 0):
            raise ValueError("rectangle needs a positive length and width")
        return [(0.0, 0.0), (length, 0.0), (length, width), (0.0, width)]
    if name == "triangle" and len(lengths) >= 3:
        return sss_triangle(*lengths[:3])
    count = REGULAR_SIDES.get(name)
    if count is None:
        raise ValueError(f"unsupported shape {name!r}")
    side = lengths[0] if lengths else as_number(shape.get("sideLength"), math.nan)
    if not side > 0:
        raise ValueError(f"{name} needs a positive side length")
    return regular_points(count, side)


def side_ratio(first: Sequence[Point], second: Sequence[Point]) -> Optional[float]:
    """Common ratio of corresponding sides, or None when the sides are not proportional."""
    ratios = [b / a for a, b in zip(_edge_lengths(first), _edge_lengths(second)) if a > 0]
    if len(ratios) != len(first) or not ratios:
        return None
    if max(ratios) - min(ratios) > 1e-6 * max(ratios):
        return None
    return ratios[0]
