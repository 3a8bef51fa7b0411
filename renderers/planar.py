"""
planar.py

Flat figures for area, perimeter and shape-identification problems:
rectangles, squares, triangles, circles, parallelograms, trapezoids, the
right triangle used by Pythagorean problems and general polygons.

Polygons are scaled against 80% of the canvas (capped at PLANAR_SCALE_CLAMP
px per unit) and centered on the canvas center. With ``uniformScale`` on (the
default) one factor serves both axes; turning it off lets axis-aligned
figures stretch x and y separately to fill the available box.
"""

from __future__ import annotations

import math
from typing import Dict, List, Sequence, Tuple

from renderers.base import (
    AVAILABLE_FRACTION,
    PLANAR_SCALE_CLAMP,
    DrawFn,
    FamilyRenderer,
    RenderContext,
    fit_scale,
    format_number,
    outward_normal,
    polar,
    centroid,
    vertex_points,
)

Point = Tuple[float, float]

DEFAULT_POLYGON_SIDES = 5


class PlanarRenderer(FamilyRenderer):
    """Basic 2-D shapes."""

    family = "planar"
    size_families = {"circle": "square", "polygon": "square"}

    def draw_methods(self) -> Dict[str, DrawFn]:
        return {
            "rectangle": self._draw_rectangle,
            "square": self._draw_square,
            "triangle": self._draw_triangle,
            "circle": self._draw_circle,
            "parallelogram": self._draw_parallelogram,
            "trapezoid": self._draw_trapezoid,
            "right-triangle": self._draw_right_triangle,
            "polygon": self._draw_polygon,
        }

    # --------------------------------------------------------------------- #
    # Internal helpers
    # --------------------------------------------------------------------- #

    @staticmethod
    def _scales(ctx: RenderContext, extent_x: float, extent_y: float) -> Tuple[float, float]:
        """(x, y) px per unit for a figure of the given extent."""
        avail_w, avail_h = ctx.available_box
        if ctx.config.uniform_scale:
            scale = fit_scale(extent_x, extent_y, avail_w, avail_h, PLANAR_SCALE_CLAMP)
            return scale, scale
        return (fit_scale(extent_x, 0, avail_w, avail_h, PLANAR_SCALE_CLAMP),
                fit_scale(0, extent_y, avail_w, avail_h, PLANAR_SCALE_CLAMP))

    @staticmethod
    def _face(ctx: RenderContext, points: List[Point]):
        color = ctx.theme.accent_color if ctx.option("highlightArea", False) else None
        return ctx.polygon(points, style=ctx.face_style(color=color), role="face")

    @staticmethod
    def _box(ctx: RenderContext, width_px: float, height_px: float) -> Tuple[float, float, float, float]:
        """(left, top, right, bottom) of a figure of the given pixel size."""
        cx, cy = ctx.anchor(width_px, height_px)
        return cx - width_px / 2, cy - height_px / 2, cx + width_px / 2, cy + height_px / 2

    @staticmethod
    def _unit_grid(ctx: RenderContext, left: float, top: float, cols: float, rows: float,
                   sx: float, sy: float) -> None:
        if not ctx.config.show_grid:
            return
        style = ctx.stroke_style(width=0.5, opacity=0.4)
        for i in range(1, int(math.ceil(cols))):
            x = left + i * sx
            ctx.line((x, top), (x, top + rows * sy), style=style, role="grid")
        for j in range(1, int(math.ceil(rows))):
            y = top + j * sy
            ctx.line((left, y), (left + cols * sx, y), style=style, role="grid")

    # --------------------------------------------------------------------- #
    # Quadrilaterals
    # --------------------------------------------------------------------- #

    def _draw_rectangle(self, ctx: RenderContext) -> None:
        length = ctx.measure("length", 5)
        width = ctx.measure("width", 3)
        sx, sy = self._scales(ctx, length, width)
        left, top, right, bottom = self._box(ctx, length * sx, width * sy)

        corners = [(left, top), (right, top), (right, bottom), (left, bottom)]
        self._face(ctx, corners)
        self._unit_grid(ctx, left, top, length, width, sx, sy)

        ctx.measurement(((left + right) / 2, bottom + 20), "l", length)
        ctx.measurement((right + 10, (top + bottom) / 2 + 5), "w", width, anchor="start")
        ctx.vertex_labels(corners)

    def _draw_square(self, ctx: RenderContext) -> None:
        side = ctx.measure("side", 4)
        sx, sy = self._scales(ctx, side, side)
        left, top, right, bottom = self._box(ctx, side * sx, side * sy)

        corners = [(left, top), (right, top), (right, bottom), (left, bottom)]
        self._face(ctx, corners)
        self._unit_grid(ctx, left, top, side, side, sx, sy)
        if ctx.config.show_labels:
            for a, b in zip(corners, corners[1:] + corners[:1]):
                ctx.tick_marks(a, b)

        ctx.measurement(((left + right) / 2, bottom + 20), "s", side)
        ctx.vertex_labels(corners)

    def _draw_parallelogram(self, ctx: RenderContext) -> None:
        base = ctx.measure("base", 6)
        height = ctx.measure("height", 4)
        slant = ctx.measure("offset", height * 0.5)
        sx, sy = self._scales(ctx, base + slant, height)
        left, top, right, bottom = self._box(ctx, (base + slant) * sx, height * sy)
        shift = slant * sx

        corners = [(left, bottom), (right - shift, bottom), (right, top), (left + shift, top)]
        self._face(ctx, corners)

        foot = (left + shift, bottom)
        ctx.line(corners[3], foot, style=ctx.construction_style(), role="construction")
        ctx.right_angle_mark(foot, 0, 90, size=10)

        ctx.measurement(((left + right - shift) / 2, bottom + 20), "b", base)
        ctx.measurement((left + shift + 6, (top + bottom) / 2 + 5), "h", height, anchor="start")
        ctx.vertex_labels(corners)

    def _draw_trapezoid(self, ctx: RenderContext) -> None:
        base1 = ctx.measure("base1", 8)
        base2 = ctx.measure("base2", 4)
        height = ctx.measure("height", 5)
        sx, sy = self._scales(ctx, max(base1, base2), height)
        left, top, right, bottom = self._box(ctx, max(base1, base2) * sx, height * sy)
        mid_x = (left + right) / 2

        b1, b2 = base1 * sx, base2 * sx
        corners = [(mid_x - b1 / 2, bottom), (mid_x + b1 / 2, bottom),
                   (mid_x + b2 / 2, top), (mid_x - b2 / 2, top)]
        self._face(ctx, corners)

        foot = (corners[3][0], bottom)
        ctx.line(corners[3], foot, style=ctx.construction_style(), role="construction")
        ctx.right_angle_mark(foot, 0, 90, size=10)

        ctx.measurement((mid_x, bottom + 20), "b1", base1)
        ctx.measurement((mid_x, top - 10), "b2", base2)
        ctx.measurement((foot[0] - 8, (top + bottom) / 2 + 5), "h", height, anchor="end")
        ctx.vertex_labels(corners)

    # --------------------------------------------------------------------- #
    # Triangles
    # --------------------------------------------------------------------- #

    def _draw_triangle(self, ctx: RenderContext) -> None:
        base = ctx.measure("base", 6)
        height = ctx.measure("height", 4)
        sx, sy = self._scales(ctx, base, height)
        left, top, right, bottom = self._box(ctx, base * sx, height * sy)
        apex = ((left + right) / 2, top)

        corners = [(left, bottom), (right, bottom), apex]
        self._face(ctx, corners)

        foot = (apex[0], bottom)
        ctx.line(apex, foot, style=ctx.construction_style(), role="construction")
        ctx.right_angle_mark(foot, 0, 90, size=10)

        ctx.measurement((apex[0], bottom + 20), "b", base)
        ctx.measurement((apex[0] + 8, (top + bottom) / 2 + 5), "h", height, anchor="start")
        ctx.vertex_labels(corners)

    def _draw_right_triangle(self, ctx: RenderContext) -> None:
        sides = ctx.request.measurements.get("sides") or ctx.request.measurements
        a = _side(sides.get("a"), None)
        b = _side(sides.get("b"), None)
        c = _side(sides.get("c"), None)
        # Legs may be derived from the hypotenuse when one of them is the unknown
        if a is None and b is not None and c is not None and c > b:
            a = math.sqrt(c * c - b * b)
        if b is None and a is not None and c is not None and c > a:
            b = math.sqrt(c * c - a * a)
        a = 3.0 if a is None else a
        b = 4.0 if b is None else b
        c = math.hypot(a, b) if c is None else c
        missing = sides.get("missing") or ctx.option("missing")

        sx, sy = self._scales(ctx, b, a)
        left, top, right, bottom = self._box(ctx, b * sx, a * sy)
        corner_a, corner_b, corner_c = (left, top), (left, bottom), (right, bottom)
        corners = [corner_a, corner_b, corner_c]
        self._face(ctx, corners)
        ctx.right_angle_mark(corner_b, 0, 90)

        values = {"a": a, "b": b, "c": c}
        if ctx.show_measurements:
            mid = centroid(corners)
            positions = {
                "a": (left - 10, (top + bottom) / 2 + 5),
                "b": ((left + right) / 2, bottom + 20),
                "c": outward_normal(corner_a, corner_c, mid, 18),
            }
            anchors = {"a": "end", "b": "middle", "c": "start"}
            for name in ("a", "b", "c"):
                if name == missing:
                    ctx.measurement(positions[name], name, "?", anchor=anchors[name], unit="")
                else:
                    ctx.measurement(positions[name], name, _rounded(values[name]),
                                    anchor=anchors[name])
        ctx.vertex_labels(corners)

    # --------------------------------------------------------------------- #
    # Polygons
    # --------------------------------------------------------------------- #

    def _draw_polygon(self, ctx: RenderContext) -> None:
        """
        Regular polygon with ``sides`` (or a vertex count) corners, or the
        polygon through explicit ``vertices`` given as {x, y} points in
        math space (y up).
        """
        explicit = vertex_points(ctx.request.measurements.get("vertices"))
        if explicit is None:
            explicit = vertex_points(ctx.datum("vertices"))
        if explicit is not None and len(explicit) >= 3:
            self._irregular_polygon(ctx, explicit)
            return

        raw = ctx.request.measurements.get("sides", ctx.request.measurements.get("vertices"))
        if raw is None:
            raw = ctx.datum("sides", DEFAULT_POLYGON_SIDES)
        sides = int(_side(raw, DEFAULT_POLYGON_SIDES))
        if sides < 3:
            ctx.warn(f"a polygon needs at least 3 sides, got {sides}; drawing a pentagon")
            sides = DEFAULT_POLYGON_SIDES

        radius = ctx.available_size / 2
        center = ctx.anchor(2 * radius, 2 * radius)
        # Bottom edge horizontal
        start = 270 - 180.0 / sides
        corners = [polar(center[0], center[1], radius, start + i * 360.0 / sides) for i in range(sides)]
        self._face(ctx, corners)

        side_length = ctx.request.measure("sideLength")
        if side_length is not None:
            bottom = max(corners[0][1], corners[1][1])
            ctx.measurement(((corners[0][0] + corners[1][0]) / 2, bottom + 20), "s", side_length)
        ctx.vertex_labels(corners)

    def _irregular_polygon(self, ctx: RenderContext, points: Sequence[Point]) -> None:
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        ext_x, ext_y = max(xs) - min(xs), max(ys) - min(ys)
        sx, sy = self._scales(ctx, ext_x, ext_y)
        left, top, _, _ = self._box(ctx, ext_x * sx, ext_y * sy)
        corners = [(left + (x - min(xs)) * sx, top + (max(ys) - y) * sy) for x, y in points]
        self._face(ctx, corners)

        if ctx.show_measurements:
            mid = centroid(corners)
            count = len(points)
            for i in range(count):
                (x1, y1), (x2, y2) = points[i], points[(i + 1) % count]
                at = outward_normal(corners[i], corners[(i + 1) % count], mid, 14)
                text = f"{format_number(_rounded(math.hypot(x2 - x1, y2 - y1)))} {ctx.unit}".strip()
                ctx.text((at[0], at[1] + 4), text, role="measurement", weight="bold")
        ctx.vertex_labels(corners)

    # --------------------------------------------------------------------- #
    # Circle
    # --------------------------------------------------------------------- #

    def _draw_circle(self, ctx: RenderContext) -> None:
        radius = ctx.measure("radius", 3)
        scale = min(ctx.available_size / (2 * radius), PLANAR_SCALE_CLAMP)
        r_px = radius * scale
        center = ctx.anchor(2 * r_px, 2 * r_px)

        ctx.circle(center, r_px, style=self._face_style_for_circle(ctx), role="face")
        ctx.dot(center, 3)
        edge = (center[0] + r_px, center[1])
        ctx.line(center, edge, style=ctx.stroke_style(color=ctx.theme.accent_color), role="construction")

        if ctx.config.coordinate_mode:
            self._circle_axes(ctx, center, r_px)

        ctx.measurement((center[0] + r_px / 2, center[1] - 8), "r", radius)
        if ctx.config.show_labels:
            ctx.text((center[0] - 8, center[1] + 16), "O", role="label", weight="bold")

    @staticmethod
    def _face_style_for_circle(ctx: RenderContext):
        color = ctx.theme.accent_color if ctx.option("highlightArea", False) else None
        return ctx.face_style(color=color)

    @staticmethod
    def _circle_axes(ctx: RenderContext, center: Point, r_px: float) -> None:
        reach = r_px + min(ctx.content_width, ctx.content_height) * (1 - AVAILABLE_FRACTION) / 2 * 0.8
        style = ctx.stroke_style(width=1, opacity=0.6)
        ctx.line((center[0] - reach, center[1]), (center[0] + reach, center[1]), style=style, role="axis")
        ctx.line((center[0], center[1] - reach), (center[0], center[1] + reach), style=style, role="axis")
        cx_value = ctx.request.measure("centerX", ctx.datum("centerX", ctx.option("centerX", 0)))
        cy_value = ctx.request.measure("centerY", ctx.datum("centerY", ctx.option("centerY", 0)))
        ctx.text((center[0] - 6, center[1] + 16),
                 f"({format_number(cx_value)}, {format_number(cy_value)})",
                 role="label", anchor="end", size=ctx.theme.font_size - 2)


def _side(value, default):
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _rounded(value: float) -> float:
    return round(value, 2)


