"""
coordinate.py

Coordinate-plane diagrams: grid, axes with arrowheads, tick numbers, plotted
points and the overlay a coordinate problem needs (distance legs, midpoint,
a line through two points, a polygon by vertices ...).

The requested range is only a starting point. Any point that falls outside
it grows the range so the point is always visible:

    >>> expand_range(PlaneRange(-10, 10, -10, 10), [(12, 12)])
    PlaneRange(x_min=-10, x_max=13, y_min=-10, y_max=13)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from renderers.base import (
    AVAILABLE_FRACTION,
    DrawFn,
    FamilyRenderer,
    RenderContext,
    format_number,
    measurement_text,
)
from renderers.scene import Style
from schemas.diagram import CoordinateData, CoordinatePoint

Point = Tuple[float, float]

DEFAULT_RANGE = 10
MIN_GRID_SPACING = 15
EDGE_LABEL_MARGIN = 20
POINT_MARGIN = 8
POINT_RADIUS = 4
HIGHLIGHT_RADIUS = 5


# =============================================================================
# RANGE FITTING
# =============================================================================

@dataclass(frozen=True)
class PlaneRange:
    x_min: float
    x_max: float
    y_min: float
    y_max: float

    @property
    def max_extent(self) -> float:
        return max(abs(self.x_min), abs(self.x_max), abs(self.y_min), abs(self.y_max), 1)

    def contains(self, x: float, y: float) -> bool:
        return self.x_min <= x <= self.x_max and self.y_min <= y <= self.y_max


def expand_range(rng: PlaneRange, points: Iterable[Point]) -> PlaneRange:
    """
    Grow each bound independently so every point is inside, with one unit
    of padding past any point that was outside. Points already inside leave
    the range untouched, so expanding twice changes nothing.
    """
    for x, y in points:
        if x < rng.x_min:
            rng = replace(rng, x_min=math.floor(x - 1))
        if x > rng.x_max:
            rng = replace(rng, x_max=math.ceil(x + 1))
        if y < rng.y_min:
            rng = replace(rng, y_min=math.floor(y - 1))
        if y > rng.y_max:
            rng = replace(rng, y_max=math.ceil(y + 1))
    return rng


def grid_spacing(rng: PlaneRange, width: float, height: float) -> float:
    """Pixels per unit: fill 80% of the canvas, never below the legibility floor, never overflow."""
    max_range = rng.max_extent
    computed = min(width * AVAILABLE_FRACTION, height * AVAILABLE_FRACTION) / (2 * max_range)
    floor = min(MIN_GRID_SPACING, width / (3 * max_range))
    spacing = max(computed, floor)
    span_x = max(rng.x_max - rng.x_min, 1)
    span_y = max(rng.y_max - rng.y_min, 1)
    return min(spacing, (width - 2 * POINT_MARGIN) / span_x, (height - 2 * POINT_MARGIN) / span_y)


@dataclass(frozen=True)
class GridLayout:
    rng: PlaneRange
    spacing: float
    origin: Point

    def to_canvas(self, x: float, y: float) -> Point:
        return self.origin[0] + x * self.spacing, self.origin[1] - y * self.spacing

    @property
    def left(self) -> float:
        return self.to_canvas(self.rng.x_min, 0)[0]

    @property
    def right(self) -> float:
        return self.to_canvas(self.rng.x_max, 0)[0]

    @property
    def top(self) -> float:
        return self.to_canvas(0, self.rng.y_max)[1]

    @property
    def bottom(self) -> float:
        return self.to_canvas(0, self.rng.y_min)[1]


def layout_grid(rng: PlaneRange, width: float, height: float, center: bool = True) -> GridLayout:
    spacing = grid_spacing(rng, width, height)
    if center:
        mid_x = (rng.x_min + rng.x_max) / 2
        mid_y = (rng.y_min + rng.y_max) / 2
        origin = (width / 2 - mid_x * spacing, height / 2 + mid_y * spacing)
    else:
        origin = (POINT_MARGIN - rng.x_min * spacing, POINT_MARGIN + rng.y_max * spacing)
    return GridLayout(rng=rng, spacing=spacing, origin=origin)


def clip_line(p: Point, q: Point, rng: PlaneRange) -> Optional[Tuple[Point, Point]]:
    """The infinite line through p and q, cut to the range rectangle (Liang-Barsky)."""
    dx, dy = q[0] - p[0], q[1] - p[1]
    if dx == 0 and dy == 0:
        return None
    t_low, t_high = -math.inf, math.inf
    for delta, start, low, high in ((dx, p[0], rng.x_min, rng.x_max), (dy, p[1], rng.y_min, rng.y_max)):
        if delta == 0:
            if not low <= start <= high:
                return None
            continue
        t1, t2 = (low - start) / delta, (high - start) / delta
        t_low, t_high = max(t_low, min(t1, t2)), min(t_high, max(t1, t2))
    if t_low > t_high:
        return None
    return (p[0] + dx * t_low, p[1] + dy * t_low), (p[0] + dx * t_high, p[1] + dy * t_high)


# =============================================================================
# RENDERER
# =============================================================================

class CoordinateRenderer(FamilyRenderer):
    """Coordinate planes and point plots."""

    family = "coordinate"
    default_size_family = "square"

    def draw_methods(self) -> Dict[str, DrawFn]:
        return {
            "coordinate-plane": self._draw_coordinate_plane,
            "distance-points": self._draw_distance_points,
        }

    # --------------------------------------------------------------------- #
    # Entry points
    # --------------------------------------------------------------------- #

    def _draw_coordinate_plane(self, ctx: RenderContext) -> None:
        try:
            data = CoordinateData.model_validate(ctx.request.data or {})
        except ValidationError as exc:
            ctx.warn(f"invalid coordinate data, drawing an empty plane: {exc.error_count()} error(s)")
            data = CoordinateData()
        self._plot(ctx, data)

    def _draw_distance_points(self, ctx: RenderContext) -> None:
        coords = ctx.request.measurements.get("points") or ctx.request.measurements
        try:
            first = CoordinatePoint(x=coords["x1"], y=coords["y1"], label="A")
            second = CoordinatePoint(x=coords["x2"], y=coords["y2"], label="B")
        except (KeyError, TypeError, ValidationError):
            ctx.warn("distance-points needs x1, y1, x2, y2; drawing an empty plane")
            self._plot(ctx, CoordinateData())
            return
        data = CoordinateData(points=[first, second], problem_type="distance",
                              coordinate_range=(ctx.request.data or {}).get("coordinateRange"))
        self._plot(ctx, data, distance=coords.get("distance"))

    # --------------------------------------------------------------------- #
    # Internal helpers
    # --------------------------------------------------------------------- #

    @staticmethod
    def _problem_type(ctx: RenderContext, data: CoordinateData) -> str:
        return str(data.problem_type or ctx.config.problem_type or "plotPoints")

    @staticmethod
    def _initial_range(ctx: RenderContext, data: CoordinateData) -> PlaneRange:
        extent = data.coordinate_range or ctx.option("coordinateRange") or DEFAULT_RANGE
        extent = abs(float(extent))
        low = -extent if ctx.option("allowNegatives", True) else 0
        x_range = ctx.config.x_range or [low, extent]
        y_range = ctx.config.y_range or [low, extent]
        return PlaneRange(min(x_range), max(x_range), min(y_range), max(y_range))

    def _plot(self, ctx: RenderContext, data: CoordinateData, distance=None) -> None:
        problem_type = self._problem_type(ctx, data)
        points = data.all_points()
        highlighted = data.highlighted()

        wanted: List[Point] = [(p.x, p.y) for p in points]
        if highlighted is not None:
            wanted.append((highlighted.x, highlighted.y))
        if data.midpoint is not None:
            wanted.append((data.midpoint.x, data.midpoint.y))

        rng = expand_range(self._initial_range(ctx, data), wanted)
        grid = layout_grid(rng, ctx.content_width, ctx.content_height, center=ctx.config.center)
        ctx.meta.update(x_range=(rng.x_min, rng.x_max), y_range=(rng.y_min, rng.y_max),
                        grid_spacing=grid.spacing, problem_type=problem_type)

        show_numbers = data.show_grid_numbers
        if show_numbers is None:
            show_numbers = ctx.option("showGridNumbers", True)
        self.draw_plane(ctx, grid, show_numbers)

        self._draw_overlay(ctx, grid, problem_type, points, data, distance)
        for index, point in enumerate(points):
            at = grid.to_canvas(point.x, point.y)
            ctx.dot(at, POINT_RADIUS, color=ctx.theme.primary_color)
            if ctx.config.show_labels:
                name = point.label or chr(ord("A") + index)
                ctx.text((at[0] + 8, at[1] - 8), name, anchor="start", weight="bold")

        if highlighted is not None and problem_type != "plotting":
            self._draw_highlight(ctx, grid, highlighted)

    def draw_plane(self, ctx: RenderContext, grid: GridLayout, show_numbers: bool = True) -> None:
        """Grid lines, axes, tick numbers and axis arrows for a laid-out grid."""
        self._draw_grid(ctx, grid)
        if show_numbers:
            self._draw_tick_labels(ctx, grid)
        self._draw_axis_arrows(ctx, grid)

    def _draw_grid(self, ctx: RenderContext, grid: GridLayout) -> None:
        rng = grid.rng
        show_grid = ctx.config.show_grid is not False
        grid_style = ctx.stroke_style(width=0.5, opacity=0.3)
        axis_style = ctx.stroke_style(width=2, opacity=1.0)

        for x in range(math.ceil(rng.x_min), math.floor(rng.x_max) + 1):
            px = grid.to_canvas(x, 0)[0]
            if x == 0:
                ctx.line((px, grid.top), (px, grid.bottom), style=axis_style, role="axis")
            elif show_grid:
                ctx.line((px, grid.top), (px, grid.bottom), style=grid_style, role="grid")
        for y in range(math.ceil(rng.y_min), math.floor(rng.y_max) + 1):
            py = grid.to_canvas(0, y)[1]
            if y == 0:
                ctx.line((grid.left, py), (grid.right, py), style=axis_style, role="axis")
            elif show_grid:
                ctx.line((grid.left, py), (grid.right, py), style=grid_style, role="grid")

    def _draw_tick_labels(self, ctx: RenderContext, grid: GridLayout) -> None:
        rng = grid.rng
        ox, oy = grid.origin
        size = max(ctx.theme.font_size - 4, 8)
        has_x_axis = rng.y_min <= 0 <= rng.y_max
        has_y_axis = rng.x_min <= 0 <= rng.x_max

        if has_x_axis:
            for x in range(math.ceil(rng.x_min), math.floor(rng.x_max) + 1):
                px = grid.to_canvas(x, 0)[0]
                if x == 0 or px < EDGE_LABEL_MARGIN or px > ctx.content_width - EDGE_LABEL_MARGIN:
                    continue
                ctx.text((px, oy + 20), str(x), role="tick", size=size)
        if has_y_axis:
            for y in range(math.ceil(rng.y_min), math.floor(rng.y_max) + 1):
                py = grid.to_canvas(0, y)[1]
                if y == 0 or py < EDGE_LABEL_MARGIN or py > ctx.content_height - EDGE_LABEL_MARGIN:
                    continue
                ctx.text((ox - 15, py + 4), str(y), role="tick", anchor="end", size=size)
        if has_x_axis and has_y_axis:
            ctx.text((ox - 15, oy + 20), "0", role="tick", size=size)

    def _draw_axis_arrows(self, ctx: RenderContext, grid: GridLayout) -> None:
        rng = grid.rng
        ox, oy = grid.origin
        show_names = ctx.option("showAxesLabels", True)
        if rng.y_min <= 0 <= rng.y_max:
            ctx.arrowhead((grid.right, oy), 0, role="axis")
            if show_names:
                ctx.text((grid.right - 15, oy - 10), "x", role="axis-label", weight="bold")
        if rng.x_min <= 0 <= rng.x_max:
            ctx.arrowhead((ox, grid.top), 90, role="axis")
            if show_names:
                ctx.text((ox + 10, grid.top + 15), "y", role="axis-label", anchor="start", weight="bold")

    def _draw_highlight(self, ctx: RenderContext, grid: GridLayout, point: CoordinatePoint) -> None:
        at = grid.to_canvas(point.x, point.y)
        ctx.circle(at, HIGHLIGHT_RADIUS,
                   style=Style(fill=ctx.theme.accent_color, fill_opacity=1.0, stroke="#ffffff", stroke_width=2),
                   role="highlight")
        label = point.label or f"({format_number(point.x)}, {format_number(point.y)})"
        ctx.text((at[0] + 8, at[1] - 8), label, role="label", anchor="start", weight="bold")

    # --------------------------------------------------------------------- #
    # Problem-type overlays
    # --------------------------------------------------------------------- #

    def _draw_overlay(self, ctx: RenderContext, grid: GridLayout, problem_type: str,
                      points: Sequence[CoordinatePoint], data: CoordinateData, distance=None) -> None:
        canvas = [grid.to_canvas(p.x, p.y) for p in points]
        accent = ctx.stroke_style(color=ctx.theme.accent_color)

        if problem_type in ("distance", "midpoint", "slope", "line", "graphLine", "intersection") and len(points) < 2:
            ctx.warn(f"{problem_type} overlay needs two points, got {len(points)}")
            return

        if problem_type == "distance":
            a, b = points[0], points[1]
            ctx.line(canvas[0], canvas[1], style=accent, role="segment")
            corner = grid.to_canvas(b.x, a.y)
            ctx.polyline([canvas[0], corner, canvas[1]], style=ctx.construction_style(), role="construction")
            value = distance if distance is not None else round(math.hypot(b.x - a.x, b.y - a.y), 2)
            mid = ((canvas[0][0] + canvas[1][0]) / 2, (canvas[0][1] + canvas[1][1]) / 2)
            if ctx.show_measurements:
                ctx.text((mid[0] - 8, mid[1] - 8), measurement_text("d", value, ctx.unit),
                         role="measurement", anchor="end", weight="bold")
        elif problem_type == "midpoint":
            a, b = points[0], points[1]
            ctx.line(canvas[0], canvas[1], style=accent, role="segment")
            mid = data.midpoint or CoordinatePoint(x=(a.x + b.x) / 2, y=(a.y + b.y) / 2)
            at = grid.to_canvas(mid.x, mid.y)
            ctx.circle(at, HIGHLIGHT_RADIUS,
                       style=Style(fill=ctx.theme.secondary_color, fill_opacity=1.0,
                                   stroke="#ffffff", stroke_width=2),
                       role="midpoint")
            if ctx.config.show_labels or ctx.show_measurements:
                ctx.text((at[0] + 8, at[1] + 16), mid.label or "M", anchor="start", weight="bold")
        elif problem_type in ("slope", "line", "graphLine"):
            self._extended_line(ctx, grid, points[0], points[1])
        elif problem_type == "intersection":
            self._extended_line(ctx, grid, points[0], points[1])
            if len(points) >= 4:
                self._extended_line(ctx, grid, points[2], points[3])
        elif problem_type == "polygon":
            if len(points) < 3:
                ctx.warn(f"polygon overlay needs three points, got {len(points)}")
                return
            ctx.polygon(canvas, style=ctx.face_style(), role="face")

    def _extended_line(self, ctx: RenderContext, grid: GridLayout, a: CoordinatePoint,
                       b: CoordinatePoint) -> None:
        clipped = clip_line((a.x, a.y), (b.x, b.y), grid.rng)
        if clipped is None:
            ctx.warn("line overlay does not cross the plotted range")
            return
        start, end = clipped
        ctx.line(grid.to_canvas(*start), grid.to_canvas(*end),
                 style=ctx.stroke_style(color=ctx.theme.secondary_color), role="line")
