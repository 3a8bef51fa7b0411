"""
three_d.py

Pseudo-3-D solids drawn from flat primitives. Depth is faked with a fixed
isometric offset: a receding face is the front face slid by

    (iso_x, iso_y) = (depth * scale * 0.5, depth * scale * 0.3)

and round bases are ellipses squashed to 0.3 of their width. There is no
camera; the point is a clean, labelled picture for volume and surface-area
problems, not realism.

Also provides unfolded nets (prisms, cubes, cylinders) and a flat
silhouette when perspective is turned off.
"""

from __future__ import annotations

import math
from typing import Dict, List, Tuple

from renderers.base import (
    HIDDEN_DASH,
    DrawFn,
    FamilyRenderer,
    RenderContext,
    fit_scale,
)
from renderers.scene import GradientStop, RadialGradient, Style

Point = Tuple[float, float]

SOLID_SCALE_CLAMP = 60
ISO_DEPTH_X = 0.5
ISO_DEPTH_Y = 0.3
ELLIPSE_SQUASH = 0.3
BACKGROUND_GRID = 20

NET_SHAPES = ("rectangularPrism", "cube", "cylinder")


def iso_offset(depth: float, scale: float) -> Point:
    """Screen shift of a face pushed ``depth`` units back (up and to the right)."""
    return depth * scale * ISO_DEPTH_X, -depth * scale * ISO_DEPTH_Y


def _shift(point: Point, offset: Point) -> Point:
    return point[0] + offset[0], point[1] + offset[1]


class ThreeDRenderer(FamilyRenderer):
    """Prisms, cylinders, cones, spheres, pyramids and composites."""

    family = "three-d"

    def draw_methods(self) -> Dict[str, DrawFn]:
        return {
            "rectangularPrism": self._draw_rectangular_prism,
            "cube": self._draw_cube,
            "cylinder": self._draw_cylinder,
            "cone": self._draw_cone,
            "sphere": self._draw_sphere,
            "triangularPrism": self._draw_triangular_prism,
            "pyramid": self._draw_pyramid,
            "composite": self._draw_composite,
        }

    # --------------------------------------------------------------------- #
    # Internal helpers
    # --------------------------------------------------------------------- #

    @staticmethod
    def _scale(ctx: RenderContext, extent_x: float, extent_y: float) -> float:
        avail_w, avail_h = ctx.available_box
        scale = fit_scale(extent_x, extent_y, avail_w, avail_h, SOLID_SCALE_CLAMP)
        ctx.meta["scale"] = scale
        return scale

    @staticmethod
    def _frame(ctx: RenderContext, width_px: float, height_px: float) -> Tuple[float, float]:
        """(left, bottom) of a figure of the given projected size."""
        cx, cy = ctx.anchor(width_px, height_px)
        return cx - width_px / 2, cy + height_px / 2

    @staticmethod
    def _faces(ctx: RenderContext) -> Tuple[Style, Style, Style]:
        """Front, top and side face styles; the side reads darker, the top lighter."""
        base = ctx.theme.fill_opacity
        front = ctx.face_style()
        top = ctx.face_style(color=ctx.theme.secondary_color, opacity=base)
        side = ctx.face_style(opacity=min(base * 2, 1.0))
        return front, top, side

    def _background(self, ctx: RenderContext) -> None:
        if not ctx.config.show_grid:
            return
        style = ctx.stroke_style(width=0.5, opacity=0.2)
        x = BACKGROUND_GRID
        while x < ctx.content_width:
            ctx.line((x, 0), (x, ctx.content_height), style=style, role="grid")
            x += BACKGROUND_GRID
        y = BACKGROUND_GRID
        while y < ctx.content_height:
            ctx.line((0, y), (ctx.content_width, y), style=style, role="grid")
            y += BACKGROUND_GRID

    def _prelude(self, ctx: RenderContext) -> bool:
        """Background and net / flat routing. Returns True when the solid was handled."""
        self._background(ctx)
        if ctx.config.show_net_diagram:
            if ctx.shape in NET_SHAPES:
                self._draw_net(ctx)
                return True
            ctx.warn(f"no net available for {ctx.shape}; drawing the solid")
        if not ctx.config.show_3d_perspective:
            self._draw_flat(ctx)
            return True
        return False

    # =========================================================================
    # PRISMS
    # =========================================================================

    def _prism_dimensions(self, ctx: RenderContext) -> Tuple[float, float, float]:
        if ctx.shape == "cube":
            side = ctx.measure("side", ctx.measure("length", 4))
            return side, side, side
        return ctx.measure("length", 5), ctx.measure("width", 3), ctx.measure("height", 4)

    def _draw_rectangular_prism(self, ctx: RenderContext) -> None:
        if self._prelude(ctx):
            return
        length, width, height = self._prism_dimensions(ctx)
        scale = self._scale(ctx, length + width * ISO_DEPTH_X, height + width * ISO_DEPTH_Y)
        off = iso_offset(width, scale)
        left, bottom = self._frame(ctx, (length + width * ISO_DEPTH_X) * scale,
                                   (height + width * ISO_DEPTH_Y) * scale)
        l_px, h_px = length * scale, height * scale

        fl, fr = (left, bottom), (left + l_px, bottom)
        tr, tl = (left + l_px, bottom - h_px), (left, bottom - h_px)
        back_corner = _shift(fl, off)

        hidden = ctx.stroke_style(width=1, dash=HIDDEN_DASH, opacity=0.6)
        ctx.line(back_corner, _shift(fr, off), style=hidden, role="hidden")
        ctx.line(back_corner, _shift(tl, off), style=hidden, role="hidden")
        ctx.line(back_corner, fl, style=hidden, role="hidden")

        front_style, top_style, side_style = self._faces(ctx)
        ctx.polygon([fl, fr, tr, tl], style=front_style, role="face")
        ctx.polygon([tl, tr, _shift(tr, off), _shift(tl, off)], style=top_style, role="face")
        ctx.polygon([fr, _shift(fr, off), _shift(tr, off), tr], style=side_style, role="face")

        if ctx.shape == "cube":
            ctx.measurement(((fl[0] + fr[0]) / 2, bottom + 20), "s", length)
            return
        ctx.measurement(((fl[0] + fr[0]) / 2, bottom + 20), "l", length)
        ctx.measurement((left - 10, bottom - h_px / 2 + 5), "h", height, anchor="end")
        depth_mid = _shift(fr, (off[0] / 2, off[1] / 2))
        ctx.measurement((depth_mid[0] + 10, depth_mid[1] + 12), "w", width, anchor="start")

    def _draw_cube(self, ctx: RenderContext) -> None:
        self._draw_rectangular_prism(ctx)

    def _draw_triangular_prism(self, ctx: RenderContext) -> None:
        if self._prelude(ctx):
            return
        base = ctx.measure("base", 6)
        height = ctx.measure("height", 4)
        length = ctx.measure("length", 8)
        scale = self._scale(ctx, base + length * ISO_DEPTH_X, height + length * ISO_DEPTH_Y)
        off = iso_offset(length, scale)
        left, bottom = self._frame(ctx, (base + length * ISO_DEPTH_X) * scale,
                                   (height + length * ISO_DEPTH_Y) * scale)
        b_px, h_px = base * scale, height * scale

        bl, br = (left, bottom), (left + b_px, bottom)
        apex = (left + b_px / 2, bottom - h_px)
        back_bl, back_br, back_apex = _shift(bl, off), _shift(br, off), _shift(apex, off)

        hidden = ctx.stroke_style(width=1, dash=HIDDEN_DASH, opacity=0.6)
        ctx.line(bl, back_bl, style=hidden, role="hidden")
        ctx.line(back_bl, back_br, style=hidden, role="hidden")
        ctx.line(back_bl, back_apex, style=hidden, role="hidden")

        front_style, top_style, side_style = self._faces(ctx)
        ctx.polygon([bl, br, apex], style=front_style, role="face")
        ctx.polygon([br, back_br, back_apex, apex], style=side_style, role="face")
        ctx.line(apex, back_apex, style=ctx.stroke_style(), role="edge")
        ctx.line(br, back_br, style=ctx.stroke_style(), role="edge")

        foot = (apex[0], bottom)
        ctx.line(apex, foot, style=ctx.construction_style(), role="construction")

        ctx.measurement((apex[0], bottom + 20), "b", base)
        ctx.measurement((apex[0] - 6, bottom - h_px / 2 + 5), "h", height, anchor="end")
        depth_mid = _shift(br, (off[0] / 2, off[1] / 2))
        ctx.measurement((depth_mid[0] + 10, depth_mid[1] + 12), "l", length, anchor="start")

    def _draw_pyramid(self, ctx: RenderContext) -> None:
        if self._prelude(ctx):
            return
        base = ctx.measure("base", 4)
        height = ctx.measure("height", 5)
        extent_y = max(height + base * ISO_DEPTH_Y / 2, base * ISO_DEPTH_Y)
        scale = self._scale(ctx, base * (1 + ISO_DEPTH_X), extent_y)
        off = iso_offset(base, scale)
        left, bottom = self._frame(ctx, base * (1 + ISO_DEPTH_X) * scale, extent_y * scale)
        b_px = base * scale

        f0, f1 = (left, bottom), (left + b_px, bottom)
        b0, b1 = _shift(f0, off), _shift(f1, off)
        base_center = ((f0[0] + b1[0]) / 2, (f0[1] + b1[1]) / 2)
        apex = (base_center[0], base_center[1] - height * scale)

        front_style, top_style, side_style = self._faces(ctx)
        ctx.polygon([f0, f1, b1, b0], style=top_style, role="face")
        hidden = ctx.stroke_style(width=1, dash=HIDDEN_DASH, opacity=0.6)
        ctx.line(b0, apex, style=hidden, role="hidden")
        ctx.polygon([f0, f1, apex], style=front_style, role="face")
        ctx.polygon([f1, b1, apex], style=side_style, role="face")
        ctx.line(apex, base_center, style=ctx.construction_style(), role="construction")
        ctx.dot(base_center, 2.5)

        ctx.measurement(((f0[0] + f1[0]) / 2, bottom + 20), "b", base)
        ctx.measurement((apex[0] + 8, (apex[1] + base_center[1]) / 2), "h", height, anchor="start")

    # =========================================================================
    # ROUND SOLIDS
    # =========================================================================

    def _cylinder_body(self, ctx: RenderContext, bottom_center: Point, rx: float,
                       h_px: float) -> Point:
        """Bottom ellipse, lateral rectangle, near half of the top rim. Returns the top center."""
        ry = rx * ELLIPSE_SQUASH
        top_center = (bottom_center[0], bottom_center[1] - h_px)
        front_style, top_style, side_style = self._faces(ctx)
        ctx.ellipse(bottom_center, rx, ry, style=side_style, role="face")
        ctx.polygon([(bottom_center[0] - rx, bottom_center[1]), (bottom_center[0] + rx, bottom_center[1]),
                     (top_center[0] + rx, top_center[1]), (top_center[0] - rx, top_center[1])],
                    style=front_style, role="face")
        ctx.arc(top_center, rx, ry, 180, 360, style=ctx.stroke_style(), role="rim")
        return top_center

    def _draw_cylinder(self, ctx: RenderContext) -> None:
        if self._prelude(ctx):
            return
        radius = ctx.measure("radius", 3)
        height = ctx.measure("height", 6)
        scale = self._scale(ctx, 2 * radius, height + 2 * radius * ELLIPSE_SQUASH)
        rx, h_px = radius * scale, height * scale
        cx, cy = ctx.anchor(2 * rx, h_px + 2 * rx * ELLIPSE_SQUASH)
        bottom_center = (cx, cy + h_px / 2)

        top_center = self._cylinder_body(ctx, bottom_center, rx, h_px)
        ctx.line(top_center, (top_center[0] + rx, top_center[1]),
                 style=ctx.construction_style(ctx.theme.accent_color), role="construction")
        ctx.dot(top_center, 2.5)

        ctx.measurement((top_center[0] + rx / 2, top_center[1] - 8), "r", radius)
        ctx.measurement((cx + rx + 10, cy + 5), "h", height, anchor="start")

    def _draw_cone(self, ctx: RenderContext) -> None:
        if self._prelude(ctx):
            return
        radius = ctx.measure("radius", 3)
        height = ctx.measure("height", 5)
        scale = self._scale(ctx, 2 * radius, height + radius * ELLIPSE_SQUASH)
        rx, h_px = radius * scale, height * scale
        ry = rx * ELLIPSE_SQUASH
        cx, cy = ctx.anchor(2 * rx, h_px + ry)
        apex = (cx, cy - (h_px + ry) / 2)
        base_center = (cx, apex[1] + h_px)
        base_left, base_right = (cx - rx, base_center[1]), (cx + rx, base_center[1])

        front_style, top_style, side_style = self._faces(ctx)
        ctx.ellipse(base_center, rx, ry, style=side_style, role="face")
        ctx.polygon([apex, base_left, base_center], style=front_style, role="face")
        ctx.polygon([apex, base_center, base_right], style=side_style, role="face")
        ctx.line(apex, base_center, style=ctx.construction_style(), role="construction")
        ctx.line(base_center, base_right, style=ctx.construction_style(ctx.theme.accent_color),
                 role="construction")

        ctx.measurement((cx + 6, (apex[1] + base_center[1]) / 2), "h", height, anchor="start")
        ctx.measurement((cx + rx / 2, base_center[1] + ry + 16), "r", radius)
        slant = ctx.request.measure("slantHeight")
        if slant is not None:
            mid = ((apex[0] + base_right[0]) / 2, (apex[1] + base_right[1]) / 2)
            ctx.measurement((mid[0] + 10, mid[1]), "l", slant, anchor="start")

    def _draw_sphere(self, ctx: RenderContext) -> None:
        if self._prelude(ctx):
            return
        radius = ctx.measure("radius", 4)
        scale = min(ctx.available_size / (2 * radius), SOLID_SCALE_CLAMP)
        ctx.meta["scale"] = scale
        r_px = radius * scale
        center = ctx.anchor(2 * r_px, 2 * r_px)

        gradient = RadialGradient(
            id=ctx.new_id("sphere-shade"),
            cx=0.3, cy=0.3, r=0.7,
            stops=[GradientStop(0.0, "#ffffff", 0.9),
                   GradientStop(0.7, ctx.theme.primary_color, 0.6),
                   GradientStop(1.0, ctx.theme.stroke_color, 0.8)],
        )
        ctx.defs.append(gradient)
        ctx.circle(center, r_px, role="face",
                   style=Style(stroke=ctx.theme.stroke_color, stroke_width=ctx.theme.stroke_width,
                               fill=f"url(#{gradient.id})", fill_opacity=1.0))
        ctx.ellipse(center, r_px, r_px * ELLIPSE_SQUASH,
                    style=ctx.stroke_style(width=1, dash=HIDDEN_DASH, opacity=0.5), role="equator")
        ctx.line(center, (center[0] + r_px, center[1]),
                 style=ctx.stroke_style(color=ctx.theme.accent_color), role="construction")

        ctx.measurement((center[0] + r_px / 2, center[1] - 8), "r", radius)

    def _draw_composite(self, ctx: RenderContext) -> None:
        if self._prelude(ctx):
            return
        radius = ctx.measure("radius", 3)
        height = ctx.measure("cylinderHeight", ctx.measure("height", 5))
        extent_y = height + radius + radius * ELLIPSE_SQUASH
        scale = self._scale(ctx, 2 * radius, extent_y)
        rx, h_px = radius * scale, height * scale
        cx, cy = ctx.anchor(2 * rx, extent_y * scale)
        bottom_center = (cx, cy + extent_y * scale / 2 - rx * ELLIPSE_SQUASH)

        top_center = self._cylinder_body(ctx, bottom_center, rx, h_px)
        # Hemisphere cap sits on the cylinder's top face
        ctx.arc(top_center, rx, rx, 0, 180, closed=True,
                style=ctx.face_style(color=ctx.theme.secondary_color), role="face")
        ctx.line(top_center, (top_center[0] + rx, top_center[1]),
                 style=ctx.construction_style(ctx.theme.accent_color), role="construction")

        ctx.measurement((top_center[0] + rx / 2, top_center[1] + 16), "r", radius)
        ctx.measurement((cx + rx + 10, bottom_center[1] - h_px / 2 + 5), "h", height, anchor="start")

    # =========================================================================
    # NETS & FLAT FALLBACK
    # =========================================================================

    def _draw_net(self, ctx: RenderContext) -> None:
        if ctx.shape == "cylinder":
            self._cylinder_net(ctx)
        else:
            self._prism_net(ctx)

    def _prism_net(self, ctx: RenderContext) -> None:
        length, width, height = self._prism_dimensions(ctx)
        extent_x, extent_y = 2 * (length + width), height + 2 * width
        scale = self._scale(ctx, extent_x, extent_y)
        left, bottom = self._frame(ctx, extent_x * scale, extent_y * scale)
        top = bottom - extent_y * scale
        l_px, w_px, h_px = length * scale, width * scale, height * scale
        band_top = top + w_px

        faces: List[List[Point]] = []
        x = left
        for span in (w_px, l_px, w_px, l_px):
            faces.append([(x, band_top), (x + span, band_top), (x + span, band_top + h_px), (x, band_top + h_px)])
            x += span
        lid_left = left + w_px
        faces.append([(lid_left, top), (lid_left + l_px, top), (lid_left + l_px, band_top), (lid_left, band_top)])
        floor_top = band_top + h_px
        faces.append([(lid_left, floor_top), (lid_left + l_px, floor_top),
                      (lid_left + l_px, floor_top + w_px), (lid_left, floor_top + w_px)])
        for face in faces:
            ctx.polygon(face, role="net-face")

        if ctx.shape == "cube":
            ctx.measurement((lid_left + l_px / 2, floor_top + w_px + 18), "s", length)
            return
        ctx.measurement((lid_left + l_px / 2, floor_top + w_px + 18), "l", length)
        ctx.measurement((lid_left - 8, floor_top + w_px / 2 + 5), "w", width, anchor="end")
        ctx.measurement((left - 8, band_top + h_px / 2 + 5), "h", height, anchor="end")

    def _cylinder_net(self, ctx: RenderContext) -> None:
        radius = ctx.measure("radius", 3)
        height = ctx.measure("height", 6)
        circumference = 2 * math.pi * radius
        extent_x, extent_y = max(circumference, 2 * radius), height + 4 * radius
        scale = self._scale(ctx, extent_x, extent_y)
        left, bottom = self._frame(ctx, extent_x * scale, extent_y * scale)
        top = bottom - extent_y * scale
        r_px, h_px, c_px = radius * scale, height * scale, circumference * scale
        band_top = top + 2 * r_px
        cx = left + c_px / 2

        ctx.polygon([(left, band_top), (left + c_px, band_top), (left + c_px, band_top + h_px), (left, band_top + h_px)],
                    role="net-face")
        ctx.circle((cx, band_top - r_px), r_px, role="net-face")
        ctx.circle((cx, band_top + h_px + r_px), r_px, role="net-face")

        ctx.measurement((cx + r_px / 2, band_top - r_px - 6), "r", radius)
        ctx.measurement((left + c_px + 8, band_top + h_px / 2 + 5), "h", height, anchor="start")

    def _draw_flat(self, ctx: RenderContext) -> None:
        """Front silhouette only, for worksheets that do not want perspective."""
        shape = ctx.shape
        avail_w, avail_h = ctx.available_box
        if shape in ("rectangularPrism", "cube"):
            length, _, height = self._prism_dimensions(ctx)
            scale = self._scale(ctx, length, height)
            left, bottom = self._frame(ctx, length * scale, height * scale)
            ctx.polygon([(left, bottom), (left + length * scale, bottom),
                         (left + length * scale, bottom - height * scale), (left, bottom - height * scale)],
                        role="face")
            symbol = "s" if shape == "cube" else "l"
            ctx.measurement((left + length * scale / 2, bottom + 20), symbol, length)
            if shape != "cube":
                ctx.measurement((left - 10, bottom - height * scale / 2 + 5), "h", height, anchor="end")
        elif shape in ("cylinder", "composite"):
            radius = ctx.measure("radius", 3)
            height = ctx.measure("cylinderHeight", ctx.measure("height", 6))
            cap = radius if shape == "composite" else 0
            scale = self._scale(ctx, 2 * radius, height + cap)
            left, bottom = self._frame(ctx, 2 * radius * scale, (height + cap) * scale)
            top = bottom - height * scale
            ctx.polygon([(left, bottom), (left + 2 * radius * scale, bottom),
                         (left + 2 * radius * scale, top), (left, top)], role="face")
            if cap:
                ctx.arc((left + radius * scale, top), radius * scale, radius * scale, 0, 180, closed=True,
                        style=ctx.face_style(color=ctx.theme.secondary_color), role="face")
            ctx.measurement((left + radius * scale, bottom + 20), "r", radius)
            ctx.measurement((left + 2 * radius * scale + 10, (top + bottom) / 2 + 5), "h", height, anchor="start")
        elif shape == "sphere":
            radius = ctx.measure("radius", 4)
            scale = min(ctx.available_size / (2 * radius), SOLID_SCALE_CLAMP)
            ctx.meta["scale"] = scale
            center = ctx.anchor(2 * radius * scale, 2 * radius * scale)
            ctx.circle(center, radius * scale, role="face")
            ctx.measurement((center[0] + radius * scale / 2, center[1] - 8), "r", radius)
        else:
            # Cone, pyramid and triangular prism all show a triangle from the front
            if shape == "cone":
                base = 2 * ctx.measure("radius", 3)
                symbol, value = "r", base / 2
            else:
                base = ctx.measure("base", 4 if shape == "pyramid" else 6)
                symbol, value = "b", base
            height = ctx.measure("height", 5 if shape != "triangularPrism" else 4)
            scale = fit_scale(base, height, avail_w, avail_h, SOLID_SCALE_CLAMP)
            ctx.meta["scale"] = scale
            left, bottom = self._frame(ctx, base * scale, height * scale)
            apex = (left + base * scale / 2, bottom - height * scale)
            ctx.polygon([(left, bottom), (left + base * scale, bottom), apex], role="face")
            ctx.line(apex, (apex[0], bottom), style=ctx.construction_style(), role="construction")
            ctx.measurement((apex[0], bottom + 20), symbol, value)
            ctx.measurement((apex[0] + 6, bottom - height * scale / 2 + 5), "h", height, anchor="start")
