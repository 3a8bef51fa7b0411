"""
raster_preview.py

PNG preview of a SceneGraph drawn with matplotlib. Used where an embedded
bitmap is easier to handle than SVG (worksheet builders, quick looks from the
web preview). Axes are set up in canvas pixels with y pointing down, so
primitives are drawn with their coordinates unchanged.

Each call builds its own Figure on an Agg canvas instead of going through
pyplot, so concurrent requests in the web preview share no figure state.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from matplotlib import patches
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
import numpy as np

from renderers.scene import (
    ArcPath,
    Circle,
    Ellipse,
    Line,
    Polygon,
    Polyline,
    Primitive,
    SceneGraph,
    Style,
    Text,
)

# SVG user units are CSS pixels; matplotlib line widths and font sizes are points
PX_TO_PT = 0.75
FIGURE_DPI = 100

ANCHOR_TO_HA = {"start": "left", "middle": "center", "end": "right"}


def _dash(style: Style) -> Union[str, Tuple[int, Tuple[float, ...]]]:
    if not style.dash:
        return "solid"
    pattern = tuple(float(part) * PX_TO_PT for part in style.dash.replace(" ", ",").split(",") if part)
    return (0, pattern)


class _Painter:
    """Draws scene primitives onto one matplotlib axes."""

    def __init__(self, ax, scene: SceneGraph):
        self.ax = ax
        # Gradient fills are previewed with their middle stop color
        self.gradients: Dict[str, str] = {}
        for gradient in scene.defs:
            if gradient.stops:
                self.gradients[f"url(#{gradient.id})"] = gradient.stops[len(gradient.stops) // 2].color

    def _fill(self, style: Style) -> Optional[str]:
        if not style.fill or style.fill == "none":
            return None
        return self.gradients.get(style.fill, style.fill)

    def _patch_kwargs(self, style: Style) -> dict:
        fill = self._fill(style)
        return {
            "facecolor": fill if fill else "none",
            "edgecolor": style.stroke or "none",
            "linewidth": style.stroke_width * PX_TO_PT,
            "linestyle": _dash(style),
            "alpha": style.opacity if fill is None else style.opacity * style.fill_opacity,
        }

    def _outline(self, points: np.ndarray, style: Style) -> None:
        if not style.stroke or len(points) < 2:
            return
        self.ax.add_line(Line2D(points[:, 0], points[:, 1], color=style.stroke,
                                linewidth=style.stroke_width * PX_TO_PT,
                                linestyle=_dash(style), alpha=style.opacity))

    def draw(self, primitive: Primitive) -> None:
        style = primitive.style
        if isinstance(primitive, Text):
            self.ax.text(primitive.x, primitive.y, primitive.text,
                         ha=ANCHOR_TO_HA.get(primitive.anchor, "center"), va="baseline",
                         color=style.fill or "black",
                         fontsize=(style.font_size or 12) * PX_TO_PT,
                         fontweight=style.font_weight or "normal")
        elif isinstance(primitive, Line):
            self._outline(primitive.extent_points(), style)
        elif isinstance(primitive, Polygon):
            self.ax.add_patch(patches.Polygon(primitive.extent_points(), closed=True,
                                              **self._patch_kwargs(style)))
        elif isinstance(primitive, Polyline):
            self._outline(primitive.extent_points(), style)
        elif isinstance(primitive, Circle):
            self.ax.add_patch(patches.Circle((primitive.cx, primitive.cy), primitive.r,
                                             **self._patch_kwargs(style)))
        elif isinstance(primitive, Ellipse):
            self.ax.add_patch(patches.Ellipse((primitive.cx, primitive.cy), 2 * primitive.rx,
                                              2 * primitive.ry, **self._patch_kwargs(style)))
        elif isinstance(primitive, ArcPath):
            points = primitive.sample(96)
            if primitive.closed:
                wedge = np.vstack([[[primitive.cx, primitive.cy]], points])
                self.ax.add_patch(patches.Polygon(wedge, closed=True, **self._patch_kwargs(style)))
            else:
                self._outline(points, style)


def to_png(scene: SceneGraph, dpi: int = 200) -> bytes:
    """
    Rasterize a scene graph.

    Args:
        scene: SceneGraph returned by DiagramEngine.render
        dpi: Output resolution; 100 reproduces the canvas pixel size

    Returns:
        PNG image data as bytes
    """
    fig = Figure(figsize=(scene.width / FIGURE_DPI, scene.height / FIGURE_DPI), dpi=FIGURE_DPI)
    canvas = FigureCanvasAgg(fig)
    ax = fig.add_axes([0, 0, 1, 1])
    ax.set_xlim(0, scene.width)
    ax.set_ylim(scene.height, 0)
    ax.set_aspect('equal')
    ax.axis('off')
    background = scene.background or 'white'
    fig.patch.set_facecolor(background)

    painter = _Painter(ax, scene)
    for primitive in scene.iter_primitives():
        painter.draw(primitive)

    buf = io.BytesIO()
    canvas.print_figure(buf, format='png', dpi=dpi, facecolor=background, edgecolor='none')
    buf.seek(0)
    return buf.read()


def write_png(scene: SceneGraph, path: Union[str, Path], dpi: int = 200) -> Path:
    path = Path(path)
    path.write_bytes(to_png(scene, dpi))
    return path
