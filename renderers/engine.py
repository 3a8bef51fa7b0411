"""
engine.py

Single entry point for diagram rendering. The engine owns one flat table

    shape name -> (family renderer, draw routine, size family)

built once from the four family renderers, resolves theme and canvas size for
each request, and hands a fresh RenderContext to the draw routine. It never
raises for rendering input: unknown shapes and failing draw routines end up
as warnings on the returned SceneGraph.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from core.diagram_sizes import get_diagram_size
from core.themes import get_theme
from renderers.advanced import AdvancedGeometryRenderer
from renderers.base import DrawFn, FamilyRenderer, RenderContext
from renderers.coordinate import CoordinateRenderer
from renderers.planar import PlanarRenderer
from renderers.scene import Group, SceneGraph
from renderers.three_d import ThreeDRenderer
from schemas.diagram import RenderRequest

logger = logging.getLogger(__name__)

IdFactory = Callable[[str], str]


@dataclass(frozen=True)
class ShapeEntry:
    renderer: FamilyRenderer
    draw: DrawFn
    size_family: str


def _counter_ids() -> IdFactory:
    counter = itertools.count(1)

    def next_id(shape: str) -> str:
        return f"{shape or 'diagram'}-{next(counter)}"

    return next_id


class DiagramEngine:
    """
    Dispatches render requests to the family renderers.

    ``id_factory`` produces the root group id when a request carries no
    ``svg_id``; the default is a per-engine counter ("cylinder-1",
    "cylinder-2", ...).
    """

    def __init__(self, id_factory: Optional[IdFactory] = None,
                 renderers: Optional[List[FamilyRenderer]] = None):
        self._next_id = id_factory or _counter_ids()
        self.renderers = renderers or [
            PlanarRenderer(),
            AdvancedGeometryRenderer(),
            CoordinateRenderer(),
            ThreeDRenderer(),
        ]
        self._table: Dict[str, ShapeEntry] = {}
        for renderer in self.renderers:
            for shape, draw in renderer.draw_methods().items():
                if shape in self._table:
                    raise ValueError(
                        f"shape '{shape}' registered by both {self._table[shape].renderer.family} "
                        f"and {renderer.family}"
                    )
                self._table[shape] = ShapeEntry(renderer, draw, renderer.size_family(shape))

    # --------------------------------------------------------------------- #
    # Registry queries
    # --------------------------------------------------------------------- #

    def shapes(self) -> List[str]:
        return sorted(self._table)

    def family_of(self, shape: str) -> Optional[str]:
        entry = self._table.get(shape)
        return entry.renderer.family if entry else None

    # --------------------------------------------------------------------- #
    # Rendering
    # --------------------------------------------------------------------- #

    def render_payload(self, payload: Dict[str, Any]) -> SceneGraph:
        return self.render(RenderRequest.from_payload(payload))

    def render(self, request: RenderRequest) -> SceneGraph:
        config = request.config
        theme = get_theme(config.theme)
        entry = self._table.get(request.shape)

        size_family = config.option("diagramFamily") or (entry.size_family if entry else "standard")
        canvas = get_diagram_size(size_family, config.size)
        width = config.width or canvas.width
        height = config.height or canvas.height

        root = Group(id=request.svg_id or self._next_id(request.shape), role="root")
        ctx = RenderContext(request=request, theme=theme, content_width=width,
                            content_height=height, root=root)

        if entry is None:
            ctx.warn(f"unknown shape '{request.shape}'")
        else:
            logger.debug("Rendering %s via %s renderer (%sx%s)",
                         request.shape, entry.renderer.family, width, height)
            try:
                entry.draw(ctx)
            except Exception as exc:
                logger.exception("Draw routine for %s failed", request.shape)
                ctx.warnings.append(f"rendering {request.shape} failed: {exc}")

        return SceneGraph(
            width=width,
            height=height,
            root=root,
            background=theme.background_color,
            defs=list(ctx.defs),
            warnings=list(ctx.warnings),
            meta=dict(ctx.meta),
        )


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    engine = DiagramEngine()
    demo = engine.render_payload({
        "shape": "cylinder",
        "measurements": {"radius": 3, "height": 6},
        "unit": "cm",
        "config": {"showMeasurements": True},
    })
    print(demo.id, len(demo.primitives()), "primitives", demo.texts("measurement"))
