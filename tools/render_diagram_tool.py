"""
render_diagram_tool.py

Utility wrapper around `DiagramEngine`. Accepts the raw diagram record a
problem generator attaches to a problem and writes the rendered SVG or PNG
file, returning its path.
"""

from __future__ import annotations

import logging
from pathlib import Path

from formatting.raster_preview import write_png
from formatting.svg_builder import write_svg
from renderers.engine import DiagramEngine

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("svg", "png")


def render_diagram_from_payload(
    payload: dict,
    output_path: str | Path,
    fmt: str = "svg",
    *,
    engine: DiagramEngine | None = None,
) -> Path:
    fmt = fmt.lower()
    if fmt not in SUPPORTED_FORMATS:
        raise ValueError(f"Unsupported diagram format '{fmt}'; expected one of {SUPPORTED_FORMATS}")

    scene = (engine or DiagramEngine()).render_payload(payload)
    for warning in scene.warnings:
        logger.info("Diagram %s: %s", scene.id, warning)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "png":
        return write_png(scene, output_path)
    return write_svg(scene, output_path)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sample = {
        "type": "geometry-renderer",
        "shape": "rectangularPrism",
        "measurements": {"length": 8, "width": 6, "height": 10},
        "unit": "cm",
        "config": {"showMeasurements": True, "theme": "blueprint"},
    }
    output = render_diagram_from_payload(sample, "sample_prism.svg")
    print(f"Wrote {output}")
