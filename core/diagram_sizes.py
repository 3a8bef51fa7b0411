"""
diagram_sizes.py

Canvas dimensions (in pixels) for each diagram family. Generators ask for a
size tier ("small", "medium", "large") and the engine picks the family that
suits the shape: plain figures use "standard", circles and symmetric figures
use "square", line constructions and coordinate strips use "wide".
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping

DEFAULT_FAMILY = "standard"
DEFAULT_SIZE = "medium"


@dataclass(frozen=True)
class CanvasSize:
    width: int
    height: int

    def to_dict(self) -> Dict[str, int]:
        return {"width": self.width, "height": self.height}


DIAGRAM_SIZES: Mapping[str, Mapping[str, CanvasSize]] = MappingProxyType({
    "standard": MappingProxyType({
        "small": CanvasSize(200, 150),
        "medium": CanvasSize(300, 200),
        "large": CanvasSize(400, 250),
    }),
    "square": MappingProxyType({
        "small": CanvasSize(250, 250),
        "medium": CanvasSize(350, 350),
        "large": CanvasSize(450, 450),
    }),
    "wide": MappingProxyType({
        "small": CanvasSize(300, 200),
        "medium": CanvasSize(400, 250),
        "large": CanvasSize(500, 300),
    }),
})


def get_diagram_size(family: str = DEFAULT_FAMILY, size: str = DEFAULT_SIZE) -> CanvasSize:
    """
    Look up a canvas size. An unknown family falls back to "standard" and an
    unknown tier falls back to "medium".
    """
    tiers = DIAGRAM_SIZES.get(family) or DIAGRAM_SIZES[DEFAULT_FAMILY]
    return tiers.get(size) or tiers[DEFAULT_SIZE]


def list_sizes() -> Dict[str, Dict[str, Dict[str, int]]]:
    return {
        family: {tier: canvas.to_dict() for tier, canvas in tiers.items()}
        for family, tiers in DIAGRAM_SIZES.items()
    }
