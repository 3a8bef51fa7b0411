"""
Request schemas shared by the rendering engine, the tool wrapper and the
preview web app.
"""

from .diagram import (
    CoordinateData,
    CoordinatePoint,
    DiagramConfig,
    RenderRequest,
)

__all__ = [
    "CoordinateData",
    "CoordinatePoint",
    "DiagramConfig",
    "RenderRequest",
]
