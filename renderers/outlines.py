"""
outlines.py

Unit-space outlines for the named figures used by symmetry, reflection and
property problems (squares, hexagons, block letters, stars ...). Everything
here lives in a [-1, 1] box with y pointing up; renderers map it onto the
canvas. Pure geometry, no drawing.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

Point = Tuple[float, float]
Path = Tuple[Point, ...]

INFINITE_SYMMETRY = 999


@dataclass(frozen=True)
class Figure:
    name: str
    kind: str = "shape"
    faces: Tuple[Path, ...] = ()
    strokes: Tuple[Path, ...] = ()
    axes: Tuple[float, ...] = ()
    round: bool = False
    parallel_pairs: Tuple[Tuple[int, int], ...] = ()

    @property
    def vertices(self) -> Path:
        if self.round or not self.faces:
            return ()
        return self.faces[0]


# =============================================================================
# CONSTRUCTION HELPERS
# =============================================================================

def regular_polygon(sides: int, start: float = 90.0, radius: float = 1.0) -> Path:
    step = 360.0 / sides
    return tuple(
        (radius * math.cos(math.radians(start + i * step)),
         radius * math.sin(math.radians(start + i * step)))
        for i in range(sides)
    )


def star(points: int = 5, outer: float = 1.0, inner: float = 0.42) -> Path:
    out = []
    for i in range(points * 2):
        r = outer if i % 2 == 0 else inner
        theta = math.radians(90 + i * 180.0 / points)
        out.append((r * math.cos(theta), r * math.sin(theta)))
    return tuple(out)


def _regular_axes(sides: int, start: float) -> Tuple[float, ...]:
    return tuple(sorted(round((start + i * 180.0 / sides) % 180, 6) for i in range(sides)))


def _flower(petals: int = 5) -> Tuple[Path, ...]:
    """Center disk plus round petals, each petal a small 24-gon."""
    petal_faces = []
    for i in range(petals):
        theta = math.radians(90 + i * 360.0 / petals)
        ox, oy = 0.55 * math.cos(theta), 0.55 * math.sin(theta)
        petal_faces.append(tuple((ox + x, oy + y) for x, y in regular_polygon(24, 0, 0.4)))
    return tuple(petal_faces) + (regular_polygon(24, 0, 0.35),)


# =============================================================================
# FIGURE TABLES
# =============================================================================

_SHAPES: Dict[str, Figure] = {
    "square": Figure("square", faces=(((-1, -1), (1, -1), (1, 1), (-1, 1)),),
                     axes=(0, 45, 90, 135), parallel_pairs=((0, 2), (1, 3))),
    "rectangle": Figure("rectangle", faces=(((-1, -0.6), (1, -0.6), (1, 0.6), (-1, 0.6)),),
                        axes=(0, 90), parallel_pairs=((0, 2), (1, 3))),
    "triangle": Figure("triangle", faces=(regular_polygon(3),), axes=_regular_axes(3, 90)),
    "isosceles": Figure("isosceles", faces=(((-0.6, -0.8), (0.6, -0.8), (0, 0.9)),), axes=(90,)),
    "scalene": Figure("scalene", faces=(((-0.9, -0.7), (0.8, -0.7), (-0.3, 0.8)),)),
    "right": Figure("right", faces=(((-0.8, -0.7), (0.8, -0.7), (-0.8, 0.8)),)),
    "circle": Figure("circle", faces=(regular_polygon(72, 0),), axes=(0, 45, 90, 135), round=True),
    "pentagon": Figure("pentagon", faces=(regular_polygon(5),), axes=_regular_axes(5, 90)),
    "hexagon": Figure("hexagon", faces=(regular_polygon(6, 0),), axes=_regular_axes(6, 0),
                      parallel_pairs=((0, 3), (1, 4), (2, 5))),
    "octagon": Figure("octagon", faces=(regular_polygon(8, 22.5),), axes=_regular_axes(8, 22.5),
                      parallel_pairs=((0, 4), (1, 5), (2, 6), (3, 7))),
    "diamond": Figure("diamond", faces=(((0, 1), (-0.7, 0), (0, -1), (0.7, 0)),), axes=(0, 90),
                      parallel_pairs=((0, 2), (1, 3))),
    "parallelogram": Figure("parallelogram", faces=(((-1, -0.6), (0.5, -0.6), (1, 0.6), (-0.5, 0.6)),),
                            parallel_pairs=((0, 2), (1, 3))),
    "trapezoid": Figure("trapezoid", faces=(((-1, -0.6), (1, -0.6), (0.5, 0.6), (-0.5, 0.6)),),
                        axes=(90,), parallel_pairs=((0, 2),)),
    "quadrilateral": Figure("quadrilateral", faces=(((-0.9, -0.7), (0.8, -0.8), (0.6, 0.7), (-0.5, 0.5)),)),
    "kite": Figure("kite", faces=(((0, 1), (-0.6, 0.3), (0, -1), (0.6, 0.3)),), axes=(90,)),
    "star": Figure("star", kind="pattern", faces=(star(),), axes=_regular_axes(5, 90)),
    "flower": Figure("flower", kind="pattern", faces=_flower(), axes=_regular_axes(5, 90)),
    "snowflake": Figure("snowflake", kind="pattern",
                        strokes=tuple(((0.0, 0.0), (math.cos(math.radians(a)), math.sin(math.radians(a))))
                                      for a in range(0, 360, 60)),
                        axes=_regular_axes(6, 0)),
}

_ALIASES = {
    "rhombus": "diamond",
    "equilateral": "triangle",
    "equilateral triangle": "triangle",
    "isosceles triangle": "isosceles",
    "scalene triangle": "scalene",
    "right triangle": "right",
    "right-triangle": "right",
    "regular hexagon": "hexagon",
    "regular pentagon": "pentagon",
}

_LETTERS: Dict[str, Tuple[Path, ...]] = {
    "A": (((-0.7, -1), (0, 1), (0.7, -1)), ((-0.35, 0), (0.35, 0))),
    "B": (((-0.6, 1), (-0.6, -1), (0.3, -1), (0.6, -0.7), (0.6, -0.3), (0.3, 0), (-0.6, 0)),
          ((0.3, 0), (0.5, 0.3), (0.5, 0.7), (0.3, 1), (-0.6, 1))),
    "C": (((0.6, 0.8), (0.2, 1), (-0.3, 1), (-0.6, 0.6), (-0.6, -0.6), (-0.3, -1), (0.2, -1), (0.6, -0.8)),),
    "D": (((-0.6, 1), (-0.6, -1), (0.1, -1), (0.6, -0.5), (0.6, 0.5), (0.1, 1), (-0.6, 1)),),
    "E": (((0.6, 1), (-0.6, 1), (-0.6, -1), (0.6, -1)), ((-0.6, 0), (0.4, 0))),
    "H": (((-0.6, -1), (-0.6, 1)), ((0.6, -1), (0.6, 1)), ((-0.6, 0), (0.6, 0))),
    "I": (((0, -1), (0, 1)), ((-0.4, 1), (0.4, 1)), ((-0.4, -1), (0.4, -1))),
    "K": (((-0.6, 1), (-0.6, -1)), ((0.6, 1), (-0.6, 0), (0.6, -1))),
    "M": (((-0.7, -1), (-0.7, 1), (0, 0), (0.7, 1), (0.7, -1)),),
    "O": (tuple((0.65 * math.cos(math.radians(a)), math.sin(math.radians(a))) for a in range(0, 375, 15)),),
    "T": (((-0.7, 1), (0.7, 1)), ((0, 1), (0, -1))),
    "U": (((-0.6, 1), (-0.6, -0.6), (-0.3, -1), (0.3, -1), (0.6, -0.6), (0.6, 1)),),
    "V": (((-0.7, 1), (0, -1), (0.7, 1)),),
    "W": (((-0.8, 1), (-0.4, -1), (0, 0.3), (0.4, -1), (0.8, 1)),),
    "X": (((-0.7, 1), (0.7, -1)), ((-0.7, -1), (0.7, 1))),
    "Y": (((-0.7, 1), (0, 0)), ((0.7, 1), (0, 0), (0, -1))),
}

_LETTER_AXES: Dict[str, Tuple[float, ...]] = {
    "A": (90,), "B": (0,), "C": (0,), "D": (0,), "E": (0,), "H": (0, 90), "I": (0, 90),
    "K": (0,), "M": (90,), "O": (0, 90), "T": (90,), "U": (90,), "V": (90,), "W": (90,),
    "X": (0, 90), "Y": (90,),
}


def normalize_name(name: Any) -> str:
    text = str(name or "").strip().lower()
    return _ALIASES.get(text, text)


def get_figure(subject: Any = None, triangle_type: Optional[str] = None) -> Optional[Figure]:
    """
    Resolve a subject (``{"type": "shape", "name": "hexagon"}`` or a bare
    name) to a Figure. Returns None for names with no outline.
    """
    if isinstance(subject, dict):
        kind = subject.get("type", "shape")
        name = subject.get("name", "square")
    else:
        kind, name = "shape", subject or "square"

    if kind == "letter" or (isinstance(name, str) and len(name) == 1 and name.upper() in _LETTERS):
        letter = str(name).upper()
        if letter not in _LETTERS:
            return None
        return Figure(letter, kind="letter", strokes=_LETTERS[letter], axes=_LETTER_AXES.get(letter, ()))

    key = normalize_name(name)
    if key == "triangle" and triangle_type:
        key = normalize_name(triangle_type)
    return _SHAPES.get(key)


def known_figures() -> List[str]:
    return sorted(_SHAPES) + sorted(_LETTERS)


# =============================================================================
# TRANSFORMS
# =============================================================================

def reflect_point(point: Point, axis_degrees: float) -> Point:
    """Mirror a point across the line through the origin at ``axis_degrees``."""
    ux, uy = math.cos(math.radians(axis_degrees)), math.sin(math.radians(axis_degrees))
    dot = point[0] * ux + point[1] * uy
    return 2 * dot * ux - point[0], 2 * dot * uy - point[1]


def reflect_path(path: Sequence[Point], axis_degrees: float) -> Path:
    return tuple(reflect_point(p, axis_degrees) for p in path)


def _side(point: Point, axis_degrees: float) -> float:
    ux, uy = math.cos(math.radians(axis_degrees)), math.sin(math.radians(axis_degrees))
    return ux * point[1] - uy * point[0]


def _crossing(a: Point, b: Point, axis_degrees: float) -> Point:
    sa, sb = _side(a, axis_degrees), _side(b, axis_degrees)
    t = sa / (sa - sb)
    return a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t


def clip_polygon(path: Sequence[Point], axis_degrees: float) -> Path:
    """Part of a closed polygon on the left of the axis (Sutherland-Hodgman, one edge)."""
    out: List[Point] = []
    count = len(path)
    for i in range(count):
        current, following = path[i], path[(i + 1) % count]
        inside_current = _side(current, axis_degrees) >= 0
        inside_following = _side(following, axis_degrees) >= 0
        if inside_current:
            out.append(current)
        if inside_current != inside_following:
            out.append(_crossing(current, following, axis_degrees))
    return tuple(out)


def clip_polyline(path: Sequence[Point], axis_degrees: float) -> List[Path]:
    """Pieces of an open polyline on the left of the axis."""
    pieces: List[Path] = []
    current: List[Point] = []
    for a, b in zip(path, path[1:]):
        inside_a = _side(a, axis_degrees) >= 0
        inside_b = _side(b, axis_degrees) >= 0
        if inside_a and not current:
            current.append(a)
        if inside_a and inside_b:
            current.append(b)
        elif inside_a and not inside_b:
            current.append(_crossing(a, b, axis_degrees))
            pieces.append(tuple(current))
            current = []
        elif inside_b:
            current = [_crossing(a, b, axis_degrees), b]
    if len(current) > 1:
        pieces.append(tuple(current))
    return pieces


def edge_lengths(path: Sequence[Point]) -> List[float]:
    count = len(path)
    return [math.dist(path[i], path[(i + 1) % count]) for i in range(count)]


def equal_edge_groups(path: Sequence[Point], tolerance: float = 1e-3) -> List[int]:
    """
    Tick count per edge so that equal edges share a count (1, 2, ...).
    Edges with a length no other edge shares get 0.
    """
    lengths = edge_lengths(path)
    groups: List[float] = []
    ticks = []
    for length in lengths:
        matches = [other for other in lengths if abs(other - length) <= tolerance]
        if len(matches) < 2:
            ticks.append(0)
            continue
        for index, known in enumerate(groups):
            if abs(known - length) <= tolerance:
                ticks.append(index + 1)
                break
        else:
            groups.append(length)
            ticks.append(len(groups))
    return ticks
