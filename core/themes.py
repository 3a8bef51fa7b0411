"""
themes.py

Named visual themes for geometry diagrams. Every renderer pulls its colors,
stroke width, opacity and font from one of these entries, so a worksheet can
switch from the classroom look to a blueprint look with a single config key.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_THEME = "educational"


@dataclass(frozen=True)
class Theme:
    """Immutable bundle of visual constants applied to a whole diagram."""

    name: str
    background_color: str
    primary_color: str
    secondary_color: str
    accent_color: str
    stroke_color: str
    fill_opacity: float
    stroke_width: float
    font_size: float
    font_family: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


THEMES: Mapping[str, Theme] = MappingProxyType({
    "educational": Theme(
        name="educational",
        background_color="#ffffff",
        primary_color="#3b82f6",      # Blue
        secondary_color="#10b981",    # Green
        accent_color="#f59e0b",       # Amber
        stroke_color="#374151",       # Dark gray
        fill_opacity=0.15,
        stroke_width=2,
        font_size=14,
        font_family="Inter, system-ui, sans-serif",
    ),
    "blueprint": Theme(
        name="blueprint",
        background_color="#1e3a8a",
        primary_color="#60a5fa",
        secondary_color="#34d399",
        accent_color="#fbbf24",
        stroke_color="#93c5fd",
        fill_opacity=0.1,
        stroke_width=1.5,
        font_size=12,
        font_family="JetBrains Mono, monospace",
    ),
    "minimal": Theme(
        name="minimal",
        background_color="#ffffff",
        primary_color="#6b7280",
        secondary_color="#9ca3af",
        accent_color="#374151",
        stroke_color="#d1d5db",
        fill_opacity=0.05,
        stroke_width=1,
        font_size=13,
        font_family="Inter, system-ui, sans-serif",
    ),
    "colorful": Theme(
        name="colorful",
        background_color="#fef3c7",
        primary_color="#dc2626",
        secondary_color="#059669",
        accent_color="#7c3aed",
        stroke_color="#374151",
        fill_opacity=0.2,
        stroke_width=2.5,
        font_size=14,
        font_family="Inter, system-ui, sans-serif",
    ),
})


def get_theme(name: Optional[str] = None) -> Theme:
    """Return the named theme, or the educational theme for unknown names."""
    if name and name in THEMES:
        return THEMES[name]
    if name:
        logger.debug("Unknown theme %r, using %s", name, DEFAULT_THEME)
    return THEMES[DEFAULT_THEME]


def list_themes() -> Dict[str, Dict[str, Any]]:
    return {name: theme.to_dict() for name, theme in THEMES.items()}
