import dataclasses

import pytest

from core.diagram_sizes import DIAGRAM_SIZES, CanvasSize, get_diagram_size, list_sizes
from core.themes import THEMES, get_theme, list_themes


def test_exactly_four_builtin_themes():
    assert set(THEMES) == {"educational", "blueprint", "minimal", "colorful"}
    assert set(list_themes()) == set(THEMES)


def test_unknown_theme_falls_back_to_educational():
    assert get_theme("neon").name == "educational"
    assert get_theme(None).name == "educational"
    assert get_theme("").name == "educational"


def test_theme_values_match_blueprint_palette():
    blueprint = get_theme("blueprint")

    assert blueprint.background_color == "#1e3a8a"
    assert blueprint.stroke_width == 1.5
    assert blueprint.font_family.startswith("JetBrains Mono")


def test_themes_are_immutable():
    theme = get_theme("minimal")

    with pytest.raises(dataclasses.FrozenInstanceError):
        theme.stroke_width = 4

    with pytest.raises(TypeError):
        THEMES["custom"] = theme


def test_size_table_matches_tiers():
    assert get_diagram_size("standard", "small") == CanvasSize(200, 150)
    assert get_diagram_size("standard", "medium") == CanvasSize(300, 200)
    assert get_diagram_size("square", "large") == CanvasSize(450, 450)
    assert get_diagram_size("wide", "medium") == CanvasSize(400, 250)


def test_size_fallbacks():
    assert get_diagram_size("panorama", "large") == get_diagram_size("standard", "large")
    assert get_diagram_size("square", "huge") == get_diagram_size("square", "medium")
    assert get_diagram_size() == CanvasSize(300, 200)


def test_list_sizes_is_plain_data():
    sizes = list_sizes()

    assert set(sizes) == set(DIAGRAM_SIZES)
    assert sizes["wide"]["large"] == {"width": 500, "height": 300}
