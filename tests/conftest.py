import pytest

from renderers.engine import DiagramEngine
from schemas.diagram import RenderRequest


@pytest.fixture
def engine():
    return DiagramEngine()


@pytest.fixture
def render(engine):
    def _render(shape, measurements=None, config=None, data=None, unit="", **extra):
        request = RenderRequest(
            shape=shape,
            measurements=measurements or {},
            config=config or {},
            data=data,
            unit=unit,
            **extra,
        )
        return engine.render(request)

    return _render


def inside_canvas(scene, tolerance=0.5):
    bounds = scene.bounds()
    if bounds is None:
        return True
    min_x, min_y, max_x, max_y = bounds
    return (
        min_x >= -tolerance
        and min_y >= -tolerance
        and max_x <= scene.width + tolerance
        and max_y <= scene.height + tolerance
    )
