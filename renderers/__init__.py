from renderers.engine import DiagramEngine
from renderers.scene import SceneGraph

__all__ = ["DiagramEngine", "SceneGraph"]
