from .engine import (
    Camera,
    CanvasEngine,
    Origin,
    PointerEvent,
    Rect,
    ShapeRecord,
    StoreChange,
    new_shape_id,
)
from .scene import SceneCanvas

__all__ = [
    "Camera",
    "CanvasEngine",
    "Origin",
    "PointerEvent",
    "Rect",
    "SceneCanvas",
    "ShapeRecord",
    "StoreChange",
    "new_shape_id",
]
