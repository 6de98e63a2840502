"""Zoom-aware conversion between pointer and canvas coordinates."""

from mindmapx.graph import Point

ZOOM_MIN = 0.5
ZOOM_MAX = 1.5
ZOOM_STEP = 0.1
ZOOM_DEFAULT = 1.0


def pointer_to_canvas(pointer: Point, viewport_origin: Point, zoom: float) -> Point:
    """Map a client-space pointer position into canvas space.

    Drag start and every drag move go through this same formula, which keeps
    a dragged node pinned under the pointer at any zoom level.
    """
    return (pointer - viewport_origin) / zoom


class CoordinateTransform:
    """Holds the zoom factor, always clamped to [zoom_min, zoom_max]."""

    def __init__(self, zoom_min: float = ZOOM_MIN, zoom_max: float = ZOOM_MAX,
                 zoom_step: float = ZOOM_STEP):
        self.zoom_min = zoom_min
        self.zoom_max = zoom_max
        self.zoom_step = zoom_step
        self._zoom = ZOOM_DEFAULT

    @property
    def zoom(self) -> float:
        return self._zoom

    def set_zoom(self, level: float) -> float:
        """Set the zoom, clamping out-of-range values."""
        # Rounding keeps repeated steps from drifting past the bounds.
        level = round(float(level), 6)
        self._zoom = max(self.zoom_min, min(self.zoom_max, level))
        return self._zoom

    def zoom_in(self) -> float:
        return self.set_zoom(self._zoom + self.zoom_step)

    def zoom_out(self) -> float:
        return self.set_zoom(self._zoom - self.zoom_step)

    def reset_zoom(self) -> float:
        return self.set_zoom(ZOOM_DEFAULT)

    def to_canvas(self, pointer: Point, viewport_origin: Point) -> Point:
        return pointer_to_canvas(pointer, viewport_origin, self._zoom)

    def to_pointer(self, canvas_point: Point, viewport_origin: Point) -> Point:
        """Inverse of to_canvas, used by the view to place nodes on screen."""
        return Point(canvas_point.x * self._zoom + viewport_origin.x,
                     canvas_point.y * self._zoom + viewport_origin.y)
