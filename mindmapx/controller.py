"""Selection and drag state machine for the MindMapX canvas.

The controller is the only writer of the GraphStore. The view layer sends it
commands and redraws from `graph.snapshot()` and the controller's public
state whenever `on_state_changed` fires.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Union

from mindmapx.errors import (
    DocumentError, GraphReferenceError, InvariantViolation, RenderError
)
from mindmapx.export import parse_document, to_document
from mindmapx.graph import GraphStore, Point, resolve_color
from mindmapx.settings import AppSettings, is_color
from mindmapx.suggestions import generate_suggestions
from mindmapx.transform import CoordinateTransform

logger = logging.getLogger(__name__)


class Phase(Enum):
    """Which stage of a session the shell is showing."""
    START = "start"
    PLAYING = "playing"
    FINISHED = "finished"


@dataclass(frozen=True)
class PointerEvent:
    """A mouse or touch position in client coordinates."""
    x: float
    y: float

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Selected:
    node_id: str


@dataclass(frozen=True)
class Dragging:
    node_id: str
    grab_offset: Point


State = Union[Idle, Selected, Dragging]


@dataclass(frozen=True)
class DragOutcome:
    """How a finished drag gesture went."""
    node_id: str
    travel: float
    is_click: bool


@dataclass(frozen=True)
class SessionSummary:
    node_count: int
    edge_count: int
    depth: int


# acquire(on_move, on_release) installs pointer listeners and returns a
# function that removes them.
CaptureFactory = Callable[[Callable[[PointerEvent], None], Callable[[], None]],
                          Callable[[], None]]


class DragSubscription:
    """Pointer listeners that live exactly as long as one drag."""

    def __init__(self, release: Optional[Callable[[], None]]):
        self._release = release

    @property
    def active(self) -> bool:
        return self._release is not None

    def release(self):
        release, self._release = self._release, None
        if release is not None:
            release()


class InteractionController:
    """Drives selection, dragging and suggestions over a GraphStore."""

    def __init__(self, settings: Optional[AppSettings] = None,
                 capture: Optional[CaptureFactory] = None,
                 rng: Optional[random.Random] = None):
        self.settings = settings or AppSettings()
        self.graph = GraphStore(self.settings, rng=rng)
        self.transform = CoordinateTransform(
            self.settings.zoom_min, self.settings.zoom_max, self.settings.zoom_step
        )
        self.capture = capture
        self.role_colors: Dict[str, str] = dict(self.settings.role_colors)

        self.phase = Phase.START
        self.selected_id: Optional[str] = None
        self.suggestions: List[str] = []
        self.show_suggestions = False

        self.viewport_origin = Point(0.0, 0.0)
        self.compact = False

        self._drag: Optional[Dragging] = None
        self._drag_start: Optional[Point] = None
        self._drag_travel = 0.0
        self._subscription = DragSubscription(None)

        # Callbacks
        self.on_state_changed: Optional[Callable[[], None]] = None

    # ==================== State ====================

    @property
    def state(self) -> State:
        if self._drag is not None:
            return self._drag
        if self.selected_id is not None:
            return Selected(self.selected_id)
        return Idle()

    @property
    def is_dragging(self) -> bool:
        return self._drag is not None

    @property
    def dragging_id(self) -> Optional[str]:
        return self._drag.node_id if self._drag else None

    @property
    def zoom(self) -> float:
        return self.transform.zoom

    @property
    def capture_active(self) -> bool:
        return self._subscription.active

    def _notify_changed(self):
        if self.on_state_changed:
            self.on_state_changed()

    # ==================== Session ====================

    def start_session(self):
        self.phase = Phase.PLAYING
        logger.debug("Session started")
        self._notify_changed()

    def finish_session(self):
        self.phase = Phase.FINISHED
        self._notify_changed()

    def reset_session(self):
        """Back to a single root, nothing selected, default zoom."""
        self._stop_drag()
        self.graph.reset()
        self.transform.reset_zoom()
        self.selected_id = None
        self._hide_suggestions()
        self.phase = Phase.START
        logger.info("Session reset")
        self._notify_changed()

    def session_summary(self) -> SessionSummary:
        return SessionSummary(
            node_count=len(self.graph),
            edge_count=len(self.graph.edges),
            depth=self.graph.depth(),
        )

    # ==================== Viewport ====================

    def set_viewport(self, origin: Point, width: Optional[float] = None):
        """Record where the canvas sits in client space and how wide it is."""
        self.viewport_origin = origin
        if width is not None:
            self.compact = width < self.settings.compact_breakpoint

    def set_zoom(self, level: float) -> float:
        zoom = self.transform.set_zoom(level)
        self._notify_changed()
        return zoom

    def zoom_in(self) -> float:
        zoom = self.transform.zoom_in()
        self._notify_changed()
        return zoom

    def zoom_out(self) -> float:
        zoom = self.transform.zoom_out()
        self._notify_changed()
        return zoom

    def reset_zoom(self) -> float:
        zoom = self.transform.reset_zoom()
        self._notify_changed()
        return zoom

    # ==================== Selection ====================

    def select_node(self, node_id: str):
        """Select a node and show suggestions for its label."""
        if self.is_dragging:
            return
        try:
            node = self.graph.get_node(node_id)
        except GraphReferenceError as exc:
            logger.warning("Ignoring selection: %s", exc)
            return

        self.selected_id = node_id
        self.suggestions = generate_suggestions(node.label)
        self.show_suggestions = True
        self._notify_changed()

    def clear_selection(self):
        self.selected_id = None
        self._hide_suggestions()
        self._notify_changed()

    def _hide_suggestions(self):
        self.suggestions = []
        self.show_suggestions = False

    # ==================== Dragging ====================

    def begin_drag(self, node_id: str, pointer: PointerEvent):
        """Start dragging node_id, remembering where on it the pointer grabbed."""
        try:
            node = self.graph.get_node(node_id)
        except GraphReferenceError as exc:
            logger.warning("Ignoring drag: %s", exc)
            return

        self._stop_drag()

        canvas_point = self.transform.to_canvas(pointer.point, self.viewport_origin)
        self._drag = Dragging(node_id, canvas_point - node.position)
        self._drag_start = pointer.point
        self._drag_travel = 0.0
        if self.capture is not None:
            self._subscription = DragSubscription(
                self.capture(self.continue_drag, self.end_drag)
            )
        logger.debug("Drag start %s offset %s", node_id, self._drag.grab_offset)
        self._notify_changed()

    def continue_drag(self, pointer: PointerEvent):
        if self._drag is None:
            return

        canvas_point = self.transform.to_canvas(pointer.point, self.viewport_origin)
        self._drag_travel = max(self._drag_travel,
                                pointer.point.distance_to(self._drag_start))
        try:
            self.graph.move_node(self._drag.node_id, canvas_point - self._drag.grab_offset)
        except GraphReferenceError as exc:
            logger.warning("Dropping drag: %s", exc)
            self._stop_drag()
        self._notify_changed()

    def end_drag(self) -> Optional[DragOutcome]:
        """Finish the drag (pointer up or pointer left the canvas)."""
        if self._drag is None:
            return None

        node_id = self._drag.node_id
        travel = self._drag_travel
        self._stop_drag()

        if self.selected_id != node_id:
            self.selected_id = node_id
            self._hide_suggestions()

        self._notify_changed()
        return DragOutcome(node_id=node_id, travel=travel,
                           is_click=travel < self.settings.click_threshold)

    def _stop_drag(self):
        self._drag = None
        self._drag_start = None
        self._drag_travel = 0.0
        self._subscription.release()

    # ==================== Editing ====================

    def add_child_node(self, label: str, color: Optional[str] = None) -> Optional[str]:
        """Add a child under the selected node. The parent stays selected."""
        if self.selected_id is None:
            logger.warning("Ignoring add: nothing selected")
            return None

        label = label.strip()
        if not label:
            return None
        if color is not None and not is_color(color):
            logger.warning("Ignoring add: unsupported color %r", color)
            return None

        try:
            node_id = self.graph.add_node(self.selected_id, label, color,
                                          zoom=self.zoom, compact=self.compact)
        except GraphReferenceError as exc:
            logger.warning("Ignoring add: %s", exc)
            return None

        self._hide_suggestions()
        self._notify_changed()
        return node_id

    def edit_node(self, node_id: str, label: Optional[str] = None,
                  color: Optional[str] = None, reset_color: bool = False) -> bool:
        if color is not None and not is_color(color):
            logger.warning("Ignoring edit: unsupported color %r", color)
            return False
        try:
            self.graph.edit_node(node_id, label, color, reset_color=reset_color)
        except GraphReferenceError as exc:
            logger.warning("Ignoring edit: %s", exc)
            return False
        self._notify_changed()
        return True

    def set_role_color(self, role: str, color: str):
        """Change the fallback color for root, child or selected nodes."""
        if role not in self.role_colors:
            logger.warning("Ignoring unknown color role %r", role)
            return
        if not is_color(color):
            logger.warning("Ignoring %s color: unsupported color %r", role, color)
            return
        self.role_colors[role] = color
        self._notify_changed()

    def color_of(self, node_id: str) -> Optional[str]:
        try:
            return resolve_color(self.graph.get_node(node_id), self.role_colors)
        except GraphReferenceError:
            return None

    # ==================== Export ====================

    def export_document(self) -> dict:
        return to_document(self.graph.snapshot())

    def import_document(self, data: Union[str, dict]) -> bool:
        """Replace the graph with a previously exported document."""
        try:
            snapshot = parse_document(data)
        except (DocumentError, GraphReferenceError, InvariantViolation) as exc:
            logger.warning("Rejected document: %s", exc)
            return False

        self._stop_drag()
        self.graph.load(snapshot)
        self.selected_id = None
        self._hide_suggestions()
        self._notify_changed()
        return True

    def render(self):
        """Render the current graph onto a fresh cairo surface."""
        from mindmapx.render import render_surface

        return render_surface(
            self.graph.snapshot(), self.role_colors,
            width=self.settings.raster_width, height=self.settings.raster_height,
            zoom=self.zoom, selected_id=self.selected_id, compact=self.compact,
        )

    def export_image(self) -> bytes:
        from mindmapx.render import to_raster_image

        return to_raster_image(self.render(), self.settings.background_color)

    def export_image_deferred(self, on_done: Callable[[bytes], None],
                              on_error: Callable[[RenderError], None],
                              schedule: Callable[[Callable[[], bool]], object]):
        """Render now, flatten and encode on a later main-loop tick.

        There is no cancellation: if the session is reset before the
        scheduled step runs, the image of the earlier graph is still
        delivered.
        """
        from mindmapx.render import to_raster_image

        try:
            surface = self.render()
        except RenderError as exc:
            on_error(exc)
            return

        background = self.settings.background_color

        def _finish() -> bool:
            try:
                data = to_raster_image(surface, background)
            except RenderError as exc:
                on_error(exc)
            else:
                on_done(data)
            return False  # one-shot idle source

        schedule(_finish)
