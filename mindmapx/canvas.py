"""Canvas widget that renders the idea tree and feeds pointer input to the controller."""

from typing import Callable, Optional

import gi

gi.require_version("Gtk", "4.0")
gi.require_version("Gdk", "4.0")
from gi.repository import Gtk, Graphene

from mindmapx.controller import InteractionController, Phase, PointerEvent
from mindmapx.graph import Node, Point
from mindmapx.render import draw_graph, hex_to_rgb, node_rect


class MindMapCanvas(Gtk.DrawingArea):
    """Custom canvas widget for the idea tree.

    Pointer positions handed to the controller are in the coordinates of the
    toplevel window; the canvas offset inside it is the viewport origin.
    """

    def __init__(self, controller: InteractionController):
        super().__init__()

        self.controller = controller
        self.controller.capture = self._acquire_pointer

        # Callbacks
        self.on_edit_requested: Optional[Callable[[Node], None]] = None

        self.set_draw_func(self._on_draw)
        self.set_focusable(True)
        self.set_hexpand(True)
        self.set_vexpand(True)

        self._setup_event_controllers()

    def _setup_event_controllers(self):
        """Setup mouse and touch event controllers."""
        # Double click on a node opens the editor, click on nothing clears selection
        click_ctrl = Gtk.GestureClick()
        click_ctrl.set_button(1)
        click_ctrl.connect("pressed", self._on_click)
        self.add_controller(click_ctrl)

        # Pointer down on a node starts a drag; touch is handled by the same gesture
        drag_ctrl = Gtk.GestureDrag()
        drag_ctrl.set_button(1)
        drag_ctrl.connect("drag-begin", self._on_drag_begin)
        drag_ctrl.connect("drag-end", self._on_drag_end)
        self.add_controller(drag_ctrl)

        motion_ctrl = Gtk.EventControllerMotion()
        motion_ctrl.connect("leave", self._on_leave)
        self.add_controller(motion_ctrl)

    # ==================== Coordinates ====================

    def _origin(self) -> Point:
        root = self.get_root()
        if root is None:
            return Point(0.0, 0.0)
        ok, point = self.compute_point(root, Graphene.Point().init(0, 0))
        if not ok:
            return Point(0.0, 0.0)
        return Point(point.x, point.y)

    def _to_client(self, x: float, y: float) -> PointerEvent:
        origin = self._origin()
        return PointerEvent(x + origin.x, y + origin.y)

    def _find_node_at(self, x: float, y: float) -> Optional[Node]:
        """Find the node under widget-local coordinates."""
        zoom = self.controller.zoom
        cx, cy = x / zoom, y / zoom
        # Check in reverse order (top-most first)
        for node in reversed(self.controller.graph.nodes):
            nx, ny, w, h = node_rect(node, self.controller.compact)
            if nx <= cx <= nx + w and ny <= cy <= ny + h:
                return node
        return None

    # ==================== Pointer capture ====================

    def _acquire_pointer(self, on_move, on_release):
        """Listen to the whole window for the duration of one drag."""
        root = self.get_root()
        if root is None:
            return None

        motion = Gtk.EventControllerMotion()
        motion.set_propagation_phase(Gtk.PropagationPhase.CAPTURE)
        motion.connect("motion", lambda _c, x, y: on_move(PointerEvent(x, y)))
        motion.connect("leave", lambda _c: on_release())

        released = Gtk.GestureClick()
        released.set_propagation_phase(Gtk.PropagationPhase.CAPTURE)
        released.connect("released", lambda _g, _n, _x, _y: self._finish_drag())

        root.add_controller(motion)
        root.add_controller(released)

        def release():
            root.remove_controller(motion)
            root.remove_controller(released)

        return release

    # ==================== Event handlers ====================

    def _on_click(self, gesture, n_press, x, y):
        self.grab_focus()
        if self.controller.phase != Phase.PLAYING:
            return

        node = self._find_node_at(x, y)
        if node is None:
            self.controller.clear_selection()
        elif n_press == 2 and self.on_edit_requested:
            self.on_edit_requested(node)

    def _on_drag_begin(self, gesture, start_x, start_y):
        if self.controller.phase != Phase.PLAYING:
            return
        node = self._find_node_at(start_x, start_y)
        if node is None:
            return
        self.controller.set_viewport(self._origin(), self.get_width())
        self.controller.begin_drag(node.id, self._to_client(start_x, start_y))

    def _on_drag_end(self, gesture, offset_x, offset_y):
        self._finish_drag()

    def _finish_drag(self):
        """End the drag; a gesture that barely moved also selects the node."""
        outcome = self.controller.end_drag()
        if outcome and outcome.is_click:
            self.controller.select_node(outcome.node_id)

    def _on_leave(self, controller):
        self.controller.end_drag()

    # ==================== Drawing ====================

    def _on_draw(self, area, cr, width, height):
        """Main drawing function."""
        self.controller.set_viewport(self._origin(), width)

        cr.save()
        cr.set_source_rgb(*hex_to_rgb(self.controller.settings.background_color))
        cr.paint()

        cr.scale(self.controller.zoom, self.controller.zoom)
        draw_graph(
            cr, self.controller.graph.snapshot(), self.controller.role_colors,
            selected_id=self.controller.selected_id,
            dragging_id=self.controller.dragging_id,
            compact=self.controller.compact,
        )
        cr.restore()
