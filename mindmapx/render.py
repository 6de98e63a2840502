"""Cairo drawing and PNG rasterization for MindMapX graphs."""

import io
import logging
import math
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import cairo

from mindmapx.errors import RenderError, RenderKind
from mindmapx.graph import GraphSnapshot, Node, resolve_color

logger = logging.getLogger(__name__)

COLORS = {
    'text': "#FFFFFF",
    'node_stroke': "#334155",
    'edge': "#475569",
}

NODE_SIZE = 100
ROOT_NODE_SIZE = 120
COMPACT_NODE_SIZE = 70
COMPACT_ROOT_NODE_SIZE = 80
LABEL_MAX_CHARS = 20


def hex_to_rgb(color: str) -> Tuple[float, float, float]:
    """Convert '#rrggbb' (or '#rgb') to a cairo RGB triple."""
    value = color.lstrip("#")
    if len(value) == 3:
        value = "".join(c * 2 for c in value)
    if len(value) != 6:
        raise ValueError(f"unsupported color {color!r}")
    return tuple(int(value[i:i + 2], 16) / 255.0 for i in (0, 2, 4))


def node_size(node: Node, compact: bool = False) -> float:
    if compact:
        return COMPACT_ROOT_NODE_SIZE if node.is_root else COMPACT_NODE_SIZE
    return ROOT_NODE_SIZE if node.is_root else NODE_SIZE


def node_rect(node: Node, compact: bool = False) -> Tuple[float, float, float, float]:
    """Canvas-space (x, y, w, h) of a node's box."""
    size = node_size(node, compact)
    return (node.position.x - size / 2, node.position.y - size / 3, size, size * 0.6)


def display_label(label: str) -> str:
    if len(label) > LABEL_MAX_CHARS:
        return label[:LABEL_MAX_CHARS] + "..."
    return label


def draw_graph(cr, snapshot: GraphSnapshot, role_colors: Dict[str, str],
               selected_id: Optional[str] = None,
               dragging_id: Optional[str] = None,
               compact: bool = False):
    """Draw edges then nodes onto a cairo context in canvas space."""
    nodes = snapshot.node_map()

    for edge in snapshot.edges:
        source = nodes.get(edge.source_id)
        target = nodes.get(edge.target_id)
        if source is None or target is None:
            continue
        active = dragging_id is not None and dragging_id in (edge.source_id, edge.target_id)
        cr.set_source_rgb(*hex_to_rgb(role_colors["selected"] if active else COLORS['edge']))
        cr.set_line_width(3 if active else 2)
        cr.set_line_cap(cairo.LINE_CAP_ROUND)
        cr.move_to(source.position.x, source.position.y)
        cr.line_to(target.position.x, target.position.y)
        cr.stroke()

    for node in snapshot.nodes:
        _draw_node(cr, node, role_colors, node.id == selected_id, compact)


def _draw_node(cr, node: Node, role_colors: Dict[str, str], is_selected: bool,
               compact: bool):
    """Draw a single node."""
    x, y, w, h = node_rect(node, compact)

    cr.save()
    _draw_rounded_rect(cr, x, y, w, h, 8)

    cr.set_source_rgb(*hex_to_rgb(resolve_color(node, role_colors)))
    cr.fill_preserve()

    stroke = role_colors["selected"] if is_selected else COLORS['node_stroke']
    cr.set_source_rgb(*hex_to_rgb(stroke))
    cr.set_line_width(3 if is_selected else 2)
    cr.stroke()

    # Label
    if compact:
        font_size = 10 if node.is_root else 9
    else:
        font_size = 14 if node.is_root else 13
    cr.set_source_rgb(*hex_to_rgb(COLORS['text']))
    cr.select_font_face("Sans", cairo.FONT_SLANT_NORMAL, cairo.FONT_WEIGHT_BOLD)
    cr.set_font_size(font_size)

    text = display_label(node.label)
    extents = cr.text_extents(text)
    cr.move_to(x + w / 2 - (extents.width / 2 + extents.x_bearing),
               y + h / 2 - (extents.height / 2 + extents.y_bearing))
    cr.show_text(text)
    cr.restore()


def _draw_rounded_rect(cr, x, y, w, h, radius):
    """Draw a rounded rectangle path."""
    cr.new_path()
    cr.arc(x + w - radius, y + radius, radius, -math.pi / 2, 0)
    cr.arc(x + w - radius, y + h - radius, radius, 0, math.pi / 2)
    cr.arc(x + radius, y + h - radius, radius, math.pi / 2, math.pi)
    cr.arc(x + radius, y + radius, radius, math.pi, 3 * math.pi / 2)
    cr.close_path()


def render_surface(snapshot: GraphSnapshot, role_colors: Dict[str, str],
                   width: int = 800, height: int = 600, zoom: float = 1.0,
                   selected_id: Optional[str] = None,
                   compact: bool = False) -> cairo.ImageSurface:
    """Render the graph onto a transparent surface at the given zoom."""
    try:
        surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, width, height)
        cr = cairo.Context(surface)
    except cairo.Error as exc:
        raise RenderError(RenderKind.SURFACE_UNAVAILABLE, str(exc)) from exc

    cr.scale(zoom, zoom)
    draw_graph(cr, snapshot, role_colors, selected_id=selected_id, compact=compact)
    surface.flush()
    return surface


def to_raster_image(surface: Optional[cairo.ImageSurface], background_color: str) -> bytes:
    """Paint a solid background behind a rendered surface and encode it as PNG."""
    if surface is None:
        raise RenderError(RenderKind.SURFACE_UNAVAILABLE, "no rendered surface")

    try:
        width, height = surface.get_width(), surface.get_height()
        flat = cairo.ImageSurface(cairo.FORMAT_RGB24, width, height)
        cr = cairo.Context(flat)
        cr.set_source_rgb(*hex_to_rgb(background_color))
        cr.paint()
        cr.set_source_surface(surface, 0, 0)
        cr.paint()
        flat.flush()

        buffer = io.BytesIO()
        flat.write_to_png(buffer)
    except (cairo.Error, ValueError) as exc:
        raise RenderError(RenderKind.SURFACE_UNAVAILABLE, str(exc)) from exc

    return buffer.getvalue()


def write_png(data: bytes, filepath: Union[str, Path]) -> Path:
    path = Path(filepath)
    path.write_bytes(data)
    logger.info("Exported image to %s", path)
    return path
