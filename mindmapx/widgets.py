"""Custom widgets for the MindMapX window."""

from typing import Callable, List, Optional

import gi

gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")
from gi.repository import Gtk, Adw, Pango

from mindmapx.controller import Phase, SessionSummary
from mindmapx.graph import Node
from mindmapx.render import hex_to_rgb

# Color palette for node color customization
COLOR_PALETTE = [
    "#F05A5B",  # Primary red
    "#4A90E2",  # Blue
    "#7B61FF",  # Purple
    "#38A169",  # Green
    "#ED8936",  # Orange
    "#9F7AEA",  # Violet
    "#4299E1",  # Light Blue
    "#48BB78",  # Teal
    "#F6AD55",  # Amber
    "#F56565",  # Coral
    "#BF4E30",  # Secondary red
    "#3182CE",  # Deep Blue
]


class ColorSwatch(Gtk.ToggleButton):
    """A palette button showing a single color."""

    def __init__(self, color: str):
        super().__init__()
        self.color = color
        self.set_tooltip_text(color)
        self.add_css_class("flat")

        area = Gtk.DrawingArea()
        area.set_content_width(20)
        area.set_content_height(20)
        area.set_draw_func(self._on_draw)
        self.set_child(area)

    def _on_draw(self, area, cr, width, height):
        cr.set_source_rgb(*hex_to_rgb(self.color))
        cr.rectangle(0, 0, width, height)
        cr.fill()


class ColorPalette(Gtk.FlowBox):
    """Grid of swatches; exactly one is active."""

    def __init__(self, selected: Optional[str] = None):
        super().__init__()
        self.set_selection_mode(Gtk.SelectionMode.NONE)
        self.set_max_children_per_line(6)

        self.on_color_chosen: Optional[Callable[[str], None]] = None
        self.swatches: List[ColorSwatch] = []
        group: Optional[ColorSwatch] = None

        for color in COLOR_PALETTE:
            swatch = ColorSwatch(color)
            if group is None:
                group = swatch
            else:
                swatch.set_group(group)
            swatch.connect("toggled", self._on_toggled)
            self.swatches.append(swatch)
            self.append(swatch)

        if selected:
            self.select(selected)

    def select(self, color: str):
        for swatch in self.swatches:
            if swatch.color.lower() == color.lower():
                swatch.set_active(True)

    @property
    def color(self) -> Optional[str]:
        for swatch in self.swatches:
            if swatch.get_active():
                return swatch.color
        return None

    def _on_toggled(self, swatch):
        if swatch.get_active() and self.on_color_chosen:
            self.on_color_chosen(swatch.color)


class SuggestionsPanel(Gtk.Box):
    """Buttons for the suggested children of the selected node."""

    def __init__(self):
        super().__init__(orientation=Gtk.Orientation.VERTICAL, spacing=8)
        self.add_css_class("suggestions")
        self.set_margin_start(12)
        self.set_margin_end(12)
        self.set_margin_top(8)
        self.set_margin_bottom(8)

        # Callbacks
        self.on_suggestion_chosen: Optional[Callable[[str], None]] = None

        self.title = Gtk.Label()
        self.title.set_halign(Gtk.Align.START)
        self.title.set_ellipsize(Pango.EllipsizeMode.END)
        self.title.add_css_class("heading")
        self.append(self.title)

        self.flowbox = Gtk.FlowBox()
        self.flowbox.set_selection_mode(Gtk.SelectionMode.NONE)
        self.flowbox.set_max_children_per_line(4)
        self.append(self.flowbox)

        self.set_visible(False)

    def update(self, node: Optional[Node], suggestions: List[str], visible: bool):
        """Refresh the panel from controller state."""
        child = self.flowbox.get_first_child()
        while child is not None:
            next_child = child.get_next_sibling()
            self.flowbox.remove(child)
            child = next_child

        if node is None or not visible:
            self.set_visible(False)
            return

        self.title.set_label(f'Suggestions for "{node.label}"')
        for suggestion in suggestions:
            button = Gtk.Button(label=suggestion)
            button.connect("clicked", self._on_clicked, suggestion)
            self.flowbox.append(button)
        self.set_visible(True)

    def _on_clicked(self, button, suggestion: str):
        if self.on_suggestion_chosen:
            self.on_suggestion_chosen(suggestion)


class EditNodeDialog(Adw.Window):
    """Modal dialog to change a node's label and color."""

    def __init__(self, parent: Gtk.Window, node: Node, color: str):
        super().__init__(transient_for=parent, modal=True)
        self.node = node
        self.set_title("Edit Node")
        self.set_default_size(360, -1)

        # Callbacks
        self.on_save: Optional[Callable[[str, str, str], None]] = None
        self.on_reset_color: Optional[Callable[[str], None]] = None

        box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=12)
        box.set_margin_start(16)
        box.set_margin_end(16)
        box.set_margin_top(16)
        box.set_margin_bottom(16)

        header = Adw.HeaderBar()
        box.append(header)

        box.append(Gtk.Label(label="Label", halign=Gtk.Align.START))
        self.entry = Gtk.Entry()
        self.entry.set_text(node.label)
        self.entry.connect("activate", self._on_save_clicked)
        box.append(self.entry)

        box.append(Gtk.Label(label="Color", halign=Gtk.Align.START))
        self.palette = ColorPalette(selected=color)
        box.append(self.palette)
        self._fallback_color = color

        buttons = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=8)
        buttons.set_halign(Gtk.Align.END)
        reset = Gtk.Button(label="Use Role Color")
        reset.connect("clicked", self._on_reset_clicked)
        buttons.append(reset)
        cancel = Gtk.Button(label="Cancel")
        cancel.connect("clicked", lambda _b: self.close())
        buttons.append(cancel)
        save = Gtk.Button(label="Save")
        save.add_css_class("suggested-action")
        save.connect("clicked", self._on_save_clicked)
        buttons.append(save)
        box.append(buttons)

        self.set_content(box)

    def _on_reset_clicked(self, _button):
        if self.on_reset_color:
            self.on_reset_color(self.node.id)
        self.close()

    def _on_save_clicked(self, _widget):
        label = self.entry.get_text().strip()
        if label and self.on_save:
            self.on_save(self.node.id, label, self.palette.color or self._fallback_color)
        self.close()


class ControlsPanel(Gtk.Box):
    """Left-hand panel: session actions, custom nodes, zoom and colors."""

    def __init__(self, role_colors: dict):
        super().__init__(orientation=Gtk.Orientation.VERTICAL, spacing=12)
        self.add_css_class("sidebar")
        self.set_size_request(300, -1)
        self.set_margin_start(12)
        self.set_margin_end(12)
        self.set_margin_top(12)
        self.set_margin_bottom(12)

        # Callbacks
        self.on_start: Optional[Callable[[], None]] = None
        self.on_finish: Optional[Callable[[], None]] = None
        self.on_reset: Optional[Callable[[], None]] = None
        self.on_add_custom: Optional[Callable[[str], None]] = None
        self.on_zoom: Optional[Callable[[str], None]] = None
        self.on_role_color: Optional[Callable[[str, str], None]] = None
        self.on_export: Optional[Callable[[str], None]] = None

        # Start
        self.start_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=8)
        hint = Gtk.Label(label="Click nodes to expand ideas.\n"
                               "Drag nodes to rearrange.\n"
                               "Double-click a node to edit it.")
        hint.set_halign(Gtk.Align.START)
        hint.add_css_class("dim-label")
        self.start_box.append(hint)
        start_btn = Gtk.Button(label="Start Mind Mapping")
        start_btn.add_css_class("suggested-action")
        start_btn.connect("clicked", lambda _b: self._emit(self.on_start))
        self.start_box.append(start_btn)
        self.append(self.start_box)

        # Playing
        self.play_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=8)
        entry_row = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=6)
        self.custom_entry = Gtk.Entry()
        self.custom_entry.set_placeholder_text("Custom idea...")
        self.custom_entry.set_hexpand(True)
        self.custom_entry.connect("activate", self._on_add_custom)
        entry_row.append(self.custom_entry)
        add_btn = Gtk.Button()
        add_btn.set_icon_name("list-add-symbolic")
        add_btn.set_tooltip_text("Add to selected node")
        add_btn.connect("clicked", self._on_add_custom)
        entry_row.append(add_btn)
        self.play_box.append(entry_row)

        zoom_row = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=6)
        for icon, action in (("zoom-out-symbolic", "out"),
                             ("zoom-original-symbolic", "reset"),
                             ("zoom-in-symbolic", "in")):
            btn = Gtk.Button()
            btn.set_icon_name(icon)
            btn.connect("clicked", lambda _b, a=action: self.on_zoom and self.on_zoom(a))
            zoom_row.append(btn)
        self.zoom_label = Gtk.Label(label="Zoom: 100%")
        self.zoom_label.set_hexpand(True)
        self.zoom_label.set_halign(Gtk.Align.END)
        zoom_row.append(self.zoom_label)
        self.play_box.append(zoom_row)

        finish_btn = Gtk.Button(label="Finish Mind Map")
        finish_btn.connect("clicked", lambda _b: self._emit(self.on_finish))
        self.play_box.append(finish_btn)
        self.append(self.play_box)

        # Finished
        self.summary_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=8)
        self.summary_label = Gtk.Label()
        self.summary_label.set_halign(Gtk.Align.START)
        self.summary_box.append(self.summary_label)
        export_row = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=6, homogeneous=True)
        for label, kind in (("Export PNG", "png"), ("Export JSON", "json")):
            btn = Gtk.Button(label=label)
            btn.connect("clicked", lambda _b, k=kind: self.on_export and self.on_export(k))
            export_row.append(btn)
        self.summary_box.append(export_row)
        new_btn = Gtk.Button(label="Create New Mind Map")
        new_btn.add_css_class("suggested-action")
        new_btn.connect("clicked", lambda _b: self._emit(self.on_reset))
        self.summary_box.append(new_btn)
        self.append(self.summary_box)

        self.append(Gtk.Separator(orientation=Gtk.Orientation.HORIZONTAL))

        # Role colors
        for role, title in (("root", "Root Node"), ("child", "Child Nodes"),
                            ("selected", "Selected Highlight")):
            label = Gtk.Label(label=title, halign=Gtk.Align.START)
            label.add_css_class("dim-label")
            self.append(label)
            palette = ColorPalette(selected=role_colors.get(role))
            palette.on_color_chosen = lambda c, r=role: self.on_role_color and self.on_role_color(r, c)
            self.append(palette)

    def _emit(self, callback: Optional[Callable[[], None]]):
        if callback:
            callback()

    def _on_add_custom(self, _widget):
        text = self.custom_entry.get_text()
        if text.strip() and self.on_add_custom:
            self.on_add_custom(text)
            self.custom_entry.set_text("")

    def update(self, phase: Phase, zoom: float, summary: SessionSummary):
        self.start_box.set_visible(phase == Phase.START)
        self.play_box.set_visible(phase == Phase.PLAYING)
        self.summary_box.set_visible(phase == Phase.FINISHED)
        self.zoom_label.set_label(f"Zoom: {round(zoom * 100)}%")
        self.summary_label.set_label(
            "Mind Map Complete!\n"
            f"Total Nodes: {summary.node_count}\n"
            f"Connections: {summary.edge_count}\n"
            f"Depth Levels: {summary.depth}"
        )
