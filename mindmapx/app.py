"""Main MindMapX application."""

import logging
import sys
from typing import Optional

import gi
gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")
gi.require_version("Gdk", "4.0")
from gi.repository import Gtk, Gio, GLib, Adw

from mindmapx import __app_id__
from mindmapx.canvas import MindMapCanvas
from mindmapx.controller import InteractionController
from mindmapx.errors import RenderError
from mindmapx.export import default_document_name, write_document
from mindmapx.graph import Node
from mindmapx.render import write_png
from mindmapx.settings import AppSettings, get_export_dir, load_settings
from mindmapx.widgets import ControlsPanel, EditNodeDialog, SuggestionsPanel

logger = logging.getLogger(__name__)


class MindMapXWindow(Adw.ApplicationWindow):
    """Main application window."""

    def __init__(self, app: Adw.Application, settings: AppSettings):
        super().__init__(application=app)
        self.controller = InteractionController(settings)
        self.controller.on_state_changed = self._on_state_changed

        self.set_title("MindMapX")
        self.set_default_size(1280, 820)

        self._build_ui()
        self._setup_shortcuts()
        self._on_state_changed()

    def _build_ui(self):
        """Build the main UI layout."""
        self.toast_overlay = Adw.ToastOverlay()

        main_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL)
        header = Adw.HeaderBar()
        header.set_title_widget(Adw.WindowTitle(
            title="MindMapX", subtitle="Visualize ideas, connect thoughts"))
        main_box.append(header)

        paned = Gtk.Paned(orientation=Gtk.Orientation.HORIZONTAL)
        paned.set_vexpand(True)

        self.controls = ControlsPanel(self.controller.role_colors)
        self.controls.on_start = self.controller.start_session
        self.controls.on_finish = self.controller.finish_session
        self.controls.on_reset = self.controller.reset_session
        self.controls.on_add_custom = self._add_child
        self.controls.on_zoom = self._on_zoom
        self.controls.on_role_color = self.controller.set_role_color
        self.controls.on_export = self._on_export
        paned.set_start_child(self.controls)
        paned.set_shrink_start_child(False)
        paned.set_resize_start_child(False)

        right = Gtk.Box(orientation=Gtk.Orientation.VERTICAL)
        self.suggestions = SuggestionsPanel()
        self.suggestions.on_suggestion_chosen = self._add_child
        right.append(self.suggestions)

        self.canvas = MindMapCanvas(self.controller)
        self.canvas.on_edit_requested = self._show_edit_dialog
        canvas_frame = Gtk.Frame()
        canvas_frame.set_child(self.canvas)
        canvas_frame.add_css_class("canvas-container")
        right.append(canvas_frame)

        paned.set_end_child(right)
        main_box.append(paned)

        self.toast_overlay.set_child(main_box)
        self.set_content(self.toast_overlay)

    def _setup_shortcuts(self):
        """Setup window actions and keyboard shortcuts."""
        actions = [
            ("zoom-in", lambda *_: self.controller.zoom_in(), ["<Control>plus", "<Control>equal"]),
            ("zoom-out", lambda *_: self.controller.zoom_out(), ["<Control>minus"]),
            ("zoom-reset", lambda *_: self.controller.reset_zoom(), ["<Control>0"]),
            ("export-png", lambda *_: self._on_export("png"), ["<Control>e"]),
            ("export-json", lambda *_: self._on_export("json"), ["<Control><Shift>e"]),
            ("import-json", lambda *_: self._on_import(), ["<Control>o"]),
        ]
        app = self.get_application()
        for name, callback, accels in actions:
            action = Gio.SimpleAction.new(name, None)
            action.connect("activate", callback)
            self.add_action(action)
            app.set_accels_for_action(f"win.{name}", accels)

    # ==================== Controller glue ====================

    def _on_state_changed(self):
        controller = self.controller
        selected: Optional[Node] = None
        if controller.selected_id is not None:
            selected = controller.graph.get_node(controller.selected_id)
        self.suggestions.update(selected, controller.suggestions, controller.show_suggestions)
        self.controls.update(controller.phase, controller.zoom, controller.session_summary())
        self.canvas.queue_draw()

    def _add_child(self, label: str):
        if self.controller.add_child_node(label) is None:
            self._show_toast("Select a node first")

    def _on_zoom(self, action: str):
        if action == "in":
            self.controller.zoom_in()
        elif action == "out":
            self.controller.zoom_out()
        else:
            self.controller.reset_zoom()

    def _show_edit_dialog(self, node: Node):
        dialog = EditNodeDialog(self, node, self.controller.color_of(node.id))
        dialog.on_save = self.controller.edit_node
        dialog.on_reset_color = lambda node_id: self.controller.edit_node(node_id, reset_color=True)
        dialog.present()

    # ==================== Export ====================

    def _save_dialog(self, title: str, name: str, mime: str, callback):
        dialog = Gtk.FileDialog()
        dialog.set_title(title)
        dialog.set_initial_name(name)
        dialog.set_initial_folder(Gio.File.new_for_path(str(get_export_dir())))

        file_filter = Gtk.FileFilter()
        file_filter.set_name(title)
        file_filter.add_mime_type(mime)
        filters = Gio.ListStore.new(Gtk.FileFilter)
        filters.append(file_filter)
        dialog.set_filters(filters)

        dialog.save(self, None, callback)

    def _on_export(self, kind: str):
        if kind == "png":
            self._save_dialog("Export as PNG", "mindmap.png", "image/png",
                              self._on_export_png_response)
        else:
            self._save_dialog("Export as JSON", default_document_name(),
                              "application/json", self._on_export_json_response)

    def _on_export_png_response(self, dialog, result):
        """Handle PNG export dialog response."""
        try:
            file = dialog.save_finish(result)
        except GLib.Error:
            return  # User cancelled
        filepath = file.get_path() if file else None
        if not filepath:
            self._show_toast("Export failed: selected location is not a local file")
            return

        def on_done(data: bytes):
            write_png(data, filepath)
            self._show_toast(f"Exported to {filepath}")

        def on_error(exc: RenderError):
            logger.error("PNG export failed: %s", exc)
            self._show_toast("Export failed")

        self.controller.export_image_deferred(on_done, on_error, GLib.idle_add)

    def _on_export_json_response(self, dialog, result):
        """Handle JSON export dialog response."""
        try:
            file = dialog.save_finish(result)
        except GLib.Error:
            return  # User cancelled
        filepath = file.get_path() if file else None
        if not filepath:
            self._show_toast("Export failed: selected location is not a local file")
            return
        try:
            write_document(self.controller.graph.snapshot(), filepath)
        except OSError as exc:
            logger.error("JSON export failed: %s", exc)
            self._show_toast("Export failed")
            return
        self._show_toast(f"Exported to {filepath}")

    def _on_import(self):
        dialog = Gtk.FileDialog()
        dialog.set_title("Open Mind Map")
        dialog.set_initial_folder(Gio.File.new_for_path(str(get_export_dir())))
        dialog.open(self, None, self._on_import_response)

    def _on_import_response(self, dialog, result):
        try:
            file = dialog.open_finish(result)
        except GLib.Error:
            return  # User cancelled
        filepath = file.get_path() if file else None
        if not filepath:
            return
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = f.read()
        except OSError as exc:
            logger.error("Import failed: %s", exc)
            self._show_toast("Could not read file")
            return
        if self.controller.import_document(data):
            self._show_toast(f"Opened {filepath}")
        else:
            self._show_toast("Not a valid mind map")

    def _show_toast(self, message: str):
        """Show a toast notification."""
        toast = Adw.Toast.new(message)
        toast.set_timeout(3)
        self.toast_overlay.add_toast(toast)


class MindMapXApp(Adw.Application):
    """Main application class."""

    def __init__(self):
        super().__init__(
            application_id=__app_id__,
            flags=Gio.ApplicationFlags.DEFAULT_FLAGS
        )
        self.settings: Optional[AppSettings] = None
        self.window: Optional[MindMapXWindow] = None

    def do_startup(self):
        """Initialize application."""
        Adw.Application.do_startup(self)
        self.settings = load_settings()

        style_manager = Adw.StyleManager.get_default()
        style_manager.set_color_scheme(Adw.ColorScheme.FORCE_DARK)

    def do_activate(self):
        """Activate application."""
        if not self.window:
            self.window = MindMapXWindow(self, self.settings)
        self.window.present()


def main() -> int:
    """Application entry point."""
    app = MindMapXApp()
    return app.run(sys.argv)


if __name__ == "__main__":
    sys.exit(main())
