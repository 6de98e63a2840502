"""Environment and dependency preflight checks.

Run before importing any GTK module so that a missing binding produces a
readable message instead of a traceback. Set MINDMAPX_SKIP_PREFLIGHT=1 to
bypass (useful for development).
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PreflightResult:
    ok: bool
    message: str


def _has_display() -> bool:
    return bool(os.environ.get("WAYLAND_DISPLAY") or os.environ.get("DISPLAY"))


def _check_python_deps(require_gui: bool = True) -> Optional[str]:
    """Describe the first missing binding, or None when everything imports."""
    try:
        import cairo  # type: ignore[import-not-found]  # noqa: F401
    except ImportError as exc:
        return (
            f"pycairo could not be imported ({exc}). "
            "Image export and drawing need it; install the cairo library and `pip install pycairo`."
        )

    if not require_gui:
        return None

    try:
        import gi  # type: ignore[import-not-found]

        gi.require_version("Gtk", "4.0")
        gi.require_version("Adw", "1")
        gi.require_version("Gdk", "4.0")
        from gi.repository import Gtk, Adw, Gdk  # type: ignore[import-not-found]  # noqa: F401
    except (ImportError, ValueError) as exc:
        return (
            "Missing GTK4/libadwaita bindings. Install PyGObject together with "
            "the gtk4 and libadwaita system packages. "
            f"Underlying error: {exc}"
        )

    return None


def run_preflight(*, require_display: bool = True, check_deps: bool = True) -> PreflightResult:
    """Run checks and return a structured result."""
    if os.environ.get("MINDMAPX_SKIP_PREFLIGHT") == "1":
        return PreflightResult(True, "Preflight skipped via MINDMAPX_SKIP_PREFLIGHT=1")

    if require_display and not _has_display():
        return PreflightResult(
            False,
            "MindMapX needs a graphical session (neither WAYLAND_DISPLAY nor DISPLAY is set). "
            "Set MINDMAPX_SKIP_PREFLIGHT=1 to bypass.",
        )

    if check_deps:
        dep_error = _check_python_deps(require_gui=require_display)
        if dep_error:
            return PreflightResult(False, dep_error)

    return PreflightResult(True, "Preflight OK")


def run_preflight_or_die(*, require_display: bool = True, check_deps: bool = True) -> None:
    result = run_preflight(require_display=require_display, check_deps=check_deps)
    if result.ok:
        return

    sys.stderr.write("\nMindMapX preflight check failed:\n")
    sys.stderr.write(result.message)
    sys.stderr.write("\n\n")
    sys.stderr.write(
        "Suggested setup:\n"
        "  install gtk4, libadwaita, gobject-introspection and cairo from your distribution\n"
        "  pip install mindmapx\n\n"
    )
    raise SystemExit(1)
