"""Application settings and data directories for MindMapX."""

import json
import logging
import os
import re
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_ROLE_COLORS = {
    "root": "#F05A5B",
    "child": "#4A90E2",
    "selected": "#FF6B6B",
}

_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def is_color(value) -> bool:
    """True for "#rgb" or "#rrggbb" strings."""
    return isinstance(value, str) and bool(_COLOR_RE.match(value))


def get_data_dir() -> Path:
    """Get the application data directory."""
    override = os.environ.get("MINDMAPX_DATA_DIR")
    if override:
        data_dir = Path(override)
    else:
        data_dir = Path.home() / ".local" / "share" / "mindmapx"
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_settings_path() -> Path:
    """Get the settings file path."""
    return get_data_dir() / "settings.json"


def get_export_dir() -> Path:
    """Get the default export directory."""
    export_dir = get_data_dir() / "exports"
    export_dir.mkdir(exist_ok=True)
    return export_dir


@dataclass
class AppSettings:
    """Tunables for a MindMapX session."""
    root_label: str = "Central Idea"
    root_position: Tuple[float, float] = (400.0, 300.0)
    base_distance: float = 150.0
    compact_base_distance: float = 100.0
    compact_breakpoint: float = 768.0
    zoom_min: float = 0.5
    zoom_max: float = 1.5
    zoom_step: float = 0.1
    click_threshold: float = 5.0
    background_color: str = "#0F172A"
    raster_width: int = 800
    raster_height: int = 600
    role_colors: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ROLE_COLORS))
    debug_checks: bool = __debug__

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2)

    @classmethod
    def from_json(cls, data: Optional[str]) -> "AppSettings":
        if not data:
            return cls()
        try:
            d = json.loads(data)
            # Filter to only known fields to handle schema evolution
            known = {f.name for f in cls.__dataclass_fields__.values()}
            settings = cls(**{k: v for k, v in d.items() if k in known})

            x, y = settings.root_position
            settings.root_position = (float(x), float(y))
            colors = dict(DEFAULT_ROLE_COLORS)
            colors.update({k: v for k, v in settings.role_colors.items()
                           if k in DEFAULT_ROLE_COLORS and is_color(v)})
            settings.role_colors = colors
            if not is_color(settings.background_color):
                raise ValueError(f"bad background color {settings.background_color!r}")
        except (json.JSONDecodeError, TypeError, AttributeError, ValueError):
            logger.warning("Ignoring malformed settings, using defaults")
            return cls()
        return settings


def load_settings(path: Optional[Path] = None) -> AppSettings:
    """Load settings from disk, falling back to defaults."""
    path = path or get_settings_path()
    if not path.exists():
        return AppSettings()
    return AppSettings.from_json(path.read_text(encoding="utf-8"))


def save_settings(settings: AppSettings, path: Optional[Path] = None) -> Path:
    """Write settings to disk and return the path written."""
    path = path or get_settings_path()
    path.write_text(settings.to_json(), encoding="utf-8")
    return path
