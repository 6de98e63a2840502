"""MindMapX: an interactive idea-tree editor."""

__version__ = "1.0.0"
__app_id__ = "io.github.mindmapx.MindMapX"
