"""Error taxonomy for the graph-editing core."""

from enum import Enum
from typing import Optional


class MindMapError(Exception):
    """Base class for MindMapX errors."""


class ReferenceKind(Enum):
    """Which kind of stale or unknown id a command referenced."""
    NODE_NOT_FOUND = "node_not_found"
    PARENT_NOT_FOUND = "parent_not_found"
    EDGE_ENDPOINT_MISSING = "edge_endpoint_missing"


class GraphReferenceError(MindMapError):
    """A command referenced a node that does not exist."""

    def __init__(self, kind: ReferenceKind, ref_id: Optional[str] = None):
        self.kind = kind
        self.ref_id = ref_id
        super().__init__(f"{kind.value}: {ref_id!r}")


class RenderKind(Enum):
    SURFACE_UNAVAILABLE = "surface_unavailable"


class RenderError(MindMapError):
    """The drawing or encode target could not be obtained."""

    def __init__(self, kind: RenderKind = RenderKind.SURFACE_UNAVAILABLE,
                 detail: str = ""):
        self.kind = kind
        self.detail = detail
        message = kind.value if not detail else f"{kind.value}: {detail}"
        super().__init__(message)


class DocumentError(MindMapError):
    """An exported document could not be parsed."""


class InvariantViolation(AssertionError):
    """The graph broke one of its structural guarantees.

    This signals a defect in the core, never a user mistake.
    """
