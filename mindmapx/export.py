"""Structured (JSON) export and import of MindMapX graphs."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from mindmapx.errors import DocumentError
from mindmapx.graph import Edge, GraphSnapshot, Node, Point, check_snapshot
from mindmapx.settings import is_color

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = "1.0"


def node_to_dict(node: Node) -> Dict[str, Any]:
    return {
        "id": node.id,
        "label": node.label,
        "position": {"x": node.position.x, "y": node.position.y},
        "isRoot": node.is_root,
        "color": node.color,
    }


def edge_to_dict(edge: Edge) -> Dict[str, Any]:
    return {"id": edge.id, "sourceId": edge.source_id, "targetId": edge.target_id}


def to_document(snapshot: GraphSnapshot, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Build the export document. Only metadata.timestamp varies between calls."""
    now = now or datetime.now(timezone.utc)
    return {
        "nodes": [node_to_dict(n) for n in snapshot.nodes],
        "edges": [edge_to_dict(e) for e in snapshot.edges],
        "metadata": {
            "timestamp": now.isoformat(),
            "nodeCount": len(snapshot.nodes),
            "edgeCount": len(snapshot.edges),
            "version": DOCUMENT_VERSION,
        },
    }


def dumps_document(snapshot: GraphSnapshot, now: Optional[datetime] = None) -> str:
    return json.dumps(to_document(snapshot, now), indent=2)


def parse_document(data: Union[str, Dict[str, Any]]) -> GraphSnapshot:
    """Rebuild a snapshot from an export document.

    Raises DocumentError for malformed input, and the graph errors from
    check_snapshot when the document does not describe a single rooted tree.
    """
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as exc:
            raise DocumentError(f"invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise DocumentError("document must be an object")

    try:
        nodes = tuple(_parse_node(raw) for raw in data["nodes"])
        edges = tuple(
            Edge(id=str(raw["id"]), source_id=str(raw["sourceId"]),
                 target_id=str(raw["targetId"]))
            for raw in data["edges"]
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise DocumentError(f"malformed document: {exc!r}") from exc

    snapshot = GraphSnapshot(nodes=nodes, edges=edges)
    check_snapshot(snapshot)
    return snapshot


def _parse_node(raw: Dict[str, Any]) -> Node:
    label = raw["label"]
    if not isinstance(label, str):
        raise DocumentError(f"node label must be a string, got {label!r}")
    is_root = raw.get("isRoot", False)
    if not isinstance(is_root, bool):
        raise DocumentError(f"isRoot must be true or false, got {is_root!r}")
    color = raw.get("color")
    if color is not None and not is_color(color):
        raise DocumentError(f"unsupported node color {color!r}")
    return Node(
        id=str(raw["id"]),
        label=label,
        position=Point(float(raw["position"]["x"]), float(raw["position"]["y"])),
        is_root=is_root,
        color=color,
    )


def write_document(snapshot: GraphSnapshot, filepath: Union[str, Path],
                   now: Optional[datetime] = None) -> Path:
    """Export the snapshot as a JSON file."""
    path = Path(filepath)
    with open(path, "w", encoding="utf-8") as f:
        f.write(dumps_document(snapshot, now))
    logger.info("Exported %d nodes to %s", len(snapshot.nodes), path)
    return path


def read_document(filepath: Union[str, Path]) -> GraphSnapshot:
    with open(filepath, "r", encoding="utf-8") as f:
        return parse_document(f.read())


def default_document_name(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"mindmap-{int(now.timestamp() * 1000)}.json"
