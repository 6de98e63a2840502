"""In-memory idea tree for MindMapX."""

import logging
import math
import random
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from mindmapx.errors import GraphReferenceError, InvariantViolation, ReferenceKind
from mindmapx.settings import AppSettings, is_color

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Point:
    """A 2-D point or vector."""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __truediv__(self, factor: float) -> "Point":
        return Point(self.x / factor, self.y / factor)

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass
class Node:
    """Represents an idea on the canvas."""
    id: str
    label: str
    position: Point = field(default_factory=Point)
    is_root: bool = False
    color: Optional[str] = None


@dataclass(frozen=True)
class Edge:
    """Parent to child link. Immutable once created."""
    id: str
    source_id: str
    target_id: str


@dataclass(frozen=True)
class GraphSnapshot:
    """Read-only copy of the graph for rendering and export."""
    nodes: tuple = ()
    edges: tuple = ()

    @property
    def root(self) -> Optional[Node]:
        for node in self.nodes:
            if node.is_root:
                return node
        return None

    def node_map(self) -> Dict[str, Node]:
        return {n.id: n for n in self.nodes}


class GraphStore:
    """Owns every Node and Edge of a session.

    Nodes are only ever created as children of an existing node and are
    never deleted or re-parented, so the graph is always a rooted tree.
    """

    def __init__(self, settings: Optional[AppSettings] = None,
                 rng: Optional[random.Random] = None):
        self.settings = settings or AppSettings()
        self._rng = rng or random.Random()
        self._nodes: Dict[str, Node] = {}
        self._edges: List[Edge] = []
        self._parents: Dict[str, str] = {}
        self._next_id = 1
        self.reset()

    # ==================== Queries ====================

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    @property
    def root(self) -> Node:
        return self._nodes[self._root_id]

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges)

    def get_node(self, node_id: str) -> Node:
        """Get a node by ID."""
        node = self._nodes.get(node_id)
        if node is None:
            raise GraphReferenceError(ReferenceKind.NODE_NOT_FOUND, node_id)
        return node

    def parent_of(self, node_id: str) -> Optional[str]:
        self.get_node(node_id)
        return self._parents.get(node_id)

    def children_of(self, node_id: str) -> List[str]:
        self.get_node(node_id)
        return [e.target_id for e in self._edges if e.source_id == node_id]

    def depth(self) -> int:
        """Number of levels in the tree, counting the root as level 1."""
        deepest = 1
        for node_id in self._nodes:
            level = 1
            current = node_id
            while current in self._parents:
                current = self._parents[current]
                level += 1
            deepest = max(deepest, level)
        return deepest

    def snapshot(self) -> GraphSnapshot:
        return GraphSnapshot(
            nodes=tuple(replace(n) for n in self._nodes.values()),
            edges=tuple(self._edges),
        )

    # ==================== Mutations ====================

    def reset(self):
        """Discard everything and recreate the single root."""
        self._nodes.clear()
        self._edges.clear()
        self._parents.clear()
        self._next_id = 1

        root = Node(
            id=self._allocate_id(),
            label=self.settings.root_label,
            position=Point(*self.settings.root_position),
            is_root=True,
        )
        self._nodes[root.id] = root
        self._root_id = root.id
        logger.debug("Graph reset, root %s", root.id)

    def add_node(self, parent_id: str, label: str, color: Optional[str] = None,
                 zoom: float = 1.0, compact: bool = False) -> str:
        """Create a child of parent_id placed on a ring around it."""
        parent = self._nodes.get(parent_id)
        if parent is None:
            raise GraphReferenceError(ReferenceKind.PARENT_NOT_FOUND, parent_id)

        angle = self._rng.random() * math.pi * 2
        base = self.settings.compact_base_distance if compact else self.settings.base_distance
        distance = base * zoom
        position = Point(
            parent.position.x + math.cos(angle) * distance,
            parent.position.y + math.sin(angle) * distance,
        )

        node_id = self._allocate_id(parent_id)
        node = Node(id=node_id, label=label, position=position, color=color)
        edge = Edge(id=_edge_id(parent_id, node_id), source_id=parent_id, target_id=node_id)
        if self.settings.debug_checks:
            check_snapshot(GraphSnapshot(
                tuple(self._nodes.values()) + (node,), tuple(self._edges) + (edge,)
            ))

        self._nodes[node_id] = node
        self._edges.append(edge)
        self._parents[node_id] = parent_id
        logger.debug("Added node %s under %s", node_id, parent_id)
        return node_id

    def edit_node(self, node_id: str, label: Optional[str] = None,
                  color: Optional[str] = None, reset_color: bool = False):
        """Overwrite label and/or color. Position is untouched.

        reset_color drops the explicit color so the node follows its role
        color again.
        """
        node = self.get_node(node_id)
        if label is not None:
            node.label = label
        if reset_color:
            node.color = None
        elif color is not None:
            node.color = color

    def move_node(self, node_id: str, position: Point):
        """Overwrite position. The canvas is unbounded."""
        node = self.get_node(node_id)
        node.position = position

    def load(self, snapshot: GraphSnapshot):
        """Replace the whole graph with a validated snapshot."""
        check_snapshot(snapshot)

        self._nodes = {n.id: replace(n) for n in snapshot.nodes}
        self._edges = list(snapshot.edges)
        self._parents = {e.target_id: e.source_id for e in self._edges}
        self._root_id = snapshot.root.id
        numeric = [int(n.id) for n in snapshot.nodes if n.id.isdecimal() and n.id.isascii()]
        self._next_id = max(numeric, default=0) + 1
        logger.info("Loaded graph with %d nodes", len(self._nodes))

    def check_invariants(self):
        check_snapshot(GraphSnapshot(tuple(self._nodes.values()), tuple(self._edges)))

    def _allocate_id(self, parent_id: Optional[str] = None) -> str:
        """Next counter value not already taken by a node or by the new edge."""
        edge_ids = {e.id for e in self._edges}
        while True:
            node_id = str(self._next_id)
            self._next_id += 1
            if node_id in self._nodes:
                continue
            if parent_id is not None and _edge_id(parent_id, node_id) in edge_ids:
                continue
            return node_id


def _edge_id(source_id: str, target_id: str) -> str:
    return f"{source_id}-{target_id}"


def resolve_color(node: Node, role_colors: Dict[str, str]) -> str:
    """Explicit node color, or the default for the node's role."""
    if is_color(node.color):
        return node.color
    return role_colors["root"] if node.is_root else role_colors["child"]


def check_snapshot(snapshot: GraphSnapshot):
    """Raise if the snapshot is not a single rooted tree."""
    ids = [n.id for n in snapshot.nodes]
    if len(set(ids)) != len(ids):
        raise InvariantViolation("duplicate node id")

    roots = [n for n in snapshot.nodes if n.is_root]
    if len(roots) != 1:
        raise InvariantViolation(f"expected exactly one root, found {len(roots)}")

    known = set(ids)
    edge_ids = set()
    parents: Dict[str, str] = {}
    for edge in snapshot.edges:
        for endpoint in (edge.source_id, edge.target_id):
            if endpoint not in known:
                raise GraphReferenceError(ReferenceKind.EDGE_ENDPOINT_MISSING, endpoint)
        if edge.id in edge_ids:
            raise InvariantViolation(f"duplicate edge id {edge.id!r}")
        edge_ids.add(edge.id)
        if edge.target_id in parents:
            raise InvariantViolation(f"node {edge.target_id!r} has two parents")
        parents[edge.target_id] = edge.source_id

    root_id = roots[0].id
    if root_id in parents:
        raise InvariantViolation("root node has a parent")

    for node_id in ids:
        if node_id == root_id:
            continue
        if node_id not in parents:
            raise InvariantViolation(f"node {node_id!r} is detached from the root")
        seen = {node_id}
        current = node_id
        while current != root_id:
            current = parents.get(current)
            if current is None or current in seen:
                raise InvariantViolation(f"node {node_id!r} is not reachable from the root")
            seen.add(current)
