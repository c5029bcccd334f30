"""Immutable graph model with group membership.

GraphModel is the single source of truth for nodes, edges and parent/child
group membership. It validates its input once at construction and is
read-only afterwards; fold state lives elsewhere (FoldRegistry) and only
changes which elements are visible, never the graph itself.

Validation enforces referential integrity similar to foreign keys:
- Node and edge ids are unique
- A node's parent id names an existing node
- The parent relation is a forest (no node is its own ancestor)
- Edges reference existing endpoints
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from foldgraph.graph.errors import (
    DuplicateIdError,
    EdgeEndpointError,
    ParentCycleError,
    ParentNotFoundError,
    UnknownNodeError,
)
from foldgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from foldgraph.models import GraphDescription

log = get_logger(__name__)


@dataclass(frozen=True)
class Node:
    """A graph node. ``parent_id`` denotes membership in a group."""

    id: str
    label: str | None = None
    parent_id: str | None = None

    @property
    def display_label(self) -> str:
        """Label to render, falling back to the id."""
        return self.label if self.label is not None else self.id


@dataclass(frozen=True)
class Edge:
    """A directed edge between two nodes."""

    id: str
    source: str
    target: str


class GraphModel:
    """Validated, read-only graph of nodes, edges and group membership.

    Adjacency indexes (children, incident edges) are built once at
    construction so all queries are dictionary lookups.
    """

    def __init__(self, nodes: Iterable[Node], edges: Iterable[Edge] = ()) -> None:
        """Build and validate the graph.

        Args:
            nodes: All nodes of the graph.
            edges: All edges of the graph.

        Raises:
            InvalidGraphError: On duplicate ids, unknown parents, membership
                cycles, or edges with unknown endpoints.
        """
        node_map: dict[str, Node] = {}
        for node in nodes:
            if node.id in node_map:
                raise DuplicateIdError("node", node.id)
            node_map[node.id] = node

        children: dict[str, set[str]] = {node_id: set() for node_id in node_map}
        for node in node_map.values():
            if node.parent_id is None:
                continue
            if node.parent_id not in node_map:
                raise ParentNotFoundError(node.id, node.parent_id)
            children[node.parent_id].add(node.id)

        _check_forest(node_map)

        edge_map: dict[str, Edge] = {}
        incident: dict[str, set[str]] = {node_id: set() for node_id in node_map}
        for edge in edges:
            if edge.id in edge_map:
                raise DuplicateIdError("edge", edge.id)
            source_ok = edge.source in node_map
            target_ok = edge.target in node_map
            if not (source_ok and target_ok):
                if not source_ok and not target_ok:
                    missing = "both"
                elif not source_ok:
                    missing = "source"
                else:
                    missing = "target"
                raise EdgeEndpointError(edge.id, edge.source, edge.target, missing)
            edge_map[edge.id] = edge
            incident[edge.source].add(edge.id)
            incident[edge.target].add(edge.id)

        self._nodes: Mapping[str, Node] = MappingProxyType(node_map)
        self._edges: Mapping[str, Edge] = MappingProxyType(edge_map)
        self._children = {k: frozenset(v) for k, v in children.items()}
        self._incident = {k: frozenset(v) for k, v in incident.items()}

        log.debug(
            "graph_model_built",
            nodes=len(self._nodes),
            edges=len(self._edges),
            groups=len(self.groups()),
        )

    @classmethod
    def from_description(cls, description: GraphDescription) -> GraphModel:
        """Build a GraphModel from a validated load-time description.

        Edges generated from node ``dependencies`` are added after the
        explicit edges and share their id namespace.
        """
        nodes = [
            Node(id=n.id, label=n.label, parent_id=n.parent_id) for n in description.nodes
        ]
        edges = [Edge(id=e.id, source=e.source, target=e.target) for e in description.all_edges()]
        return cls(nodes, edges)

    def __repr__(self) -> str:
        return f"GraphModel(nodes={len(self._nodes)}, edges={len(self._edges)})"

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def has_edge(self, edge_id: str) -> bool:
        return edge_id in self._edges

    def node(self, node_id: str) -> Node:
        """Get a node by id.

        Raises:
            UnknownNodeError: If the node doesn't exist.
        """
        self.require_node(node_id)
        return self._nodes[node_id]

    def edge(self, edge_id: str) -> Edge:
        """Get an edge by id.

        Raises:
            KeyError: If the edge doesn't exist.
        """
        return self._edges[edge_id]

    def require_node(self, node_id: str) -> None:
        """Raise UnknownNodeError unless the node exists."""
        if node_id not in self._nodes:
            raise UnknownNodeError(node_id, available=list(self._nodes))

    @property
    def nodes(self) -> Mapping[str, Node]:
        """Read-only view of all nodes keyed by id."""
        return self._nodes

    @property
    def edges(self) -> Mapping[str, Edge]:
        """Read-only view of all edges keyed by id."""
        return self._edges

    def node_ids(self) -> frozenset[str]:
        return frozenset(self._nodes)

    def edge_ids(self) -> frozenset[str]:
        return frozenset(self._edges)

    # -------------------------------------------------------------------------
    # Group membership
    # -------------------------------------------------------------------------

    def children(self, node_id: str) -> frozenset[str]:
        """Direct children of a node (nodes whose parent is ``node_id``)."""
        self.require_node(node_id)
        return self._children[node_id]

    def is_group(self, node_id: str) -> bool:
        """True iff the node has at least one child."""
        return bool(self.children(node_id))

    def parent(self, node_id: str) -> str | None:
        return self.node(node_id).parent_id

    def ancestors(self, node_id: str) -> list[str]:
        """Ancestors of a node, nearest first."""
        result: list[str] = []
        current = self.node(node_id).parent_id
        while current is not None:
            result.append(current)
            current = self._nodes[current].parent_id
        return result

    def roots(self) -> frozenset[str]:
        """Nodes that belong to no group."""
        return frozenset(n.id for n in self._nodes.values() if n.parent_id is None)

    def groups(self) -> frozenset[str]:
        """All nodes that have children."""
        return frozenset(node_id for node_id, kids in self._children.items() if kids)

    def incident_edges(self, node_id: str) -> frozenset[str]:
        """Edges where the node is the source or the target."""
        self.require_node(node_id)
        return self._incident[node_id]


def _check_forest(nodes: Mapping[str, Node]) -> None:
    """Raise ParentCycleError if following parent links ever revisits a node.

    Walks up from every node, memoizing nodes already proven to reach a root
    so the total work stays linear in the number of nodes.
    """
    reaches_root: set[str] = set()
    for start in nodes:
        path: list[str] = []
        on_path: set[str] = set()
        current: str | None = start
        while current is not None and current not in reaches_root:
            if current in on_path:
                cycle = path[path.index(current) :] + [current]
                raise ParentCycleError(cycle)
            path.append(current)
            on_path.add(current)
            current = nodes[current].parent_id
        reaches_root.update(path)
