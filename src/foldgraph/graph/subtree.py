"""Subtree closure for folding groups.

Pure functions over a GraphModel: no hidden state, safe to call repeatedly.
Termination is guaranteed because GraphModel rejects membership cycles.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from foldgraph.graph.model import GraphModel


class SubtreeResolver:
    """Computes the elements a fold of a group must hide."""

    def __init__(self, model: GraphModel) -> None:
        self._model = model

    def descendants(self, group_id: str) -> frozenset[str]:
        """All transitive children of a group, excluding the group itself.

        Args:
            group_id: Node to start from. A leaf yields an empty set.

        Raises:
            UnknownNodeError: If the node doesn't exist.
        """
        found: set[str] = set()
        queue = deque(self._model.children(group_id))
        while queue:
            current = queue.popleft()
            if current in found:
                continue
            found.add(current)
            queue.extend(self._model.children(current))
        return frozenset(found)

    def affected_edges(self, node_set: Iterable[str]) -> frozenset[str]:
        """All edges with the source or the target in ``node_set``.

        Boundary-crossing edges (one endpoint outside the set) are included;
        they are hidden along with the subtree, not rerouted.

        Raises:
            UnknownNodeError: If any node doesn't exist.
        """
        edges: set[str] = set()
        for node_id in node_set:
            edges |= self._model.incident_edges(node_id)
        return frozenset(edges)
