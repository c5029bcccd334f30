"""Fold controller: the public fold/unfold state machine.

Each group is either Expanded (no fold record) or Folded (exactly one
record covering its whole subtree). ``toggle_fold`` moves a group between
the two states and returns the view delta the renderer must apply:

    Expanded --toggle--> Folded     emits Hide
    Folded   --toggle--> Expanded   emits Restore
    leaf     --toggle--> leaf       no-op, returns None

All registry mutation goes through ``toggle_fold``, ``on_node_activated``
and ``expand_all``, each under the controller lock.
Resolution happens before mutation, so a failed call leaves no partial
state behind.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from foldgraph.graph.registry import FoldRegistry
from foldgraph.graph.subtree import SubtreeResolver
from foldgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from foldgraph.graph.model import GraphModel

log = get_logger(__name__)


class NodeKind(str, Enum):
    """How a node behaves under activation."""

    LEAF = "leaf"
    GROUP = "group"
    FOLDED_GROUP = "folded_group"


@dataclass(frozen=True)
class ViewDelta:
    """Change to the active view produced by one toggle.

    Only elements whose visibility actually changes are listed: elements
    already hidden by another fold are omitted from a Hide, and elements
    still hidden by another fold are omitted from a Restore.
    """

    group_id: str
    node_ids: frozenset[str]
    edge_ids: frozenset[str]


@dataclass(frozen=True)
class Hide(ViewDelta):
    """Remove these nodes and edges from the rendered view."""


@dataclass(frozen=True)
class Restore(ViewDelta):
    """Re-add these nodes and edges to the rendered view."""


@dataclass(frozen=True)
class ActiveView:
    """Snapshot of what is currently visible."""

    node_ids: frozenset[str]
    edge_ids: frozenset[str]
    folded_groups: tuple[str, ...]


class FoldController:
    """Coordinates GraphModel, SubtreeResolver and FoldRegistry.

    Args:
        model: The session's graph.
        registry: Long-lived fold state for this session. A fresh registry is
            created if omitted.
    """

    def __init__(self, model: GraphModel, registry: FoldRegistry | None = None) -> None:
        self._model = model
        self._registry = registry if registry is not None else FoldRegistry()
        self._resolver = SubtreeResolver(model)
        self._lock = threading.Lock()

    @property
    def model(self) -> GraphModel:
        return self._model

    @property
    def registry(self) -> FoldRegistry:
        return self._registry

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def node_kind(self, node_id: str) -> NodeKind:
        """Classify a node from the model and the current fold state.

        Raises:
            UnknownNodeError: If the node doesn't exist.
        """
        is_group = self._model.is_group(node_id)
        if self._registry.is_folded(node_id):
            return NodeKind.FOLDED_GROUP
        return NodeKind.GROUP if is_group else NodeKind.LEAF

    def is_visible(self, node_id: str) -> bool:
        self._model.require_node(node_id)
        return node_id not in self._registry.hidden_node_ids()

    def active_node_ids(self) -> frozenset[str]:
        return self._registry.active_node_ids(self._model)

    def active_edge_ids(self) -> frozenset[str]:
        return self._registry.active_edge_ids(self._model)

    def active_view(self) -> ActiveView:
        return ActiveView(
            node_ids=self.active_node_ids(),
            edge_ids=self.active_edge_ids(),
            folded_groups=tuple(self._registry.folded_groups()),
        )

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def toggle_fold(self, group_id: str) -> ViewDelta | None:
        """Fold an expanded group or unfold a folded one.

        Args:
            group_id: Node to toggle.

        Returns:
            Hide or Restore delta, or None when the toggle is a no-op
            (the node is a leaf, or it is hidden inside a folded ancestor).

        Raises:
            UnknownNodeError: If the node doesn't exist. State is unchanged.
        """
        with self._lock:
            return self._toggle(group_id)

    def on_node_activated(self, node_id: str) -> ViewDelta | None:
        """Handle a user tap/click on a node.

        Groups and folded groups toggle; any other node is ignored. The
        classification and the toggle happen under one lock acquisition.
        """
        with self._lock:
            if self.node_kind(node_id) is NodeKind.LEAF:
                log.debug("activation_ignored", node_id=node_id)
                return None
            return self._toggle(node_id)

    def expand_all(self) -> list[Restore]:
        """Unfold every folded group, most recent fold first.

        Returns:
            One Restore delta per unfolded group, in the order applied.
        """
        with self._lock:
            deltas: list[Restore] = []
            for group_id in reversed(self._registry.folded_groups()):
                deltas.append(self._unfold(group_id))
            return deltas

    def _toggle(self, group_id: str) -> ViewDelta | None:
        # Caller holds self._lock
        self._model.require_node(group_id)

        if group_id in self._registry.hidden_node_ids():
            log.debug("toggle_ignored", node_id=group_id, reason="hidden")
            return None

        if self._registry.is_folded(group_id):
            return self._unfold(group_id)

        if not self._model.is_group(group_id):
            log.debug("toggle_ignored", node_id=group_id, reason="leaf")
            return None

        return self._fold(group_id)

    def _fold(self, group_id: str) -> Hide:
        removed_nodes = self._resolver.descendants(group_id)
        removed_edges = self._resolver.affected_edges(removed_nodes)

        already_nodes = self._registry.hidden_node_ids()
        already_edges = self._registry.hidden_edge_ids()
        self._registry.fold(group_id, removed_nodes, removed_edges)

        delta = Hide(
            group_id=group_id,
            node_ids=removed_nodes - already_nodes,
            edge_ids=removed_edges - already_edges,
        )
        log.info(
            "group_folded",
            group_id=group_id,
            hidden_nodes=len(delta.node_ids),
            hidden_edges=len(delta.edge_ids),
        )
        return delta

    def _unfold(self, group_id: str) -> Restore:
        record = self._registry.unfold(group_id)

        delta = Restore(
            group_id=group_id,
            node_ids=record.removed_nodes - self._registry.hidden_node_ids(),
            edge_ids=record.removed_edges - self._registry.hidden_edge_ids(),
        )
        log.info(
            "group_unfolded",
            group_id=group_id,
            restored_nodes=len(delta.node_ids),
            restored_edges=len(delta.edge_ids),
        )
        return delta
