"""Fold registry: what is currently hidden and why.

FoldRegistry owns one FoldRecord per folded group. The active view is never
stored; it is always derived as "everything in the model minus the union of
all removed sets", so it cannot drift from the records.

Records of nested groups are independent. Folding an ancestor keeps a
descendant's record intact, and unfolding the ancestor leaves the descendant
folded because its record still hides its own subtree.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from foldgraph.graph.errors import AlreadyFoldedError, NotFoldedError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from foldgraph.graph.model import GraphModel


@dataclass(frozen=True)
class FoldRecord:
    """Elements removed from the active view by folding one group.

    Attributes:
        group_id: The folded group.
        removed_nodes: The group's full descendant subtree.
        removed_edges: Edges with at least one endpoint in ``removed_nodes``.
    """

    group_id: str
    removed_nodes: frozenset[str]
    removed_edges: frozenset[str]


class FoldRegistry:
    """Single source of truth for fold state within one graph session.

    Created once per session and passed to the FoldController; only the
    controller should call fold() and unfold().
    """

    def __init__(self) -> None:
        # Insertion order is fold order.
        self._records: dict[str, FoldRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[FoldRecord]:
        return iter(list(self._records.values()))

    def __contains__(self, group_id: object) -> bool:
        return group_id in self._records

    def __repr__(self) -> str:
        return f"FoldRegistry(folded={sorted(self._records)})"

    def is_folded(self, group_id: str) -> bool:
        return group_id in self._records

    def record(self, group_id: str) -> FoldRecord | None:
        return self._records.get(group_id)

    def folded_groups(self) -> list[str]:
        """Folded group ids in fold order."""
        return list(self._records)

    def fold(
        self,
        group_id: str,
        removed_nodes: Iterable[str],
        removed_edges: Iterable[str],
    ) -> FoldRecord:
        """Record a fold.

        Args:
            group_id: Group being folded.
            removed_nodes: Node ids the fold hides.
            removed_edges: Edge ids the fold hides.

        Returns:
            The new record.

        Raises:
            AlreadyFoldedError: If the group already has a record. Double
                folding is a caller error, not a silent no-op.
        """
        if group_id in self._records:
            raise AlreadyFoldedError(group_id)
        record = FoldRecord(
            group_id=group_id,
            removed_nodes=frozenset(removed_nodes),
            removed_edges=frozenset(removed_edges),
        )
        self._records[group_id] = record
        return record

    def unfold(self, group_id: str) -> FoldRecord:
        """Remove and return the record for a group.

        Raises:
            NotFoldedError: If the group is not folded.
        """
        try:
            return self._records.pop(group_id)
        except KeyError:
            raise NotFoldedError(group_id) from None

    def clear(self) -> list[FoldRecord]:
        """Drop every record, returning them in fold order."""
        records = list(self._records.values())
        self._records.clear()
        return records

    # -------------------------------------------------------------------------
    # Derived view
    # -------------------------------------------------------------------------

    def hidden_node_ids(self, *, exclude: str | None = None) -> frozenset[str]:
        """Union of removed nodes across records, optionally skipping one group."""
        hidden: set[str] = set()
        for group_id, record in self._records.items():
            if group_id != exclude:
                hidden |= record.removed_nodes
        return frozenset(hidden)

    def hidden_edge_ids(self, *, exclude: str | None = None) -> frozenset[str]:
        """Union of removed edges across records, optionally skipping one group."""
        hidden: set[str] = set()
        for group_id, record in self._records.items():
            if group_id != exclude:
                hidden |= record.removed_edges
        return frozenset(hidden)

    def active_node_ids(self, model: GraphModel) -> frozenset[str]:
        """Node ids of ``model`` not hidden by any fold."""
        return model.node_ids() - self.hidden_node_ids()

    def active_edge_ids(self, model: GraphModel) -> frozenset[str]:
        """Edge ids of ``model`` not hidden by any fold."""
        return model.edge_ids() - self.hidden_edge_ids()
