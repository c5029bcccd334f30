"""Graph and fold-state error types.

Load-time problems raise InvalidGraphError subclasses, similar to constraint
violations in a database: the graph is unusable until the input is fixed.
Runtime problems (unknown ids, registry misuse) are recoverable or signal a
caller defect.

Each error can format itself via describe() for display in the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from difflib import get_close_matches


class FoldGraphError(Exception):
    """Base class for all foldgraph errors."""

    def describe(self) -> str:
        """Format the error as a human-readable explanation.

        Returns:
            Multi-line message explaining what's wrong and how to fix it.
        """
        return str(self)


class InvalidGraphError(FoldGraphError):
    """Base class for malformed load-time graph descriptions."""


@dataclass
class DuplicateIdError(InvalidGraphError):
    """Raised when two nodes or two edges share an id.

    Attributes:
        kind: "node" or "edge".
        element_id: The id that appears more than once.
    """

    kind: str
    element_id: str

    def __post_init__(self) -> None:
        super().__init__(f"Duplicate {self.kind} id '{self.element_id}'")

    def describe(self) -> str:
        return (
            f"## Invalid Graph: Duplicate {self.kind.title()} Id\n\n"
            f"**Id**: `{self.element_id}`\n\n"
            f"**Problem**: {self.kind.title()} ids must be unique across the graph.\n"
        )


@dataclass
class EdgeEndpointError(InvalidGraphError):
    """Raised when an edge references non-existent endpoints.

    Attributes:
        edge_id: Id of the offending edge.
        source: Source node id.
        target: Target node id.
        missing: Which endpoint is missing ("source", "target", or "both").
    """

    edge_id: str
    source: str
    target: str
    missing: str  # "source", "target", or "both"

    def __post_init__(self) -> None:
        if self.missing == "both":
            msg = f"Edge '{self.edge_id}' endpoints not found: '{self.source}' and '{self.target}'"
        elif self.missing == "source":
            msg = f"Edge '{self.edge_id}' source not found: '{self.source}'"
        else:
            msg = f"Edge '{self.edge_id}' target not found: '{self.target}'"
        super().__init__(msg)

    def describe(self) -> str:
        lines = [
            "## Invalid Graph: Edge Endpoint Not Found",
            "",
            f"**Edge**: `{self.edge_id}` (`{self.source}` -> `{self.target}`)",
            "",
        ]
        if self.missing in ("source", "both"):
            lines.append(f"**Problem**: Source node `{self.source}` does not exist.")
        if self.missing in ("target", "both"):
            lines.append(f"**Problem**: Target node `{self.target}` does not exist.")
        lines.extend(["", "**Solution**: Declare both endpoint nodes in the graph."])
        return "\n".join(lines)


@dataclass
class ParentNotFoundError(InvalidGraphError):
    """Raised when a node's parent id names no node in the graph.

    Attributes:
        node_id: The child node.
        parent_id: The missing parent.
    """

    node_id: str
    parent_id: str

    def __post_init__(self) -> None:
        super().__init__(f"Node '{self.node_id}' has unknown parent '{self.parent_id}'")

    def describe(self) -> str:
        return "\n".join(
            [
                "## Invalid Graph: Parent Not Found",
                "",
                f"**Node**: `{self.node_id}`",
                f"**Missing parent**: `{self.parent_id}`",
                "",
                "**Solution**: Declare the parent node, or fix the node's `parentId`.",
            ]
        )


@dataclass
class ParentCycleError(InvalidGraphError):
    """Raised when group membership forms a cycle.

    Attributes:
        cycle: Node ids along the cycle, first id repeated at the end.
    """

    cycle: list[str]

    def __post_init__(self) -> None:
        super().__init__(f"Group membership cycle: {' -> '.join(self.cycle)}")

    def describe(self) -> str:
        path = " -> ".join(f"`{n}`" for n in self.cycle)
        return (
            "## Invalid Graph: Group Membership Cycle\n\n"
            f"**Cycle**: {path}\n\n"
            "**Problem**: A node cannot be its own ancestor. "
            "Fix the parentId of one of these nodes.\n"
        )


@dataclass
class UnknownNodeError(FoldGraphError):
    """Raised when an operation references a node id absent from the graph.

    Attributes:
        node_id: The id that was referenced but doesn't exist.
        available: Valid ids, used to suggest likely typos.
    """

    node_id: str
    available: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__init__(f"Node '{self.node_id}' not found")

    def suggestions(self) -> list[str]:
        """Find similar ids that might be typos."""
        return get_close_matches(self.node_id, self.available, n=3, cutoff=0.6)

    def describe(self) -> str:
        lines = [f"Node `{self.node_id}` does not exist in the graph."]
        suggestions = self.suggestions()
        if suggestions:
            lines.append("Did you mean: " + ", ".join(f"`{s}`" for s in suggestions) + "?")
        return "\n".join(lines)


class FoldStateError(FoldGraphError):
    """Fold registry invariant violation by a caller bypassing the controller."""


@dataclass
class AlreadyFoldedError(FoldStateError):
    """Raised when folding a group that already has a fold record."""

    group_id: str

    def __post_init__(self) -> None:
        super().__init__(f"Group '{self.group_id}' is already folded")


@dataclass
class NotFoldedError(FoldStateError):
    """Raised when unfolding a group that has no fold record."""

    group_id: str

    def __post_init__(self) -> None:
        super().__init__(f"Group '{self.group_id}' is not folded")


@dataclass
class GraphFileError(FoldGraphError):
    """Raised when a graph description file can't be read or validated.

    Attributes:
        path: The file that failed.
        reason: What went wrong.
    """

    path: str
    reason: str

    def __post_init__(self) -> None:
        super().__init__(f"Failed to load graph from {self.path}: {self.reason}")
