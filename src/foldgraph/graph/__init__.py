"""Graph package - hierarchical graph model and fold state.

GraphModel holds the immutable graph, SubtreeResolver computes what a fold
hides, FoldRegistry records active folds, and FoldController is the public
state machine tying them together.
"""

from foldgraph.graph.controller import (
    ActiveView,
    FoldController,
    Hide,
    NodeKind,
    Restore,
    ViewDelta,
)
from foldgraph.graph.errors import (
    AlreadyFoldedError,
    DuplicateIdError,
    EdgeEndpointError,
    FoldGraphError,
    FoldStateError,
    GraphFileError,
    InvalidGraphError,
    NotFoldedError,
    ParentCycleError,
    ParentNotFoundError,
    UnknownNodeError,
)
from foldgraph.graph.loader import load_graph, read_description
from foldgraph.graph.model import Edge, GraphModel, Node
from foldgraph.graph.registry import FoldRecord, FoldRegistry
from foldgraph.graph.subtree import SubtreeResolver

__all__ = [
    "ActiveView",
    "AlreadyFoldedError",
    "DuplicateIdError",
    "Edge",
    "EdgeEndpointError",
    "FoldController",
    "FoldGraphError",
    "FoldRecord",
    "FoldRegistry",
    "FoldStateError",
    "GraphFileError",
    "GraphModel",
    "Hide",
    "InvalidGraphError",
    "Node",
    "NodeKind",
    "NotFoldedError",
    "ParentCycleError",
    "ParentNotFoundError",
    "Restore",
    "SubtreeResolver",
    "UnknownNodeError",
    "ViewDelta",
    "load_graph",
    "read_description",
]
