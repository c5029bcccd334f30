"""Input models for graph descriptions."""

from foldgraph.models.description import EdgeDescription, GraphDescription, NodeDescription

__all__ = [
    "EdgeDescription",
    "GraphDescription",
    "NodeDescription",
]
