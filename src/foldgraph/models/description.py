"""Pydantic models for the load-time graph description.

A graph description is the flat, renderer-agnostic input handed to
GraphModel: a list of nodes with optional group membership and a list of
directed edges. These models only check shape; referential integrity
(dangling endpoints, membership cycles) is GraphModel's job.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

NodeIdStr = Annotated[str, StringConstraints(min_length=1)]


class NodeDescription(BaseModel):
    """A node, optionally belonging to a group via ``parentId``."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    id: NodeIdStr = Field(description="Unique node id")
    label: str | None = Field(
        default=None, description="Display label; renderers fall back to the id"
    )
    parent_id: NodeIdStr | None = Field(
        default=None, alias="parentId", description="Id of the group containing this node"
    )
    dependencies: list[NodeIdStr] = Field(
        default_factory=list,
        description="Shorthand for edges from this node; each yields an edge '{id}-{dep}'",
    )


class EdgeDescription(BaseModel):
    """A directed edge between two nodes."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: NodeIdStr = Field(description="Globally unique edge id")
    source: NodeIdStr
    target: NodeIdStr


class GraphDescription(BaseModel):
    """Complete load-time input: nodes plus explicit edges."""

    model_config = ConfigDict(extra="forbid")

    nodes: list[NodeDescription] = Field(default_factory=list)
    edges: list[EdgeDescription] = Field(default_factory=list)

    def all_edges(self) -> list[EdgeDescription]:
        """Explicit edges followed by edges generated from ``dependencies``."""
        generated = [
            EdgeDescription(id=f"{node.id}-{dep}", source=node.id, target=dep)
            for node in self.nodes
            for dep in node.dependencies
        ]
        return [*self.edges, *generated]
