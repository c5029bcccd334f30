"""Tests for GraphModel construction and queries."""

from __future__ import annotations

import pytest

from foldgraph.graph import (
    DuplicateIdError,
    Edge,
    EdgeEndpointError,
    GraphModel,
    InvalidGraphError,
    Node,
    ParentCycleError,
    ParentNotFoundError,
    UnknownNodeError,
)
from foldgraph.models import GraphDescription


class TestGraphModelQueries:
    """Read-only queries on a valid graph."""

    def test_children_and_is_group(self, simple_model: GraphModel) -> None:
        """D contains C; everything else is a leaf."""
        assert simple_model.children("D") == {"C"}
        assert simple_model.is_group("D")
        assert not simple_model.is_group("A")
        assert simple_model.children("C") == frozenset()

    def test_incident_edges(self, simple_model: GraphModel) -> None:
        """Incident edges cover both directions."""
        assert simple_model.incident_edges("B") == {"A->B", "B->C"}
        assert simple_model.incident_edges("D") == frozenset()

    def test_ancestors_nearest_first(self, nested_model: GraphModel) -> None:
        assert nested_model.ancestors("D") == ["group1", "group2"]
        assert nested_model.ancestors("A") == []

    def test_roots_and_groups(self, nested_model: GraphModel) -> None:
        assert nested_model.roots() == {"group2", "A", "B"}
        assert nested_model.groups() == {"group1", "group2"}

    def test_display_label_falls_back_to_id(self, nested_model: GraphModel) -> None:
        assert nested_model.node("group1").display_label == "Group1"
        assert nested_model.node("group2").display_label == "group2"

    def test_unknown_node_raises(self, simple_model: GraphModel) -> None:
        with pytest.raises(UnknownNodeError) as exc_info:
            simple_model.children("Z")
        assert exc_info.value.node_id == "Z"

    def test_unknown_node_suggests_close_matches(self) -> None:
        model = GraphModel([Node("group1"), Node("group2")])
        with pytest.raises(UnknownNodeError) as exc_info:
            model.is_group("grup1")
        assert "group1" in exc_info.value.suggestions()
        assert "Did you mean" in exc_info.value.describe()

    def test_mappings_are_read_only(self, simple_model: GraphModel) -> None:
        with pytest.raises(TypeError):
            simple_model.nodes["X"] = Node("X")  # type: ignore[index]

    def test_repr(self, simple_model: GraphModel) -> None:
        assert repr(simple_model) == "GraphModel(nodes=4, edges=2)"


class TestGraphModelValidation:
    """Construction rejects malformed input with InvalidGraphError."""

    def test_edge_with_unknown_target(self) -> None:
        with pytest.raises(EdgeEndpointError) as exc_info:
            GraphModel([Node("A")], [Edge("e", "A", "missing")])
        assert exc_info.value.missing == "target"
        assert isinstance(exc_info.value, InvalidGraphError)

    def test_edge_with_both_endpoints_unknown(self) -> None:
        with pytest.raises(EdgeEndpointError) as exc_info:
            GraphModel([Node("A")], [Edge("e", "x", "y")])
        assert exc_info.value.missing == "both"

    def test_parent_cycle(self) -> None:
        nodes = [Node("A", parent_id="C"), Node("B", parent_id="A"), Node("C", parent_id="B")]
        with pytest.raises(ParentCycleError) as exc_info:
            GraphModel(nodes)
        cycle = exc_info.value.cycle
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {"A", "B", "C"}

    def test_self_parent_is_cycle(self) -> None:
        with pytest.raises(ParentCycleError) as exc_info:
            GraphModel([Node("A", parent_id="A")])
        assert exc_info.value.cycle == ["A", "A"]

    def test_unknown_parent(self) -> None:
        with pytest.raises(ParentNotFoundError) as exc_info:
            GraphModel([Node("A", parent_id="nope")])
        description = exc_info.value.describe()
        assert "Parent Not Found" in description
        assert "`nope`" in description
        assert "`A`" in description

    def test_duplicate_node_id(self) -> None:
        with pytest.raises(DuplicateIdError) as exc_info:
            GraphModel([Node("A"), Node("A")])
        assert exc_info.value.kind == "node"

    def test_duplicate_edge_id(self) -> None:
        with pytest.raises(DuplicateIdError) as exc_info:
            GraphModel([Node("A"), Node("B")], [Edge("e", "A", "B"), Edge("e", "B", "A")])
        assert exc_info.value.kind == "edge"

    def test_parallel_edges_and_self_loops_allowed(self) -> None:
        """Same endpoints are fine as long as ids differ."""
        model = GraphModel(
            [Node("A"), Node("B")],
            [Edge("e1", "A", "B"), Edge("e2", "A", "B"), Edge("loop", "A", "A")],
        )
        assert model.incident_edges("A") == {"e1", "e2", "loop"}


class TestFromDescription:
    """Building a model from the load-time description."""

    def test_dependencies_generate_named_edges(self) -> None:
        description = GraphDescription.model_validate(
            {
                "nodes": [
                    {"id": "A", "dependencies": ["B"]},
                    {"id": "B", "parentId": "G"},
                    {"id": "G", "label": "Group"},
                ],
                "edges": [{"id": "custom", "source": "G", "target": "A"}],
            }
        )
        model = GraphModel.from_description(description)

        assert model.edge_ids() == {"A-B", "custom"}
        edge = model.edge("A-B")
        assert (edge.source, edge.target) == ("A", "B")
        assert model.parent("B") == "G"

    def test_generated_edge_colliding_with_explicit_edge(self) -> None:
        description = GraphDescription.model_validate(
            {
                "nodes": [{"id": "A", "dependencies": ["B"]}, {"id": "B"}],
                "edges": [{"id": "A-B", "source": "B", "target": "A"}],
            }
        )
        with pytest.raises(DuplicateIdError):
            GraphModel.from_description(description)

    def test_dependency_on_unknown_node(self) -> None:
        description = GraphDescription.model_validate(
            {"nodes": [{"id": "A", "dependencies": ["ghost"]}]}
        )
        with pytest.raises(EdgeEndpointError) as exc_info:
            GraphModel.from_description(description)
        assert exc_info.value.edge_id == "A-ghost"
