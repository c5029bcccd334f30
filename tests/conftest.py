"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from foldgraph.graph import Edge, FoldController, GraphModel, Node, load_graph


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def simple_model() -> GraphModel:
    """Nodes A, B, C, D with C inside group D; edges A->B and B->C."""
    return GraphModel(
        [Node("A"), Node("B"), Node("C", parent_id="D"), Node("D")],
        [Edge("A->B", "A", "B"), Edge("B->C", "B", "C")],
    )


@pytest.fixture
def nested_model(fixtures_dir: Path) -> GraphModel:
    """Sample graph with group1 nested inside group2."""
    return load_graph(fixtures_dir / "sample_graph.yaml")


@pytest.fixture
def nested_controller(nested_model: GraphModel) -> FoldController:
    return FoldController(nested_model)
