"""Tests for the fold/unfold state machine."""

from __future__ import annotations

import pytest

from foldgraph.graph import (
    AlreadyFoldedError,
    FoldController,
    FoldRegistry,
    GraphModel,
    Hide,
    NodeKind,
    Restore,
    SubtreeResolver,
    UnknownNodeError,
)


class TestSimpleScenario:
    """A, B, C, D with C inside D; edges A->B and B->C."""

    def test_initial_view(self, simple_model: GraphModel) -> None:
        controller = FoldController(simple_model)
        assert controller.active_node_ids() == {"A", "B", "C", "D"}
        assert controller.active_edge_ids() == {"A->B", "B->C"}

    def test_fold_hides_child_and_crossing_edge(self, simple_model: GraphModel) -> None:
        controller = FoldController(simple_model)

        delta = controller.toggle_fold("D")

        assert delta == Hide(group_id="D", node_ids=frozenset({"C"}), edge_ids=frozenset({"B->C"}))
        assert controller.active_node_ids() == {"A", "B", "D"}
        assert controller.active_edge_ids() == {"A->B"}

    def test_second_toggle_restores(self, simple_model: GraphModel) -> None:
        controller = FoldController(simple_model)
        controller.toggle_fold("D")

        delta = controller.toggle_fold("D")

        assert isinstance(delta, Restore)
        assert delta.node_ids == {"C"}
        assert delta.edge_ids == {"B->C"}
        assert controller.active_node_ids() == {"A", "B", "C", "D"}
        assert controller.active_edge_ids() == {"A->B", "B->C"}
        assert len(controller.registry) == 0


class TestToggleSemantics:
    @pytest.mark.parametrize("group_id", ["group1", "group2"])
    def test_round_trip_restores_exactly(
        self, nested_controller: FoldController, group_id: str
    ) -> None:
        before = nested_controller.active_view()

        nested_controller.toggle_fold(group_id)
        nested_controller.toggle_fold(group_id)

        assert nested_controller.active_view() == before

    def test_fold_hides_whole_subtree_only(self, nested_controller: FoldController) -> None:
        model = nested_controller.model
        subtree = SubtreeResolver(model).descendants("group2")

        nested_controller.toggle_fold("group2")

        active = nested_controller.active_node_ids()
        assert active.isdisjoint(subtree)
        assert active == model.node_ids() - subtree

    def test_fold_hides_every_edge_touching_subtree(
        self, nested_controller: FoldController
    ) -> None:
        model = nested_controller.model
        subtree = SubtreeResolver(model).descendants("group1")

        nested_controller.toggle_fold("group1")

        for edge_id in model.edge_ids():
            edge = model.edge(edge_id)
            touches = edge.source in subtree or edge.target in subtree
            assert (edge_id in nested_controller.active_edge_ids()) is not touches

    def test_leaf_toggle_is_noop(self, nested_controller: FoldController) -> None:
        before = nested_controller.active_view()
        assert nested_controller.toggle_fold("A") is None
        assert nested_controller.active_view() == before

    def test_unknown_node_leaves_state_unchanged(
        self, nested_controller: FoldController
    ) -> None:
        nested_controller.toggle_fold("group1")
        before = nested_controller.active_view()

        with pytest.raises(UnknownNodeError):
            nested_controller.toggle_fold("nonexistent")

        assert nested_controller.active_view() == before

    def test_direct_double_fold_rejected(self, nested_controller: FoldController) -> None:
        nested_controller.toggle_fold("group1")
        with pytest.raises(AlreadyFoldedError):
            nested_controller.registry.fold("group1", [], [])

    def test_shared_registry(self, nested_model: GraphModel) -> None:
        """The registry passed in is the one the controller mutates."""
        registry = FoldRegistry()
        controller = FoldController(nested_model, registry)
        controller.toggle_fold("group1")
        assert registry.is_folded("group1")


class TestNestedFolds:
    """group1 lives inside group2."""

    def test_outer_fold_reports_only_newly_hidden(
        self, nested_controller: FoldController
    ) -> None:
        nested_controller.toggle_fold("group1")

        delta = nested_controller.toggle_fold("group2")

        assert isinstance(delta, Hide)
        assert delta.node_ids == {"group1", "C"}
        assert delta.edge_ids == {"B-C"}
        assert nested_controller.registry.is_folded("group1")

    def test_outer_unfold_keeps_inner_folded(self, nested_controller: FoldController) -> None:
        nested_controller.toggle_fold("group1")
        nested_controller.toggle_fold("group2")

        delta = nested_controller.toggle_fold("group2")

        assert isinstance(delta, Restore)
        assert delta.node_ids == {"group1", "C"}
        assert delta.edge_ids == {"B-C"}
        assert nested_controller.node_kind("group1") is NodeKind.FOLDED_GROUP
        assert nested_controller.active_node_ids() == {"group1", "group2", "A", "B", "C"}
        assert nested_controller.active_edge_ids() == {"A-B", "B-C"}

    def test_inner_unfold_after_outer_unfold(self, nested_controller: FoldController) -> None:
        nested_controller.toggle_fold("group1")
        nested_controller.toggle_fold("group2")
        nested_controller.toggle_fold("group2")

        delta = nested_controller.toggle_fold("group1")

        assert delta is not None
        assert delta.node_ids == {"D", "E", "F"}
        assert nested_controller.active_node_ids() == nested_controller.model.node_ids()

    def test_toggle_on_hidden_group_is_noop(self, nested_controller: FoldController) -> None:
        nested_controller.toggle_fold("group2")
        before = nested_controller.active_view()

        assert nested_controller.toggle_fold("group1") is None
        assert nested_controller.active_view() == before
        assert not nested_controller.registry.is_folded("group1")

    def test_expand_all(self, nested_controller: FoldController) -> None:
        nested_controller.toggle_fold("group1")
        nested_controller.toggle_fold("group2")

        deltas = nested_controller.expand_all()

        assert [d.group_id for d in deltas] == ["group2", "group1"]
        assert nested_controller.active_node_ids() == nested_controller.model.node_ids()
        assert nested_controller.active_edge_ids() == nested_controller.model.edge_ids()


class TestNodeActivation:
    def test_node_kinds(self, nested_controller: FoldController) -> None:
        assert nested_controller.node_kind("A") is NodeKind.LEAF
        assert nested_controller.node_kind("group1") is NodeKind.GROUP
        nested_controller.toggle_fold("group1")
        assert nested_controller.node_kind("group1") is NodeKind.FOLDED_GROUP

    def test_activating_group_toggles(self, nested_controller: FoldController) -> None:
        assert isinstance(nested_controller.on_node_activated("group1"), Hide)
        assert isinstance(nested_controller.on_node_activated("group1"), Restore)

    def test_activating_leaf_ignored(self, nested_controller: FoldController) -> None:
        assert nested_controller.on_node_activated("C") is None
        assert len(nested_controller.registry) == 0

    def test_activating_unknown_node(self, nested_controller: FoldController) -> None:
        with pytest.raises(UnknownNodeError):
            nested_controller.on_node_activated("ghost")

    def test_is_visible(self, nested_controller: FoldController) -> None:
        nested_controller.toggle_fold("group1")
        assert nested_controller.is_visible("group1")
        assert not nested_controller.is_visible("D")

    def test_activation_takes_lock_once(self, nested_controller: FoldController) -> None:
        """Classification and toggle share a single lock acquisition."""

        class CountingLock:
            def __init__(self) -> None:
                self.acquired = 0
                self.held = False

            def __enter__(self) -> None:
                assert not self.held
                self.acquired += 1
                self.held = True

            def __exit__(self, *exc: object) -> None:
                self.held = False

        lock = CountingLock()
        nested_controller._lock = lock  # type: ignore[assignment]

        assert isinstance(nested_controller.on_node_activated("group1"), Hide)
        assert nested_controller.on_node_activated("A") is None
        assert lock.acquired == 2
        assert not lock.held

    def test_lock_released_after_unknown_node(self, nested_controller: FoldController) -> None:
        with pytest.raises(UnknownNodeError):
            nested_controller.on_node_activated("ghost")
        assert not nested_controller._lock.locked()
        assert isinstance(nested_controller.toggle_fold("group1"), Hide)
