"""Tests for diff statistics."""

import pytest

from graphdelta.diff.comparator import compare_snapshots
from graphdelta.diff.models import NodeRemoved, SemanticChange
from graphdelta.diff.statistics import calculate_statistics
from graphdelta.graph.models import Edge, GraphSnapshot, Node


def _snapshot(*node_ids: str, edges: tuple[tuple[str, str, str], ...] = ()) -> GraphSnapshot:
    return GraphSnapshot(
        nodes=tuple(Node(id=n, type="t") for n in node_ids),
        edges=tuple(Edge(id=e, source=s, target=t, type="uses") for e, s, t in edges),
    )


class TestCalculateStatistics:
    def test_identical_graphs(self) -> None:
        snapshot = _snapshot("a", "b", edges=(("e", "a", "b"),))
        stats = calculate_statistics([], snapshot, snapshot)

        assert stats.total_changes == 0
        assert stats.similarity == 1.0
        assert stats.complexity == 0.0

    def test_empty_graphs(self) -> None:
        stats = calculate_statistics([], GraphSnapshot(), GraphSnapshot())
        assert stats.similarity == 1.0
        assert stats.complexity == 0.0

    def test_counters_and_ratios(self) -> None:
        source = _snapshot("a", "b", "c", edges=(("e1", "a", "b"),))
        target = _snapshot("a", "b", "d", edges=(("e2", "a", "d"),))
        changes = compare_snapshots(source, target)

        stats = calculate_statistics(changes, source, target)

        assert (stats.nodes_added, stats.nodes_removed, stats.nodes_modified) == (1, 1, 0)
        assert (stats.edges_added, stats.edges_removed, stats.edges_modified) == (1, 1, 0)
        assert stats.total_changes == 4
        # 4 distinct entities over a union size of 4
        assert stats.similarity == pytest.approx(0.0)
        assert stats.complexity == pytest.approx(1.0)

    def test_multiple_changes_on_one_entity_count_once_for_similarity(self) -> None:
        b = Node(id="b", type="t")
        source = GraphSnapshot(nodes=(Node(id="a", type="t", data={"x": 1, "y": 1}), b))
        target = GraphSnapshot(nodes=(Node(id="a", type="t", data={"x": 2, "y": 2}), b))
        changes = compare_snapshots(source, target)

        stats = calculate_statistics(changes, source, target)

        assert stats.nodes_modified == 2
        assert stats.similarity == pytest.approx(0.5)
        assert stats.complexity == 0.0

    def test_ratios_clamped_for_oversized_change_lists(self) -> None:
        semantic = SemanticChange(category="structural", impact="breaking", description="")
        changes = [
            NodeRemoved(
                change_id=f"c{i}",
                entity_id=f"n{i}",
                before=Node(id=f"n{i}", type="t"),
                semantic=semantic,
            )
            for i in range(5)
        ]
        snapshot = _snapshot("a")

        stats = calculate_statistics(changes, snapshot, snapshot)

        assert stats.similarity == 0.0
        assert stats.complexity == 1.0
