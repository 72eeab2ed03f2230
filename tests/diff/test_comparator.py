"""Tests for node/edge comparison between snapshots."""

from typing import Any

from graphdelta.diff.comparator import CONNECTION_PATH, compare_snapshots
from graphdelta.diff.models import (
    MISSING,
    DiffOptions,
    EdgeAdded,
    EdgeModified,
    EdgeRemoved,
    NodeAdded,
    NodeModified,
    NodeRemoved,
)
from graphdelta.graph.models import Edge, GraphSnapshot, Node


def _node(id: str, type: str = "component", **data: Any) -> Node:
    return Node(id=id, type=type, data=data)


def _edge(id: str, source: str, target: str, type: str = "uses", **data: Any) -> Edge:
    return Edge(id=id, source=source, target=target, type=type, data=data)


class TestIdentity:
    def test_identical_snapshots_produce_no_changes(self) -> None:
        snapshot = GraphSnapshot(
            nodes=(_node("a", name="A"), _node("b")),
            edges=(_edge("e", "a", "b"),),
        )
        assert compare_snapshots(snapshot, snapshot) == []

    def test_empty_snapshots(self) -> None:
        assert compare_snapshots(GraphSnapshot(), GraphSnapshot()) == []


class TestNodes:
    def test_added_and_removed(self) -> None:
        source = GraphSnapshot(nodes=(_node("a"),))
        target = GraphSnapshot(nodes=(_node("b", type="function"),))

        changes = compare_snapshots(source, target)

        assert [type(c) for c in changes] == [NodeAdded, NodeRemoved]
        added, removed = changes
        assert added.entity_id == "b"
        assert added.semantic.impact == "enhancement"
        assert added.semantic.category == "structural"
        assert removed.entity_id == "a"
        assert removed.semantic.impact == "breaking"

    def test_swapping_sides_swaps_added_and_removed(self) -> None:
        a = GraphSnapshot(nodes=(_node("x"), _node("y")))
        b = GraphSnapshot(nodes=(_node("y"), _node("z")))

        forward = {(c.type, c.entity_id) for c in compare_snapshots(a, b)}
        backward = {(c.type, c.entity_id) for c in compare_snapshots(b, a)}

        assert forward == {("node_added", "z"), ("node_removed", "x")}
        assert backward == {("node_added", "x"), ("node_removed", "z")}

    def test_type_change_is_behavioral_and_breaking(self) -> None:
        source = GraphSnapshot(nodes=(_node("x", type="component"),))
        target = GraphSnapshot(nodes=(_node("x", type="function"),))

        (change,) = compare_snapshots(source, target)

        assert isinstance(change, NodeModified)
        assert change.path == ("type",)
        assert change.old_value == "component"
        assert change.new_value == "function"
        assert change.semantic.category == "behavioral"
        assert change.is_breaking

    def test_data_leaves_follow_type_change(self) -> None:
        source = GraphSnapshot(nodes=(_node("x", type="a", name="old"),))
        target = GraphSnapshot(nodes=(_node("x", type="b", name="new"),))

        changes = compare_snapshots(source, target)

        assert [c.path for c in changes] == [("type",), ("data", "name")]

    def test_data_impact_rules(self) -> None:
        source = GraphSnapshot(nodes=(_node("x", kept=1, dropped=1, retyped=1),))
        target = GraphSnapshot(nodes=(_node("x", kept=2, retyped="1", added=True),))

        impacts = {c.path: c.semantic.impact for c in compare_snapshots(source, target)}

        assert impacts == {
            ("data", "kept"): "compatible",
            ("data", "dropped"): "breaking",
            ("data", "retyped"): "breaking",
            ("data", "added"): "enhancement",
        }

    def test_removed_data_key_keeps_missing_new_value(self) -> None:
        source = GraphSnapshot(nodes=(_node("x", gone=1),))
        target = GraphSnapshot(nodes=(_node("x"),))

        (change,) = compare_snapshots(source, target)

        assert change.new_value is MISSING
        assert change.old_value == 1

    def test_ignore_metadata_option_passes_through(self) -> None:
        source = GraphSnapshot(nodes=(_node("x", updatedAt="2024-01-01"),))
        target = GraphSnapshot(nodes=(_node("x", updatedAt="2025-01-01"),))

        assert compare_snapshots(source, target, DiffOptions(ignore_metadata=True)) == []
        assert len(compare_snapshots(source, target)) == 1


class TestEdges:
    def test_edge_added_and_removed_carry_endpoints(self) -> None:
        nodes = (_node("a"), _node("b"))
        source = GraphSnapshot(nodes=nodes, edges=(_edge("e1", "a", "b"),))
        target = GraphSnapshot(nodes=nodes, edges=(_edge("e2", "b", "a"),))

        added, removed = compare_snapshots(source, target)

        assert isinstance(added, EdgeAdded)
        assert added.semantic.affected_relations == ("b", "a")
        assert isinstance(removed, EdgeRemoved)
        assert removed.semantic.affected_relations == ("a", "b")

    def test_rewired_edge_is_connection_change(self) -> None:
        nodes = (_node("a"), _node("b"), _node("c"))
        source = GraphSnapshot(nodes=nodes, edges=(_edge("e", "a", "b"),))
        target = GraphSnapshot(nodes=nodes, edges=(_edge("e", "a", "c"),))

        (change,) = compare_snapshots(source, target)

        assert isinstance(change, EdgeModified)
        assert change.path == CONNECTION_PATH
        assert change.old_value == {"source": "a", "target": "b"}
        assert change.new_value == {"source": "a", "target": "c"}
        assert change.semantic.category == "structural"
        assert change.is_breaking
        assert set(change.semantic.affected_relations) == {"a", "b", "c"}

    def test_edge_type_then_connection_then_data(self) -> None:
        source = GraphSnapshot(edges=(_edge("e", "a", "b", type="uses", w=1),))
        target = GraphSnapshot(edges=(_edge("e", "b", "a", type="calls", w=2),))

        changes = compare_snapshots(source, target)

        assert [c.path for c in changes] == [("type",), ("connection",), ("data", "w")]

    def test_nodes_emitted_before_edges(self) -> None:
        source = GraphSnapshot(nodes=(_node("a"),), edges=(_edge("e", "a", "a"),))
        target = GraphSnapshot(nodes=(_node("b"),), edges=())

        changes = compare_snapshots(source, target)

        assert [c.type for c in changes] == ["node_added", "node_removed", "edge_removed"]
