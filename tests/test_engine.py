"""End-to-end tests for GraphDiffEngine.

Covers the properties every comparison must hold (idempotence, bounded
statistics, added/removed symmetry), the conflict scenarios, version
lookups and the compile/apply round trip.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from graphdelta.config.models import GraphDeltaConfig, PatchConfig
from graphdelta.core.errors import ErrorCode, IntegrityError, NotFoundError
from graphdelta.diff.models import DiffOptions, NodeModified
from graphdelta.engine import GraphDiffEngine, create_engine
from graphdelta.graph.models import Edge, GraphSnapshot, GraphVersion, Node


def _graph(
    nodes: list[tuple[str, str]], edges: tuple[tuple[str, str, str], ...] = ()
) -> GraphSnapshot:
    return GraphSnapshot(
        nodes=tuple(Node(id=i, type=t) for i, t in nodes),
        edges=tuple(Edge(id=i, source=s, target=d, type="uses") for i, s, d in edges),
    )


@pytest.fixture
def engine() -> GraphDiffEngine:
    return GraphDiffEngine()


@pytest.fixture
def service_graphs() -> tuple[GraphSnapshot, GraphSnapshot]:
    source = GraphSnapshot(
        nodes=(
            Node(id="api", type="service", data={"port": 80, "config": {"retries": 3}}),
            Node(id="db", type="database", data={"engine": "pg"}),
            Node(id="cache", type="database"),
        ),
        edges=(
            Edge(id="api-db", source="api", target="db", type="reads"),
            Edge(id="api-cache", source="api", target="cache", type="reads"),
        ),
    )
    target = GraphSnapshot(
        nodes=(
            Node(id="api", type="service", data={"port": 8080, "config": {"retries": 5}}),
            Node(id="db", type="database", data={"engine": "pg", "replicas": 2}),
            Node(id="queue", type="broker"),
        ),
        edges=(
            Edge(id="api-db", source="api", target="db", type="writes"),
            Edge(id="api-queue", source="api", target="queue", type="publishes"),
        ),
    )
    return source, target


class TestProperties:
    def test_diff_of_graph_with_itself_is_empty(
        self, engine: GraphDiffEngine, service_graphs: tuple[GraphSnapshot, GraphSnapshot]
    ) -> None:
        source, _ = service_graphs

        diff = engine.compare_graphs(source, source)

        assert diff.changes == ()
        assert diff.statistics.total_changes == 0
        assert diff.statistics.similarity == 1.0
        assert diff.statistics.complexity == 0.0

    def test_statistics_are_bounded(
        self, engine: GraphDiffEngine, service_graphs: tuple[GraphSnapshot, GraphSnapshot]
    ) -> None:
        source, target = service_graphs

        stats = engine.compare_graphs(source, target).statistics

        assert 0.0 <= stats.similarity <= 1.0
        assert 0.0 <= stats.complexity <= 1.0
        assert stats.total_changes == (
            stats.nodes_added
            + stats.nodes_removed
            + stats.nodes_modified
            + stats.edges_added
            + stats.edges_removed
            + stats.edges_modified
        )

    def test_statistics_bounded_for_disjoint_graphs(self, engine: GraphDiffEngine) -> None:
        source = _graph([("a", "t"), ("b", "t")], (("e", "a", "b"),))
        target = _graph([("c", "t")])

        stats = engine.compare_graphs(source, target).statistics

        assert stats.similarity == 0.0
        assert stats.complexity == 1.0

    def test_added_and_removed_swap_when_direction_reverses(
        self, engine: GraphDiffEngine, service_graphs: tuple[GraphSnapshot, GraphSnapshot]
    ) -> None:
        source, target = service_graphs

        forward = engine.compare_graphs(source, target).statistics
        backward = engine.compare_graphs(target, source).statistics

        assert forward.nodes_added == backward.nodes_removed
        assert forward.nodes_removed == backward.nodes_added
        assert forward.edges_added == backward.edges_removed
        assert forward.edges_removed == backward.edges_added

    def test_dict_inputs_accepted(self, engine: GraphDiffEngine) -> None:
        source: dict[str, Any] = {"nodes": [{"id": "a", "type": "t"}]}
        target: dict[str, Any] = {"nodes": [{"id": "a", "type": "t"}, {"id": "b", "type": "t"}]}

        diff = engine.compare_graphs(source, target)

        assert [c.type for c in diff.changes] == ["node_added"]

    def test_nan_data_compares_equal(self, engine: GraphDiffEngine) -> None:
        def build() -> GraphSnapshot:
            return GraphSnapshot(nodes=(Node(id="a", type="t", data={"score": float("nan")}),))

        diff = engine.compare_graphs(build(), build())

        assert diff.changes == ()
        assert diff.statistics.similarity == 1.0


class TestConflictScenarios:
    def test_given_component_becomes_function_when_compared_then_breaking_and_conflict(
        self, engine: GraphDiffEngine
    ) -> None:
        # Given
        source = _graph([("x", "component")])
        target = _graph([("x", "function")])
        options = DiffOptions(include_conflict_resolution=True)

        # When
        diff = engine.compare_graphs(source, target, options)

        # Then
        (change,) = diff.changes
        assert isinstance(change, NodeModified)
        assert change.field_path == ("type",)
        assert change.is_breaking
        (conflict,) = diff.conflicts
        assert conflict.type == "node_conflict"
        assert conflict.severity == "high"
        assert conflict.entities == ("x",)

    def test_orphaned_edge_reported_once(self, engine: GraphDiffEngine) -> None:
        source = _graph([("n1", "t"), ("n2", "t")], (("e1", "n1", "n2"),))
        target = _graph([("n2", "t")], (("e1", "n1", "n2"),))

        diff = engine.compare_graphs(source, target, DiffOptions(include_conflict_resolution=True))

        assert [(c.type, c.entities) for c in diff.conflicts] == [
            ("structural_conflict", ("e1",))
        ]

    def test_conflicts_skipped_unless_requested(self, engine: GraphDiffEngine) -> None:
        source = _graph([("x", "component")])
        target = _graph([("x", "function")])

        assert engine.compare_graphs(source, target).conflicts == ()

    def test_engine_detect_conflicts_uses_config_transitions(self) -> None:
        config = GraphDeltaConfig.model_validate({"diff": {"forbidden_transitions": ["a->b"]}})
        engine = GraphDiffEngine(config=config)
        diff = engine.compare_graphs(_graph([("x", "a")]), _graph([("x", "b")]))

        conflicts = engine.detect_conflicts(diff.changes)

        assert [c.entities for c in conflicts] == [("x",)]


class TestSemantic:
    def test_removing_only_edge_of_node_is_breaking(self, engine: GraphDiffEngine) -> None:
        source = _graph([("a", "t"), ("b", "t")], (("e", "a", "b"),))
        target = _graph([("a", "t"), ("b", "t")])

        diff = engine.compare_graphs(source, target, DiffOptions(semantic_diff=True))

        (change,) = diff.changes
        assert change.semantic.impact == "breaking"
        assert change.semantic.migrations

    def test_comparator_that_raises_is_ignored(self, engine: GraphDiffEngine) -> None:
        def broken(a: Any, b: Any) -> bool:
            raise RuntimeError("boom")

        source = GraphSnapshot(nodes=(Node(id="a", type="t", data={"port": 1}),))
        target = GraphSnapshot(nodes=(Node(id="a", type="t", data={"port": 2}),))

        diff = engine.compare_graphs(
            source, target, DiffOptions(custom_comparators={"port": broken})
        )

        assert [c.path for c in diff.changes] == [("data", "port")]


class TestVersions:
    def test_compare_versions_uses_ids_as_labels(self, engine: GraphDiffEngine) -> None:
        engine.store_version(GraphVersion(id="v1", graph=_graph([("a", "t")])))
        engine.store_version(GraphVersion(id="v2", graph=_graph([("a", "t"), ("b", "t")])))

        diff = engine.compare_versions("v1", "v2")

        assert (diff.source_version, diff.target_version) == ("v1", "v2")
        assert engine.get_diff(diff.id) is diff

    def test_compare_unknown_version_raises(self, engine: GraphDiffEngine) -> None:
        engine.store_version(GraphVersion(id="v1", graph=GraphSnapshot()))

        with pytest.raises(NotFoundError) as exc_info:
            engine.compare_versions("v1", "v9")

        assert exc_info.value.code == ErrorCode.VERSION_NOT_FOUND

    def test_unregistered_diff_not_stored(self, engine: GraphDiffEngine) -> None:
        diff = engine.compare_graphs(GraphSnapshot(), GraphSnapshot(), register=False)
        assert engine.get_diff(diff.id) is None

    def test_history_delegates_to_store(self, engine: GraphDiffEngine) -> None:
        engine.store_version(GraphVersion(id="v1", graph=GraphSnapshot()))
        assert [v.id for v in engine.get_version_history()] == ["v1"]


class TestPatching:
    def test_patch_round_trip(
        self, engine: GraphDiffEngine, service_graphs: tuple[GraphSnapshot, GraphSnapshot]
    ) -> None:
        source, target = service_graphs
        diff = engine.compare_graphs(source, target)

        patch = engine.create_patch(diff)
        result = engine.apply_patch(source, patch)

        assert result.ok
        assert result.snapshot.node_map() == target.node_map()
        assert result.snapshot.edge_map() == target.edge_map()

    def test_created_by_from_config(self) -> None:
        engine = GraphDiffEngine(config=GraphDeltaConfig(patch=PatchConfig(created_by="ci")))
        diff = engine.compare_graphs(GraphSnapshot(), GraphSnapshot())

        assert engine.create_patch(diff).metadata.created_by == "ci"

    def test_tampered_patch_refused(self, engine: GraphDiffEngine) -> None:
        source = _graph([("a", "t")])
        patch = engine.create_patch(engine.compare_graphs(source, GraphSnapshot()))
        bad = patch.__class__.from_dict({**patch.to_dict(), "checksum": "0" * 64})

        with pytest.raises(IntegrityError):
            engine.apply_patch(source, bad)


class TestCreateEngine:
    @pytest.fixture(autouse=True)
    def _isolated_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
        for key in list(os.environ):
            if key.upper().startswith("GRAPHDELTA__"):
                monkeypatch.delenv(key, raising=False)
        with patch("graphdelta.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            yield

    def test_repo_config_sets_default_options(self, tmp_path: Path) -> None:
        config_dir = tmp_path / ".graphdelta"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text(
            "diff:\n  include_conflict_resolution: true\n  max_depth: 10\n"
        )

        engine = create_engine(tmp_path)
        options = engine.default_options()

        assert options.include_conflict_resolution is True
        assert options.max_depth == 10

    def test_kwargs_override(self, tmp_path: Path) -> None:
        engine = create_engine(tmp_path, patch={"created_by": "bot"})
        assert engine.config.patch.created_by == "bot"


class TestHighlights:
    def test_one_highlight_per_change(self, engine: GraphDiffEngine) -> None:
        diff = engine.compare_graphs(_graph([("a", "t")]), _graph([("b", "t")]))

        highlights = engine.highlights(diff)

        assert [(h.entity_id, h.change_type, h.impact) for h in highlights] == [
            ("b", "node_added", "enhancement"),
            ("a", "node_removed", "breaking"),
        ]
