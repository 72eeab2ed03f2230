"""Node/edge comparison between two snapshots.

Purely functional: takes two snapshots, returns raw changes. Emission
order is fixed so patch compilation is deterministic:

1. nodes added (target order)
2. nodes removed (source order)
3. nodes modified (source order; type first, then data leaves)
4. the same three passes for edges (connection after type)
"""

from __future__ import annotations

from graphdelta.core.ids import new_id
from graphdelta.diff.classifier import data_impact
from graphdelta.diff.deep import DeepDiffer
from graphdelta.diff.models import (
    Change,
    DiffOptions,
    EdgeAdded,
    EdgeModified,
    EdgeRemoved,
    LeafDifference,
    NodeAdded,
    NodeModified,
    NodeRemoved,
    SemanticChange,
)
from graphdelta.graph.models import Edge, GraphSnapshot, Node

CONNECTION_PATH = ("connection",)
TYPE_PATH = ("type",)
DATA_PATH = ("data",)


def compare_snapshots(
    source: GraphSnapshot,
    target: GraphSnapshot,
    options: DiffOptions | None = None,
    *,
    differ: DeepDiffer | None = None,
) -> list[Change]:
    """Compute raw changes between two snapshots.

    Args:
        source: Base snapshot
        target: Snapshot compared against the base
        options: Comparison options (metadata/timestamp filtering, comparators)
        differ: Pre-built differ; pass one to read its comparator failure count

    Returns:
        Changes in deterministic emission order.
    """
    differ = differ or DeepDiffer(options)
    changes: list[Change] = []
    changes.extend(compare_nodes(source.node_map(), target.node_map(), differ))
    changes.extend(compare_edges(source.edge_map(), target.edge_map(), differ))
    return changes


def compare_nodes(
    source_nodes: dict[str, Node],
    target_nodes: dict[str, Node],
    differ: DeepDiffer,
) -> list[Change]:
    changes: list[Change] = []

    for node_id, node in target_nodes.items():
        if node_id not in source_nodes:
            changes.append(
                NodeAdded(
                    change_id=new_id("change"),
                    entity_id=node_id,
                    after=node,
                    semantic=SemanticChange(
                        category="structural",
                        impact="enhancement",
                        description=f"Added node {node_id} of type {node.type}",
                    ),
                )
            )

    for node_id, node in source_nodes.items():
        if node_id not in target_nodes:
            changes.append(
                NodeRemoved(
                    change_id=new_id("change"),
                    entity_id=node_id,
                    before=node,
                    semantic=SemanticChange(
                        category="structural",
                        impact="breaking",
                        description=f"Removed node {node_id} of type {node.type}",
                    ),
                )
            )

    for node_id, before in source_nodes.items():
        after = target_nodes.get(node_id)
        if after is not None:
            changes.extend(_node_modifications(before, after, differ))

    return changes


def compare_edges(
    source_edges: dict[str, Edge],
    target_edges: dict[str, Edge],
    differ: DeepDiffer,
) -> list[Change]:
    changes: list[Change] = []

    for edge_id, edge in target_edges.items():
        if edge_id not in source_edges:
            changes.append(
                EdgeAdded(
                    change_id=new_id("change"),
                    entity_id=edge_id,
                    after=edge,
                    semantic=SemanticChange(
                        category="structural",
                        impact="enhancement",
                        description=f"Added edge {edge_id} from {edge.source} to {edge.target}",
                        affected_relations=edge.endpoints,
                    ),
                )
            )

    for edge_id, edge in source_edges.items():
        if edge_id not in target_edges:
            changes.append(
                EdgeRemoved(
                    change_id=new_id("change"),
                    entity_id=edge_id,
                    before=edge,
                    semantic=SemanticChange(
                        category="structural",
                        impact="breaking",
                        description=f"Removed edge {edge_id} from {edge.source} to {edge.target}",
                        affected_relations=edge.endpoints,
                    ),
                )
            )

    for edge_id, before in source_edges.items():
        after = target_edges.get(edge_id)
        if after is not None:
            changes.extend(_edge_modifications(before, after, differ))

    return changes


def _node_modifications(before: Node, after: Node, differ: DeepDiffer) -> list[Change]:
    changes: list[Change] = []

    if before.type != after.type:
        changes.append(
            NodeModified(
                change_id=new_id("change"),
                entity_id=before.id,
                before=before,
                after=after,
                field_path=TYPE_PATH,
                old_value=before.type,
                new_value=after.type,
                semantic=SemanticChange(
                    category="behavioral",
                    impact="breaking",
                    description=f"Changed node type from {before.type} to {after.type}",
                ),
            )
        )

    for leaf in differ.diff(before.data, after.data, DATA_PATH):
        changes.append(
            NodeModified(
                change_id=new_id("change"),
                entity_id=before.id,
                before=before,
                after=after,
                field_path=leaf.path,
                old_value=leaf.old_value,
                new_value=leaf.new_value,
                semantic=_data_semantic("node", leaf, ()),
            )
        )

    return changes


def _edge_modifications(before: Edge, after: Edge, differ: DeepDiffer) -> list[Change]:
    changes: list[Change] = []

    if before.type != after.type:
        changes.append(
            EdgeModified(
                change_id=new_id("change"),
                entity_id=before.id,
                before=before,
                after=after,
                field_path=TYPE_PATH,
                old_value=before.type,
                new_value=after.type,
                semantic=SemanticChange(
                    category="behavioral",
                    impact="breaking",
                    description=f"Changed edge type from {before.type} to {after.type}",
                    affected_relations=before.endpoints,
                ),
            )
        )

    if before.endpoints != after.endpoints:
        changes.append(
            EdgeModified(
                change_id=new_id("change"),
                entity_id=before.id,
                before=before,
                after=after,
                field_path=CONNECTION_PATH,
                old_value={"source": before.source, "target": before.target},
                new_value={"source": after.source, "target": after.target},
                semantic=SemanticChange(
                    category="structural",
                    impact="breaking",
                    description=(
                        f"Changed edge connection from {before.source}->{before.target} "
                        f"to {after.source}->{after.target}"
                    ),
                    affected_relations=(*before.endpoints, *after.endpoints),
                ),
            )
        )

    for leaf in differ.diff(before.data, after.data, DATA_PATH):
        changes.append(
            EdgeModified(
                change_id=new_id("change"),
                entity_id=before.id,
                before=before,
                after=after,
                field_path=leaf.path,
                old_value=leaf.old_value,
                new_value=leaf.new_value,
                semantic=_data_semantic("edge", leaf, before.endpoints),
            )
        )

    return changes


def _data_semantic(kind: str, leaf: LeafDifference, relations: tuple[str, ...]) -> SemanticChange:
    return SemanticChange(
        category="data",
        impact=data_impact(leaf.old_value, leaf.new_value),
        description=f"Modified {kind} data: {'.'.join(leaf.path)}",
        affected_relations=relations,
    )
