"""Conflict detection over a classified change set.

Checks:
- orphaned edges: edges added, rewired or kept while an endpoint node is removed
- incompatible type transitions from a configurable forbidden set
- malformed input: duplicate ids, edges dangling without a removal to blame

Each conflict carries resolution options with confidences; choosing one is
left to the caller.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from graphdelta.config.constants import DEFAULT_FORBIDDEN_TRANSITIONS
from graphdelta.config.models import parse_transitions
from graphdelta.core.ids import new_id
from graphdelta.diff.models import (
    Change,
    Conflict,
    ConflictResolution,
    EdgeAdded,
    EdgeModified,
    NodeModified,
    NodeRemoved,
)
from graphdelta.graph.models import Edge, GraphSnapshot

log = structlog.get_logger(__name__)


def detect_conflicts(
    changes: Iterable[Change],
    *,
    source: GraphSnapshot | None = None,
    target: GraphSnapshot | None = None,
    forbidden_transitions: frozenset[tuple[str, str]] | None = None,
) -> list[Conflict]:
    """Scan a change set for structural conflicts.

    Args:
        changes: Classified changes of one diff
        source: Base snapshot; enables duplicate-id checks on it
        target: Compared snapshot; enables kept-edge orphan and dangling checks
        forbidden_transitions: (old_type, new_type) pairs reported as conflicts.
            Defaults to the built-in set.

    Returns:
        Conflicts in check order (orphans, type transitions, malformed input).
    """
    changes = list(changes)
    if forbidden_transitions is None:
        forbidden_transitions = parse_transitions(DEFAULT_FORBIDDEN_TRANSITIONS)

    conflicts: list[Conflict] = []

    orphaned = find_orphaned_edges(changes, target)
    if orphaned:
        conflicts.append(
            Conflict(
                id=new_id("conflict"),
                type="structural_conflict",
                description="Edges referring to removed nodes",
                entities=tuple(orphaned),
                severity="high",
                resolution_strategies=(
                    ConflictResolution(
                        strategy="auto_resolve",
                        description="Automatically remove orphaned edges",
                        confidence=0.9,
                    ),
                    ConflictResolution(
                        strategy="manual",
                        description="Manually review and resolve",
                        confidence=1.0,
                    ),
                ),
            )
        )

    conflicts.extend(find_type_conflicts(changes, forbidden_transitions))
    conflicts.extend(find_malformed_input(changes, source, target))

    if conflicts:
        log.debug("conflicts_detected", count=len(conflicts), types=[c.type for c in conflicts])
    return conflicts


def find_orphaned_edges(changes: list[Change], target: GraphSnapshot | None = None) -> list[str]:
    """Ids of edges that still reference a node removed by this change set.

    Added and modified edges are judged by their ``after`` endpoints. When
    the target snapshot is given, unchanged edges that survive a node
    removal are reported too.
    """
    removed_nodes = {c.entity_id for c in changes if isinstance(c, NodeRemoved)}
    if not removed_nodes:
        return []

    orphaned: dict[str, None] = {}
    for change in changes:
        if isinstance(change, (EdgeAdded, EdgeModified)):
            edge = change.after
            assert isinstance(edge, Edge)
            if edge.source in removed_nodes or edge.target in removed_nodes:
                orphaned[change.entity_id] = None

    if target is not None:
        for edge in target.edges:
            if edge.source in removed_nodes or edge.target in removed_nodes:
                orphaned[edge.id] = None

    return list(orphaned)


def find_type_conflicts(
    changes: list[Change],
    forbidden_transitions: frozenset[tuple[str, str]],
) -> list[Conflict]:
    """Conflicts for changes whose path includes ``type`` and whose
    (old, new) pair is a forbidden transition."""
    conflicts: list[Conflict] = []
    for change in changes:
        if not isinstance(change, (NodeModified, EdgeModified)) or not change.touches("type"):
            continue
        if not isinstance(change.old_value, str) or not isinstance(change.new_value, str):
            continue
        if (change.old_value, change.new_value) not in forbidden_transitions:
            continue

        conflicts.append(
            Conflict(
                id=new_id("conflict"),
                type="node_conflict" if change.entity == "node" else "edge_conflict",
                description=(
                    f"Incompatible type change from {change.old_value} to {change.new_value}"
                ),
                entities=(change.entity_id,),
                severity="high",
                resolution_strategies=(
                    ConflictResolution(
                        strategy="keep_source",
                        description="Keep original type",
                        confidence=0.5,
                        result=change.before,
                    ),
                    ConflictResolution(
                        strategy="keep_target",
                        description="Accept new type",
                        confidence=0.5,
                        result=change.after,
                    ),
                    ConflictResolution(
                        strategy="manual",
                        description="Manual review required",
                        confidence=1.0,
                    ),
                ),
            )
        )
    return conflicts


def find_malformed_input(
    changes: list[Change],
    source: GraphSnapshot | None,
    target: GraphSnapshot | None,
) -> list[Conflict]:
    """Duplicate ids in either snapshot and edges dangling in the target."""
    conflicts: list[Conflict] = []

    for label, snapshot in (("source", source), ("target", target)):
        if snapshot is None:
            continue
        duplicates = snapshot.duplicate_node_ids() + snapshot.duplicate_edge_ids()
        if duplicates:
            conflicts.append(
                Conflict(
                    id=new_id("conflict"),
                    type="structural_conflict",
                    description=f"Duplicate entity ids in {label} snapshot",
                    entities=tuple(duplicates),
                    severity="critical",
                    resolution_strategies=(
                        ConflictResolution(
                            strategy="manual",
                            description="Make entity ids unique before diffing",
                            confidence=1.0,
                        ),
                    ),
                )
            )

    if target is not None:
        removed_nodes = {c.entity_id for c in changes if isinstance(c, NodeRemoved)}
        node_ids = target.node_ids()
        dangling = [
            edge.id
            for edge in target.edges
            if any(end not in node_ids and end not in removed_nodes for end in edge.endpoints)
        ]
        if dangling:
            conflicts.append(
                Conflict(
                    id=new_id("conflict"),
                    type="structural_conflict",
                    description="Edges referring to nodes missing from target snapshot",
                    entities=tuple(dangling),
                    severity="medium",
                    resolution_strategies=(
                        ConflictResolution(
                            strategy="auto_resolve",
                            description="Remove dangling edges",
                            confidence=0.7,
                        ),
                        ConflictResolution(
                            strategy="manual",
                            description="Add the missing nodes or fix edge endpoints",
                            confidence=1.0,
                        ),
                    ),
                )
            )

    return conflicts
