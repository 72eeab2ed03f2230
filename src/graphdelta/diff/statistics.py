"""Aggregate diff statistics."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from graphdelta.diff.models import Change, DiffStatistics
from graphdelta.graph.models import GraphSnapshot


def calculate_statistics(
    changes: Iterable[Change],
    source: GraphSnapshot,
    target: GraphSnapshot,
) -> DiffStatistics:
    """Count changes by kind and derive similarity/complexity.

    similarity = 1 - distinct changed entities / union size
    complexity = structural-or-breaking changes / union size

    where union size is the larger of the two snapshots' entity counts.
    Both ratios are clamped to [0, 1].
    """
    changes = list(changes)
    counts = Counter(c.type for c in changes)

    union_size = max(source.size, target.size)
    changed_entities = len({c.entity_id for c in changes})
    heavy = sum(
        1 for c in changes if c.semantic.category == "structural" or c.semantic.impact == "breaking"
    )

    similarity = 1 - changed_entities / union_size if union_size > 0 else 1.0
    complexity = heavy / union_size if union_size > 0 else 0.0

    return DiffStatistics(
        nodes_added=counts["node_added"],
        nodes_removed=counts["node_removed"],
        nodes_modified=counts["node_modified"],
        edges_added=counts["edge_added"],
        edges_removed=counts["edge_removed"],
        edges_modified=counts["edge_modified"],
        total_changes=len(changes),
        similarity=_clamp(similarity),
        complexity=_clamp(complexity),
    )


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))
