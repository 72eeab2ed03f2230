"""Graph diff package: comparison, classification, conflicts and statistics.

Public API re-exports for the diff subpackage.
"""

from graphdelta.diff.classifier import ChangeClassifier, data_impact, migrations_for
from graphdelta.diff.comparator import compare_snapshots
from graphdelta.diff.conflicts import detect_conflicts
from graphdelta.diff.deep import DeepDiffer, diff_values, value_kind
from graphdelta.diff.highlights import (
    build_breaking_summary,
    build_highlights,
    build_summary,
)
from graphdelta.diff.models import (
    MISSING,
    Change,
    Conflict,
    ConflictResolution,
    DiffHighlight,
    DiffOptions,
    DiffStatistics,
    EdgeAdded,
    EdgeModified,
    EdgeRemoved,
    GraphDiff,
    LeafDifference,
    Migration,
    NodeAdded,
    NodeModified,
    NodeRemoved,
    SemanticChange,
)
from graphdelta.diff.rules import ClassificationRule, RuleRegistry
from graphdelta.diff.statistics import calculate_statistics

__all__ = [
    "MISSING",
    "Change",
    "ChangeClassifier",
    "ClassificationRule",
    "Conflict",
    "ConflictResolution",
    "DeepDiffer",
    "DiffHighlight",
    "DiffOptions",
    "DiffStatistics",
    "EdgeAdded",
    "EdgeModified",
    "EdgeRemoved",
    "GraphDiff",
    "LeafDifference",
    "Migration",
    "NodeAdded",
    "NodeModified",
    "NodeRemoved",
    "RuleRegistry",
    "SemanticChange",
    "build_breaking_summary",
    "build_highlights",
    "build_summary",
    "calculate_statistics",
    "compare_snapshots",
    "detect_conflicts",
    "data_impact",
    "diff_values",
    "migrations_for",
    "value_kind",
]
