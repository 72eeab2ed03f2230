"""Data models for graph diffs.

All models are frozen dataclasses. ``Change`` is a union of six variants;
dispatch on ``change.type`` (or ``isinstance``) instead of probing optional
fields.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, field, replace
from datetime import UTC, datetime
from typing import Any, ClassVar, Literal, TypeAlias

from graphdelta.config.constants import DEFAULT_FORBIDDEN_TRANSITIONS, MAX_DIFF_DEPTH_DEFAULT
from graphdelta.config.models import DiffConfig, parse_transitions
from graphdelta.graph.models import Edge, EntityKind, Node

ChangeType = Literal[
    "node_added",
    "node_removed",
    "node_modified",
    "edge_added",
    "edge_removed",
    "edge_modified",
]
Category = Literal["structural", "data", "metadata", "behavioral"]
Impact = Literal["breaking", "compatible", "enhancement", "cosmetic"]
MigrationType = Literal["automatic", "manual", "data_transform"]
ConflictType = Literal["node_conflict", "edge_conflict", "structural_conflict"]
Severity = Literal["low", "medium", "high", "critical"]
Strategy = Literal["keep_source", "keep_target", "merge", "manual", "auto_resolve"]

Comparator = Callable[[Any, Any], bool]
Path: TypeAlias = tuple[str, ...]


class _Missing:
    """Marker for a key present on only one side of a comparison."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass(frozen=True, slots=True)
class LeafDifference:
    """A single path-tagged difference produced by the deep differ."""

    path: Path
    old_value: Any
    new_value: Any


@dataclass(frozen=True, slots=True)
class Migration:
    """Advisory migration hint. Never executed by graphdelta."""

    type: MigrationType
    description: str
    code: str | None = None
    instructions: str | None = None


@dataclass(frozen=True, slots=True)
class SemanticChange:
    category: Category
    impact: Impact
    description: str
    affected_relations: tuple[str, ...] = ()
    migrations: tuple[Migration, ...] = ()


# =============================================================================
# Change variants
# =============================================================================


@dataclass(frozen=True, slots=True)
class _ChangeBase:
    change_id: str
    entity_id: str
    semantic: SemanticChange

    type: ClassVar[ChangeType]
    entity: ClassVar[EntityKind]

    @property
    def path(self) -> Path | None:
        return None

    @property
    def is_breaking(self) -> bool:
        return self.semantic.impact == "breaking"

    def to_dict(self) -> dict[str, Any]:
        return {
            "change_id": self.change_id,
            "type": self.type,
            "entity_id": self.entity_id,
            "semantic": asdict(self.semantic),
        }


@dataclass(frozen=True, slots=True)
class _Addition(_ChangeBase):
    after: Node | Edge

    def to_dict(self) -> dict[str, Any]:
        return {**_ChangeBase.to_dict(self), "after": self.after.to_dict()}


@dataclass(frozen=True, slots=True)
class _Removal(_ChangeBase):
    before: Node | Edge

    def to_dict(self) -> dict[str, Any]:
        return {**_ChangeBase.to_dict(self), "before": self.before.to_dict()}


@dataclass(frozen=True, slots=True)
class _Modification(_ChangeBase):
    before: Node | Edge
    after: Node | Edge
    field_path: Path
    old_value: Any = MISSING
    new_value: Any = MISSING

    @property
    def path(self) -> Path | None:
        return self.field_path

    def touches(self, key: str) -> bool:
        return key in self.field_path

    def to_dict(self) -> dict[str, Any]:
        out = {
            **_ChangeBase.to_dict(self),
            "before": self.before.to_dict(),
            "after": self.after.to_dict(),
            "path": list(self.field_path),
        }
        # Absent sides are omitted rather than encoded as null
        if self.old_value is not MISSING:
            out["old_value"] = self.old_value
        if self.new_value is not MISSING:
            out["new_value"] = self.new_value
        return out


@dataclass(frozen=True, slots=True)
class NodeAdded(_Addition):
    type: ClassVar[ChangeType] = "node_added"
    entity: ClassVar[EntityKind] = "node"


@dataclass(frozen=True, slots=True)
class NodeRemoved(_Removal):
    type: ClassVar[ChangeType] = "node_removed"
    entity: ClassVar[EntityKind] = "node"


@dataclass(frozen=True, slots=True)
class NodeModified(_Modification):
    type: ClassVar[ChangeType] = "node_modified"
    entity: ClassVar[EntityKind] = "node"


@dataclass(frozen=True, slots=True)
class EdgeAdded(_Addition):
    type: ClassVar[ChangeType] = "edge_added"
    entity: ClassVar[EntityKind] = "edge"


@dataclass(frozen=True, slots=True)
class EdgeRemoved(_Removal):
    type: ClassVar[ChangeType] = "edge_removed"
    entity: ClassVar[EntityKind] = "edge"


@dataclass(frozen=True, slots=True)
class EdgeModified(_Modification):
    type: ClassVar[ChangeType] = "edge_modified"
    entity: ClassVar[EntityKind] = "edge"


Change: TypeAlias = NodeAdded | NodeRemoved | NodeModified | EdgeAdded | EdgeRemoved | EdgeModified
Modification: TypeAlias = NodeModified | EdgeModified


# =============================================================================
# Conflicts, statistics, diff
# =============================================================================


@dataclass(frozen=True, slots=True)
class ConflictResolution:
    strategy: Strategy
    description: str
    confidence: float
    result: Node | Edge | None = None


@dataclass(frozen=True, slots=True)
class Conflict:
    id: str
    type: ConflictType
    description: str
    entities: tuple[str, ...]
    severity: Severity
    resolution_strategies: tuple[ConflictResolution, ...] = ()


@dataclass(frozen=True, slots=True)
class DiffStatistics:
    nodes_added: int = 0
    nodes_removed: int = 0
    nodes_modified: int = 0
    edges_added: int = 0
    edges_removed: int = 0
    edges_modified: int = 0
    total_changes: int = 0
    similarity: float = 1.0  # 0-1 scale
    complexity: float = 0.0  # 0-1 scale


@dataclass(frozen=True, slots=True)
class GraphDiff:
    """Result of one comparison. Never mutated after construction."""

    id: str
    source_version: str
    target_version: str
    changes: tuple[Change, ...]
    statistics: DiffStatistics
    conflicts: tuple[Conflict, ...] = ()
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def has_changes(self) -> bool:
        return bool(self.changes)

    @property
    def breaking_changes(self) -> tuple[Change, ...]:
        return tuple(c for c in self.changes if c.is_breaking)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source_version": self.source_version,
            "target_version": self.target_version,
            "timestamp": self.timestamp.isoformat(),
            "changes": [c.to_dict() for c in self.changes],
            "statistics": asdict(self.statistics),
            "conflicts": [asdict(c) for c in self.conflicts],
        }


@dataclass(frozen=True, slots=True)
class DiffHighlight:
    """Per-change row consumed by external visualization layers."""

    entity_id: str
    entity_type: EntityKind
    change_type: ChangeType
    impact: Impact
    description: str


@dataclass(frozen=True, slots=True)
class DiffOptions:
    """Options for a single comparison.

    ``custom_comparators`` maps a dotted path (``"data.config.timeout"``), a
    bare key (``"timeout"``) or a value kind (``"kind:string"``) to a
    predicate returning True when both values should count as equal.
    ``context_window`` is accepted for forward compatibility and unused.
    """

    ignore_metadata: bool = False
    ignore_timestamps: bool = False
    semantic_diff: bool = False
    include_conflict_resolution: bool = False
    custom_comparators: Mapping[str, Comparator] = field(default_factory=dict)
    context_window: int = 0
    max_depth: int = MAX_DIFF_DEPTH_DEFAULT
    forbidden_transitions: frozenset[tuple[str, str]] = field(
        default_factory=lambda: parse_transitions(DEFAULT_FORBIDDEN_TRANSITIONS)
    )

    @classmethod
    def from_config(cls, config: DiffConfig, **overrides: Any) -> DiffOptions:
        values: dict[str, Any] = {
            "ignore_metadata": config.ignore_metadata,
            "ignore_timestamps": config.ignore_timestamps,
            "semantic_diff": config.semantic_diff,
            "include_conflict_resolution": config.include_conflict_resolution,
            "max_depth": config.max_depth,
            "forbidden_transitions": config.transition_pairs(),
        }
        values.update(overrides)
        return cls(**values)

    def with_transitions(self, *pairs: tuple[str, str]) -> DiffOptions:
        """Copy with extra forbidden (old, new) type transitions."""
        return replace(self, forbidden_transitions=self.forbidden_transitions | frozenset(pairs))
