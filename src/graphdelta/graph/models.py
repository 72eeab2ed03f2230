"""Graph value types: nodes, edges, snapshots and stored versions.

Entities reference each other only by string id. A snapshot is an arena of
nodes and edges; lookups go through id maps built on demand, never through
object references.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

EntityKind = Literal["node", "edge"]


@dataclass(frozen=True, slots=True)
class Node:
    """A code entity (component, function, class, ...)."""

    id: str
    type: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.type, "data": _clone(self.data)}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Node:
        return cls(
            id=str(raw["id"]),
            type=str(raw.get("type", "")),
            data=dict(raw.get("data") or {}),
        )


@dataclass(frozen=True, slots=True)
class Edge:
    """A directed relation between two nodes, by id."""

    id: str
    source: str
    target: str
    type: str
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def endpoints(self) -> tuple[str, str]:
        return (self.source, self.target)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "type": self.type,
            "data": _clone(self.data),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Edge:
        return cls(
            id=str(raw["id"]),
            source=str(raw["source"]),
            target=str(raw["target"]),
            type=str(raw.get("type", "")),
            data=dict(raw.get("data") or {}),
        )


@dataclass(frozen=True, slots=True)
class GraphSnapshot:
    """Immutable point-in-time graph state.

    Ids are expected to be unique per collection. Duplicates are not
    rejected here; the conflict detector reports them.
    """

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()

    def __post_init__(self) -> None:
        # Accept lists from callers while keeping the stored value immutable
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "edges", tuple(self.edges))

    @property
    def size(self) -> int:
        """Entity count (nodes + edges)."""
        return len(self.nodes) + len(self.edges)

    def node_map(self) -> dict[str, Node]:
        return {n.id: n for n in self.nodes}

    def edge_map(self) -> dict[str, Edge]:
        return {e.id: e for e in self.edges}

    def node_ids(self) -> set[str]:
        return {n.id for n in self.nodes}

    def edge_ids(self) -> set[str]:
        return {e.id for e in self.edges}

    def duplicate_node_ids(self) -> list[str]:
        return _duplicates(n.id for n in self.nodes)

    def duplicate_edge_ids(self) -> list[str]:
        return _duplicates(e.id for e in self.edges)

    def connectivity(self) -> float:
        """Edges per node; the coarse measure used by semantic analysis."""
        return len(self.edges) / max(1, len(self.nodes))

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> GraphSnapshot:
        return cls(
            nodes=tuple(Node.from_dict(n) for n in raw.get("nodes", [])),
            edges=tuple(Edge.from_dict(e) for e in raw.get("edges", [])),
        )


@dataclass(frozen=True, slots=True)
class VersionMetadata:
    """Descriptive metadata attached to a stored version."""

    version: str = ""
    tags: tuple[str, ...] = ()
    branch: str | None = None
    parent_versions: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class GraphVersion:
    """A named snapshot registered in the version store."""

    id: str
    graph: GraphSnapshot
    author: str = ""
    message: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    metadata: VersionMetadata = field(default_factory=VersionMetadata)


def _duplicates(ids: Any) -> list[str]:
    counts = Counter(ids)
    return [i for i, n in counts.items() if n > 1]


def _clone(value: Any) -> Any:
    """Structural copy of a JSON-like value."""
    if isinstance(value, dict):
        return {k: _clone(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_clone(v) for v in value]
    return value
