"""Graph model exports."""

from graphdelta.graph.models import (
    Edge,
    EntityKind,
    GraphSnapshot,
    GraphVersion,
    Node,
    VersionMetadata,
)

__all__ = [
    "Edge",
    "EntityKind",
    "GraphSnapshot",
    "GraphVersion",
    "Node",
    "VersionMetadata",
]
