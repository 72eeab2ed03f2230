"""Semantic classification of raw changes.

Three layers, applied in order:
1. data-impact rule for data leaf differences (used by the comparator)
2. semantic analysis (connectivity, behavioral paths, migration hints),
   only when requested
3. user-registered classification rules

Every step returns new change objects; inputs are never modified.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

import structlog

from graphdelta.config.constants import BEHAVIORAL_PATH_KEYS
from graphdelta.diff.deep import value_kind
from graphdelta.diff.models import (
    MISSING,
    Change,
    EdgeModified,
    EdgeRemoved,
    Impact,
    Migration,
    NodeModified,
    NodeRemoved,
)
from graphdelta.diff.rules import RuleRegistry
from graphdelta.graph.models import GraphSnapshot

log = structlog.get_logger(__name__)


def data_impact(old_value: Any, new_value: Any) -> Impact:
    """Impact of a single data leaf difference."""
    if old_value is MISSING:
        return "enhancement"
    if new_value is MISSING:
        return "breaking"
    if value_kind(old_value) != value_kind(new_value):
        return "breaking"
    return "compatible"


def connectivity_impact(change: Change, source: GraphSnapshot, target: GraphSnapshot) -> Impact:
    """Impact of an edge change judged by whole-graph connectivity.

    Only removals are re-judged; other edge changes keep their impact.
    """
    if change.type != "edge_removed":
        return change.semantic.impact
    if target.connectivity() < source.connectivity():
        return "breaking"
    return "compatible"


def migrations_for(change: Change) -> tuple[Migration, ...]:
    """Advisory migration hints for a breaking change."""
    if isinstance(change, NodeRemoved):
        return (
            Migration(
                type="manual",
                description=f"Manually handle removal of node {change.entity_id}",
                instructions=(
                    f"Review and update all references to node {change.entity_id} before removal"
                ),
            ),
        )
    if isinstance(change, EdgeRemoved):
        return (
            Migration(
                type="automatic",
                description=f"Update references to removed edge {change.entity_id}",
                code=f"# drop references to edge {change.entity_id}\n# update graph structure",
            ),
        )
    if isinstance(change, (NodeModified, EdgeModified)) and change.touches("type"):
        kind = change.entity
        return (
            Migration(
                type="data_transform",
                description=f"Transform {kind} data for type change",
                code=(
                    f"{kind}.data = transform_data({kind}.data, "
                    f"{change.old_value!r}, {change.new_value!r})"
                ),
            ),
        )
    return ()


class ChangeClassifier:
    """Enrich raw changes with semantic analysis and registered rules."""

    def __init__(self, rules: RuleRegistry | None = None) -> None:
        self._rules = rules if rules is not None else RuleRegistry()

    @property
    def rules(self) -> RuleRegistry:
        return self._rules

    def classify(
        self,
        changes: list[Change] | tuple[Change, ...],
        source: GraphSnapshot,
        target: GraphSnapshot,
        *,
        semantic: bool = False,
    ) -> list[Change]:
        enriched: list[Change] = []
        for change in changes:
            if semantic:
                change = self._analyze(change, source, target)
            if len(self._rules):
                before = change.semantic.impact
                change = self._rules.apply(change)
                if semantic and change.semantic.impact != before:
                    change = _refresh_migrations(change)
            enriched.append(change)
        log.debug(
            "changes_classified",
            changes=len(enriched),
            semantic=semantic,
            rules=len(self._rules),
        )
        return enriched

    def _analyze(self, change: Change, source: GraphSnapshot, target: GraphSnapshot) -> Change:
        semantic = change.semantic
        category = semantic.category
        impact = semantic.impact

        if change.entity == "edge":
            impact = connectivity_impact(change, source, target)

        path = change.path
        if path is not None and any(key in BEHAVIORAL_PATH_KEYS for key in path):
            category = "behavioral"
            impact = "breaking"

        migrations = semantic.migrations
        if impact == "breaking":
            migrations = migrations_for(change)

        unchanged = (semantic.category, semantic.impact, semantic.migrations)
        if (category, impact, migrations) == unchanged:
            return change
        return replace(
            change,
            semantic=replace(semantic, category=category, impact=impact, migrations=migrations),
        )


def _refresh_migrations(change: Change) -> Change:
    """Re-derive migration hints after a rule moved the impact."""
    migrations = migrations_for(change) if change.semantic.impact == "breaking" else ()
    if migrations == change.semantic.migrations:
        return change
    return replace(change, semantic=replace(change.semantic, migrations=migrations))
