"""Typed classification rules.

A rule pairs a predicate over a ``Change`` with the category and/or impact
to assign when it matches. Rules are plain callables registered ahead of
time; nothing is compiled from strings. The predicate factories below cover
the common cases and compose with ``all_of`` / ``any_of`` / ``not_``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace

import structlog

from graphdelta.config.constants import METADATA_FIELDS
from graphdelta.diff.models import Category, Change, ChangeType, Impact

log = structlog.get_logger(__name__)

Predicate = Callable[[Change], bool]


@dataclass(frozen=True, slots=True)
class ClassificationRule:
    """Override the semantics of matching changes."""

    name: str
    predicate: Predicate
    category: Category | None = None
    impact: Impact | None = None
    description: str | None = None

    def apply(self, change: Change) -> Change:
        """Return the change with this rule's overrides applied."""
        semantic = change.semantic
        updates = {}
        if self.category is not None:
            updates["category"] = self.category
        if self.impact is not None:
            updates["impact"] = self.impact
        if self.description is not None:
            updates["description"] = self.description
        if not updates:
            return change
        return replace(change, semantic=replace(semantic, **updates))


class RuleRegistry:
    """Ordered collection of classification rules.

    Later rules see the output of earlier ones. ``failures`` counts
    predicates that raised and were skipped.
    """

    def __init__(self, rules: list[ClassificationRule] | None = None) -> None:
        self._rules: dict[str, ClassificationRule] = {}
        self.failures = 0
        for rule in rules or []:
            self.register(rule)

    def register(self, rule: ClassificationRule) -> None:
        """Register a rule, replacing any previous rule with the same name."""
        self._rules.pop(rule.name, None)
        self._rules[rule.name] = rule

    def unregister(self, name: str) -> bool:
        return self._rules.pop(name, None) is not None

    def get(self, name: str) -> ClassificationRule | None:
        return self._rules.get(name)

    def all(self) -> list[ClassificationRule]:
        return list(self._rules.values())

    def clear(self) -> None:
        self._rules.clear()

    def __len__(self) -> int:
        return len(self._rules)

    def apply(self, change: Change) -> Change:
        """Run every rule against one change."""
        for rule in self._rules.values():
            try:
                matched = rule.predicate(change)
            except Exception:
                self.failures += 1
                log.warning(
                    "rule_predicate_failed",
                    rule=rule.name,
                    change_id=change.change_id,
                    exc_info=True,
                )
                continue
            if matched:
                change = rule.apply(change)
        return change


# =============================================================================
# Predicate factories
# =============================================================================


def change_type_is(*types: ChangeType) -> Predicate:
    wanted = frozenset(types)
    return lambda change: change.type in wanted


def entity_type_is(*entity_types: str) -> Predicate:
    """Match on the node/edge ``type`` of the entity (after side when present)."""
    wanted = frozenset(entity_types)

    def _pred(change: Change) -> bool:
        entity = getattr(change, "after", None) or getattr(change, "before", None)
        return entity is not None and entity.type in wanted

    return _pred


def path_contains(key: str) -> Predicate:
    return lambda change: change.path is not None and key in change.path


def path_startswith(*prefix: str) -> Predicate:
    n = len(prefix)
    return lambda change: change.path is not None and change.path[:n] == prefix


def all_of(*predicates: Predicate) -> Predicate:
    return lambda change: all(p(change) for p in predicates)


def any_of(*predicates: Predicate) -> Predicate:
    return lambda change: any(p(change) for p in predicates)


def not_(predicate: Predicate) -> Predicate:
    return lambda change: not predicate(change)


def metadata_is_cosmetic() -> ClassificationRule:
    """Stock rule: edits under metadata-like data keys are cosmetic."""
    return ClassificationRule(
        name="metadata_is_cosmetic",
        predicate=all_of(
            change_type_is("node_modified", "edge_modified"),
            any_of(*(path_startswith("data", key) for key in sorted(METADATA_FIELDS))),
        ),
        category="metadata",
        impact="cosmetic",
    )
