"""Renderer-facing views of a diff: highlight rows and one-line summaries."""

from __future__ import annotations

from collections.abc import Iterable

from graphdelta.config.constants import SUMMARY_NAME_LIMIT
from graphdelta.diff.models import Change, DiffHighlight, GraphDiff


def build_highlights(diff: GraphDiff) -> list[DiffHighlight]:
    """One highlight row per change, in change order."""
    return [
        DiffHighlight(
            entity_id=change.entity_id,
            entity_type=change.entity,
            change_type=change.type,
            impact=change.semantic.impact,
            description=change.semantic.description,
        )
        for change in diff.changes
    ]


def build_summary(changes: Iterable[Change]) -> str:
    """Count changes by kind, e.g. ``1 edge removed, 2 node modified``."""
    counts: dict[str, int] = {}
    for c in changes:
        key = c.type.replace("_", " ")
        counts[key] = counts.get(key, 0) + 1

    if not counts:
        return "No changes detected"

    parts = [f"{count} {kind}" for kind, count in sorted(counts.items())]
    return ", ".join(parts)


def build_breaking_summary(changes: Iterable[Change]) -> str | None:
    """Summary of breaking changes, or None if none."""
    breaking = list(dict.fromkeys(c.entity_id for c in changes if c.is_breaking))
    if not breaking:
        return None

    n = len(breaking)
    names = ", ".join(breaking[:SUMMARY_NAME_LIMIT])
    suffix = f" (and {n - SUMMARY_NAME_LIMIT} more)" if n > SUMMARY_NAME_LIMIT else ""
    return f"{n} entit{'ies' if n != 1 else 'y'} with breaking changes: {names}{suffix}"
