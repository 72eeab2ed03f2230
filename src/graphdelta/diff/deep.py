"""Generic recursive comparison of JSON-like values.

Produces path-tagged leaf differences. Knows nothing about graphs; the
comparator layer decides what the paths mean.

Rules:
- kind mismatch (null vs. anything else included) -> one leaf at the path
- arrays of different length -> one leaf at the array path
- arrays of equal length -> recurse per index
- objects -> union of keys; one-sided keys yield a leaf with MISSING
"""

from __future__ import annotations

import math
from typing import Any

import structlog

from graphdelta.config.constants import METADATA_FIELDS, TIMESTAMP_FIELDS
from graphdelta.core.errors import DiffError
from graphdelta.diff.models import MISSING, Comparator, DiffOptions, LeafDifference, Path

log = structlog.get_logger(__name__)

_NO_MATCH = object()


def value_kind(value: Any) -> str:
    """JSON kind of a value: null, boolean, number, string, array, object.

    Anything else (dates, custom objects) reports its Python type name so
    two different exotic types never compare as the same kind.
    """
    if value is MISSING:
        return "missing"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


class DeepDiffer:
    """Recursive differ bound to one set of options.

    ``comparator_failures`` counts custom comparators that raised and were
    ignored during this differ's lifetime.
    """

    def __init__(self, options: DiffOptions | None = None) -> None:
        self._options = options or DiffOptions()
        self._skip: frozenset[str] = frozenset()
        if self._options.ignore_metadata:
            self._skip |= METADATA_FIELDS
        if self._options.ignore_timestamps:
            self._skip |= TIMESTAMP_FIELDS
        self.comparator_failures = 0

    def diff(self, source: Any, target: Any, base_path: Path = ()) -> list[LeafDifference]:
        """Compare two values and return their leaf differences.

        Raises:
            DiffError: nesting exceeds ``options.max_depth``.
        """
        out: list[LeafDifference] = []
        try:
            self._walk(source, target, tuple(base_path), 0, out)
        except RecursionError as e:
            # max_depth set past what the interpreter stack can hold
            raise DiffError.depth_exceeded(tuple(base_path), self._options.max_depth) from e
        return out

    def _walk(
        self,
        source: Any,
        target: Any,
        path: Path,
        depth: int,
        out: list[LeafDifference],
    ) -> None:
        if depth > self._options.max_depth:
            raise DiffError.depth_exceeded(path, self._options.max_depth)

        custom = self._custom_equal(source, target, path)
        if custom is not _NO_MATCH:
            if not custom:
                out.append(LeafDifference(path, source, target))
            return

        kind = value_kind(source)
        if kind != value_kind(target):
            out.append(LeafDifference(path, source, target))
            return

        if kind == "array":
            if len(source) != len(target):
                out.append(LeafDifference(path, source, target))
                return
            for i, (a, b) in enumerate(zip(source, target, strict=True)):
                self._walk(a, b, (*path, str(i)), depth + 1, out)
            return

        if kind == "object":
            # Source key order first, then keys that only the target has
            keys = list(source)
            keys.extend(k for k in target if k not in source)
            for key in keys:
                if key in self._skip:
                    continue
                child = (*path, str(key))
                if key not in source:
                    out.append(LeafDifference(child, MISSING, target[key]))
                elif key not in target:
                    out.append(LeafDifference(child, source[key], MISSING))
                else:
                    self._walk(source[key], target[key], child, depth + 1, out)
            return

        if not _scalar_equal(source, target):
            out.append(LeafDifference(path, source, target))

    def _custom_equal(self, source: Any, target: Any, path: Path) -> Any:
        """Run the first matching custom comparator.

        Returns the comparator's verdict, or _NO_MATCH when none applies
        (including when the matching comparator raised).
        """
        comparators = self._options.custom_comparators
        if not comparators:
            return _NO_MATCH

        comparator = _lookup(comparators, source, path)
        if comparator is None:
            return _NO_MATCH
        try:
            return bool(comparator(source, target))
        except Exception:
            self.comparator_failures += 1
            log.warning("comparator_failed", path=".".join(path), exc_info=True)
            return _NO_MATCH


def _scalar_equal(source: Any, target: Any) -> bool:
    """Equality that also treats two NaN floats as the same value."""
    if source == target:
        return True
    return (
        isinstance(source, float)
        and isinstance(target, float)
        and math.isnan(source)
        and math.isnan(target)
    )


def _lookup(comparators: Any, source: Any, path: Path) -> Comparator | None:
    candidates = []
    if path:
        candidates.append(".".join(path))
        candidates.append(path[-1])
    candidates.append(f"kind:{value_kind(source)}")
    for key in candidates:
        comparator = comparators.get(key)
        if comparator is not None:
            return comparator  # type: ignore[no-any-return]
    return None


def diff_values(
    source: Any,
    target: Any,
    base_path: Path = (),
    options: DiffOptions | None = None,
) -> list[LeafDifference]:
    """Functional entry point: ``DeepDiffer(options).diff(...)``."""
    return DeepDiffer(options).diff(source, target, base_path)
