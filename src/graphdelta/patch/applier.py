"""Replay a GraphPatch against a snapshot.

The input snapshot is never modified. The applier converts it into a
working copy of plain dicts keyed by entity id (insertion ordered), runs the
operations in order and rebuilds typed entities at the end.

Failure modes:
- checksum mismatch: ``IntegrityError`` before anything runs
- remove/replace of an absent entity: ``NotFoundError``, apply aborts
- any other invalid operation: skipped and reported as an
  ``OperationFailure`` (or ``PatchError`` when ``strict``)
"""

from __future__ import annotations

import copy
import re
from typing import Any

import structlog

from graphdelta.core.errors import IntegrityError, NotFoundError, PatchError
from graphdelta.diff.models import MISSING
from graphdelta.graph.models import Edge, GraphSnapshot, Node
from graphdelta.patch.compiler import compute_checksum
from graphdelta.patch.models import GraphPatch, OperationFailure, PatchOperation, PatchResult
from graphdelta.patch.pointer import parse_path

log = structlog.get_logger(__name__)

_REQUIRED_FIELDS = {
    "nodes": frozenset({"id"}),
    "edges": frozenset({"id", "source", "target"}),
}
_STRING_FIELDS = ("type", "source", "target")
_INDEX_RE = re.compile(r"0|[1-9][0-9]*")


class _Rejected(Exception):
    """Internal signal: the current operation cannot be applied."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class PatchApplier:
    """Apply patches to snapshots.

    Args:
        verify_checksum: Refuse patches whose checksum does not match
        strict: Raise on the first invalid operation instead of skipping it
    """

    def __init__(self, *, verify_checksum: bool = True, strict: bool = False) -> None:
        self._verify = verify_checksum
        self._strict = strict

    def apply(self, snapshot: GraphSnapshot, patch: GraphPatch) -> PatchResult:
        if self._verify:
            actual = compute_checksum(patch.operations)
            if actual != patch.checksum:
                raise IntegrityError.checksum_mismatch(patch.id, patch.checksum, actual)

        working: dict[str, dict[str, dict[str, Any]]] = {
            "nodes": {n.id: n.to_dict() for n in snapshot.nodes},
            "edges": {e.id: e.to_dict() for e in snapshot.edges},
        }

        applied = 0
        failures: list[OperationFailure] = []
        for index, operation in enumerate(patch.operations):
            try:
                self._apply_one(working, operation, index)
            except _Rejected as e:
                if self._strict:
                    raise PatchError.invalid_operation(
                        index, operation.op, operation.path, e.reason
                    ) from e
                failures.append(
                    OperationFailure(
                        index=index, op=operation.op, path=operation.path, reason=e.reason
                    )
                )
                log.warning(
                    "patch_operation_failed",
                    patch_id=patch.id,
                    index=index,
                    op=operation.op,
                    path=operation.path,
                    reason=e.reason,
                )
                continue
            applied += 1

        result = PatchResult(
            snapshot=GraphSnapshot(
                nodes=tuple(Node.from_dict(n) for n in working["nodes"].values()),
                edges=tuple(Edge.from_dict(e) for e in working["edges"].values()),
            ),
            applied=applied,
            failures=tuple(failures),
        )
        log.debug("patch_applied", patch_id=patch.id, applied=applied, failed=len(failures))
        return result

    # =========================================================================
    # Operations
    # =========================================================================

    def _apply_one(
        self,
        working: dict[str, dict[str, dict[str, Any]]],
        operation: PatchOperation,
        index: int,
    ) -> None:
        collection, entity_id, segments = _parse(operation.path)
        entities = working[collection]
        op = operation.op

        if op == "add":
            if not segments:
                entities[entity_id] = _entity_value(collection, entity_id, operation.value)
                return
            entity = _existing(entities, entity_id)
            entities[entity_id] = _with_value(entity, segments, operation.value)
            return

        if op == "remove":
            if entity_id not in entities:
                raise NotFoundError.entity(collection, entity_id, index=index)
            if not segments:
                del entities[entity_id]
                return
            entities[entity_id] = _without(collection, entities[entity_id], segments)
            return

        if op == "replace":
            if entity_id not in entities:
                raise NotFoundError.entity(collection, entity_id, index=index)
            if not segments:
                entities[entity_id] = _entity_value(collection, entity_id, operation.value)
                return
            entity = entities[entity_id]
            entities[entity_id] = _with_value(entity, segments, operation.value)
            return

        if op == "test":
            entity = _existing(entities, entity_id)
            actual = _read(entity, segments) if segments else entity
            if actual != operation.value:
                raise _Rejected(f"test failed: expected {operation.value!r}, found {actual!r}")
            return

        if op in ("move", "copy"):
            if operation.from_ is None:
                raise _Rejected(f"{op} requires 'from'")
            from_collection, from_id, from_segments = _parse(operation.from_)
            if from_collection != collection:
                raise _Rejected(f"{op} across collections is not supported")
            if not segments or not from_segments:
                raise _Rejected(f"{op} works on entity fields, not whole entities")

            source_entity = _existing(entities, from_id)
            value = copy.deepcopy(_read(source_entity, from_segments))
            staged: dict[str, dict[str, Any]] = {}
            if op == "move":
                staged[from_id] = _without(collection, source_entity, from_segments)
            target_entity = staged.get(entity_id) or _existing(entities, entity_id)
            staged[entity_id] = _with_value(target_entity, segments, value)
            entities.update(staged)
            return

        raise _Rejected(f"unknown op {op!r}")


# =============================================================================
# Helpers
# =============================================================================


def _parse(path: str) -> tuple[str, str, tuple[str, ...]]:
    try:
        return parse_path(path)
    except PatchError as e:
        raise _Rejected(str(e.details.get("reason", e.message))) from e


def _existing(entities: dict[str, dict[str, Any]], entity_id: str) -> dict[str, Any]:
    entity = entities.get(entity_id)
    if entity is None:
        raise _Rejected(f"no entity {entity_id!r}")
    return entity


def _entity_value(collection: str, entity_id: str, value: Any) -> dict[str, Any]:
    """Validate a whole-entity value and return a private copy."""
    if value is MISSING or not isinstance(value, dict):
        raise _Rejected("value must be an entity object")
    if value.get("id") != entity_id:
        raise _Rejected(f"value id {value.get('id')!r} does not match path id {entity_id!r}")
    missing = [k for k in _REQUIRED_FIELDS[collection] if k not in value]
    if missing:
        raise _Rejected(f"value is missing {', '.join(sorted(missing))}")
    entity = copy.deepcopy(value)
    entity.setdefault("type", "")
    entity.setdefault("data", {})
    _check_shape(entity)
    return entity


def _with_value(
    entity: dict[str, Any], segments: tuple[str, ...], value: Any
) -> dict[str, Any]:
    """Copy of ``entity`` with ``value`` set at ``segments``."""
    if value is MISSING:
        raise _Rejected("operation has no value")
    if segments[0] == "id":
        raise _Rejected("entity id cannot be changed")

    updated = copy.deepcopy(entity)
    parent: Any = updated
    for segment in segments[:-1]:
        parent = _child(parent, segment, create=True)

    last = segments[-1]
    if isinstance(parent, dict):
        parent[last] = copy.deepcopy(value)
    elif isinstance(parent, list):
        if last == "-":
            parent.append(copy.deepcopy(value))
        else:
            parent[_index(parent, last)] = copy.deepcopy(value)
    else:
        raise _Rejected(f"cannot set {last!r} on a scalar")
    _check_shape(updated)
    return updated


def _without(collection: str, entity: dict[str, Any], segments: tuple[str, ...]) -> dict[str, Any]:
    """Copy of ``entity`` with the member at ``segments`` removed."""
    if len(segments) == 1 and segments[0] in _REQUIRED_FIELDS[collection]:
        raise _Rejected(f"required field {segments[0]!r} cannot be removed")

    updated = copy.deepcopy(entity)
    parent: Any = updated
    for segment in segments[:-1]:
        parent = _child(parent, segment, create=False)

    last = segments[-1]
    if isinstance(parent, dict):
        if last not in parent:
            raise _Rejected(f"no field {last!r}")
        del parent[last]
    elif isinstance(parent, list):
        del parent[_index(parent, last)]
    else:
        raise _Rejected(f"cannot remove {last!r} from a scalar")
    return updated


def _check_shape(entity: dict[str, Any]) -> None:
    """Reject top-level fields the typed entity could not be rebuilt from."""
    for key in _STRING_FIELDS:
        if key in entity and not isinstance(entity[key], str):
            raise _Rejected(f"field {key!r} must be a string")
    if "data" in entity and not isinstance(entity["data"], dict):
        raise _Rejected("field 'data' must be an object")


def _read(entity: dict[str, Any], segments: tuple[str, ...]) -> Any:
    value: Any = entity
    for segment in segments:
        value = _child(value, segment, create=False)
    return value


def _child(container: Any, segment: str, *, create: bool) -> Any:
    if isinstance(container, dict):
        if segment not in container:
            if not create:
                raise _Rejected(f"no field {segment!r}")
            container[segment] = {}
        return container[segment]
    if isinstance(container, list):
        return container[_index(container, segment)]
    raise _Rejected(f"cannot descend into scalar at {segment!r}")


def _index(items: list[Any], segment: str) -> int:
    if not _INDEX_RE.fullmatch(segment):
        raise _Rejected(f"list index must be a non-negative integer, got {segment!r}")
    idx = int(segment)
    if idx >= len(items):
        raise _Rejected(f"list index {idx} out of range")
    return idx
