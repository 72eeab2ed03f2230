"""Compile a GraphDiff into an ordered, checksummed patch."""

from __future__ import annotations

import copy
import hashlib
import json
from collections.abc import Iterable

import structlog

from graphdelta.config.constants import DEFAULT_PATCH_AUTHOR
from graphdelta.core.ids import new_id
from graphdelta.diff.comparator import CONNECTION_PATH
from graphdelta.diff.models import (
    MISSING,
    Change,
    EdgeModified,
    GraphDiff,
    NodeModified,
)
from graphdelta.graph.models import Edge
from graphdelta.patch.models import (
    GraphPatch,
    NonPatchableChange,
    PatchMetadata,
    PatchOperation,
)
from graphdelta.patch.pointer import entity_path

log = structlog.get_logger(__name__)

_COLLECTION = {"node": "nodes", "edge": "edges"}


def compute_checksum(operations: Iterable[PatchOperation]) -> str:
    """SHA-256 over the canonical JSON of the operation list.

    Order-sensitive: reordering operations changes the checksum.
    """
    payload = [op.to_dict() for op in operations]
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def verify_checksum(patch: GraphPatch) -> bool:
    return compute_checksum(patch.operations) == patch.checksum


class PatchCompiler:
    """Translate changes into patch operations, one change at a time."""

    def __init__(self, created_by: str = DEFAULT_PATCH_AUTHOR) -> None:
        self._created_by = created_by

    def compile(self, diff: GraphDiff, *, description: str | None = None) -> GraphPatch:
        operations: list[PatchOperation] = []
        unpatched: list[NonPatchableChange] = []

        for change in diff.changes:
            ops, reason = self._operations_for(change)
            if reason is not None:
                unpatched.append(
                    NonPatchableChange(
                        change_id=change.change_id,
                        entity_id=change.entity_id,
                        reason=reason,
                    )
                )
                log.info(
                    "change_not_patchable",
                    change_id=change.change_id,
                    entity_id=change.entity_id,
                    reason=reason,
                )
                continue
            operations.extend(ops)

        patch = GraphPatch(
            id=new_id("patch"),
            source_version=diff.source_version,
            target_version=diff.target_version,
            operations=tuple(operations),
            checksum=compute_checksum(operations),
            metadata=PatchMetadata(
                created_by=self._created_by,
                description=description
                or f"Patch from {diff.source_version} to {diff.target_version}",
            ),
            unpatched=tuple(unpatched),
        )
        log.debug(
            "patch_compiled",
            patch_id=patch.id,
            diff_id=diff.id,
            operations=len(operations),
            unpatched=len(unpatched),
        )
        return patch

    def _operations_for(self, change: Change) -> tuple[list[PatchOperation], str | None]:
        """Operations for one change, or a reason it cannot be expressed."""
        collection = _COLLECTION[change.entity]

        if change.type in ("node_added", "edge_added"):
            return [
                PatchOperation(
                    op="add",
                    path=entity_path(collection, change.entity_id),
                    value=change.after.to_dict(),  # type: ignore[union-attr]
                )
            ], None

        if change.type in ("node_removed", "edge_removed"):
            path = entity_path(collection, change.entity_id)
            return [PatchOperation(op="remove", path=path)], None

        assert isinstance(change, (NodeModified, EdgeModified))
        if not change.field_path:
            return [], "modification has no field path"
        if change.new_value is MISSING:
            return [], f"field {'.'.join(change.field_path)} was removed"

        if change.field_path == CONNECTION_PATH:
            after = change.after
            assert isinstance(after, Edge)
            return [
                PatchOperation(
                    op="replace",
                    path=entity_path(collection, change.entity_id, "source"),
                    value=after.source,
                ),
                PatchOperation(
                    op="replace",
                    path=entity_path(collection, change.entity_id, "target"),
                    value=after.target,
                ),
            ], None

        return [
            PatchOperation(
                op="replace",
                path=entity_path(collection, change.entity_id, *change.field_path),
                value=copy.deepcopy(change.new_value),
            )
        ], None
